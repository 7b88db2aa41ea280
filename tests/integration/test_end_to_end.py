"""
End-to-end summarization of an extracted report tree.
"""

import json

from typer.testing import CliRunner

from conftest import execution, failure_card_html, kpi_cards_html, report_html, run_log, table_html, write_report
from newman_summary.cli import app
from newman_summary.common.config import SummaryConfig
from newman_summary.pipeline import SummaryPipeline


def test_html_only_collection(tmp_path):
    root = tmp_path / "unzipped"
    write_report(
        root,
        "CollectionA",
        report_html(
            kpi_cards_html({"Total Assertions": "10", "Failed": "0"}),
            table_html(
                ["Request", "Assertion", "Message"],
                [["POST /login", "Status code is 200", "Expected 200 but got 500"]],
            ),
        ),
    )
    output = tmp_path / "summary.html"

    context = SummaryPipeline(SummaryConfig(input_dir=str(root), output_path=str(output))).run()

    [entry] = context.report.collections
    assert entry.summary.metric(("total_assertions",)) == "10"
    assert entry.failed == 1
    assert context.report.total_failed == 1

    html = output.read_text(encoding="utf-8")
    assert "<td>CollectionA</td>" in html
    assert "<td>10</td>" in html
    assert '<td class="fail">1</td>' in html
    assert "POST /login" in html
    assert "Status code is 200" in html
    assert "×1" in html
    assert "Expected 200 but got 500" in html
    assert "Parsed from HTML" in html


def test_mixed_sources(tmp_path):
    root = tmp_path / "unzipped"
    token = "s" * 48

    # Structured log: assertions come from report.json, noise filtered, secrets masked
    write_report(
        root,
        "Billing",
        report_html(kpi_cards_html({"Total Assertions": "6", "Total Failed Tests": "5"})),
        log=run_log(
            execution(
                "Create invoice",
                {"assertion": "Status code is 201", "error": {"message": f"got 401 with {token}"}},
                {"assertion": "Status code is 201", "error": {"message": f"got 401 with {token}"}},
                {"assertion": "Has id"},
            ),
            execution("List invoices", {"assertion": "user-agent", "error": {"message": "PostmanRuntime"}}),
        ),
    )

    # Failed tab cards win over tables
    write_report(
        root,
        "Catalog",
        report_html(
            kpi_cards_html({"Total Assertions": "4", "Total Skipped Tests": "2"}),
            table_html(["Request", "Assertion", "Message"], [["GET /ignored", "t", "m"]]),
            failed_tab=failure_card_html(
                "fails-7", "Iteration 1 - AssertionError - GET /products", "Body has items", "expected [] to not be empty"
            ),
        ),
    )

    # Nothing failing
    write_report(root, "Search", report_html(kpi_cards_html({"Total Assertions": "8", "Total Failed Tests": "0"})))

    output = tmp_path / "out" / "summary.html"
    status = tmp_path / "out" / "status.json"
    context = SummaryPipeline(
        SummaryConfig(input_dir=str(root), output_path=str(output), status_path=str(status))
    ).run()

    failed = {entry.summary.name: entry.failed for entry in context.report.collections}
    assert failed == {"Billing": 3, "Catalog": 1, "Search": 0}
    assert context.report.total_failed == 4

    html = output.read_text(encoding="utf-8")
    assert token not in html
    assert "***redacted***" in html
    assert "×2" in html
    assert "From <code>report.json</code>." in html
    assert "user-agent" not in html
    assert "GET /products" in html
    assert "report.html#fails-7" in html
    assert "GET /ignored" not in html
    assert "<th>Skipped</th>" in html
    assert "Failures — Search" not in html

    payload = json.loads(status.read_text(encoding="utf-8"))
    assert [c["name"] for c in payload["collections"]] == ["Billing", "Catalog", "Search"]
    assert payload["collections"][0]["detail_source"] == "log"
    assert payload["collections"][1]["detail_source"] == "html"
    assert payload["collections"][1]["skipped"] == 2


def test_cli_round_trip(tmp_path):
    root = tmp_path / "unzipped"
    write_report(
        root,
        "CollectionA",
        report_html(table_html(["Request", "Assertion", "Message"], [["POST /login", "Status code is 200", "got 500"]])),
    )
    output = tmp_path / "summary.html"

    result = CliRunner().invoke(app, ["summarize", str(root), "-o", str(output), "--fail-on-failures"])

    assert result.exit_code == 2
    assert "POST /login" in output.read_text(encoding="utf-8")
