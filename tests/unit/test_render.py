"""
Unit tests for HTML rendering.
"""

import pytest

from newman_summary.models import CollectionSummary, FailureRecord, RenderWriteError
from newman_summary.reporter.aggregate import aggregate
from newman_summary.reporter.render import (
    NOTE_ALL_FILTERED,
    NOTE_NO_ROWS,
    build_template_context,
    render_summary,
    write_summary,
)


def _html_summary(name="Orders", metrics=None, failures=(), raw=None):
    return CollectionSummary(
        name,
        metrics=metrics or {},
        failures=list(failures),
        source_html_path=f"unzipped/{name}/report.html",
        raw_failure_count=len(failures) if raw is None else raw,
    )


def test_no_failures_notice():
    html = render_summary(aggregate([_html_summary(metrics={"total_assertions": "5"})]))
    assert "No failed tests 🎉" in html
    assert "Failed requests" not in html
    assert "<td>Orders</td>" in html


def test_title_is_used():
    html = render_summary(aggregate([]), title="Nightly run")
    assert "<title>Nightly run</title>" in html
    assert "<h1>Nightly run</h1>" in html


def test_skipped_column_only_when_something_skipped():
    assert "<th>Skipped</th>" not in render_summary(aggregate([_html_summary()]))
    html = render_summary(aggregate([_html_summary(metrics={"skipped": "3"})]))
    assert "<th>Skipped</th>" in html
    assert "<td>3</td>" in html


def test_missing_assertions_placeholder():
    context = build_template_context(aggregate([_html_summary()]))
    assert context["rows"][0]["assertions"] == "-"


def test_failures_grouped_and_linked():
    records = [
        FailureRecord("POST /login", "Status code is 200", "got 500", anchor="#fails-1"),
        FailureRecord("POST /login", "Status code is 200", "got 500"),
        FailureRecord("GET /me", "Body", "empty"),
    ]
    html = render_summary(aggregate([_html_summary(failures=records)]))
    assert "Failed requests" in html
    assert 'href="unzipped/Orders/report.html#fails-1"' in html
    assert "2 failing check(s)" in html
    assert "×2" in html
    assert "×1" in html
    assert "Parsed from HTML" in html


def test_structured_log_source_note():
    summary = CollectionSummary(
        "Api",
        failures=[FailureRecord("GET /a", "t", "m")],
        structured_log=True,
        raw_failure_count=1,
    )
    html = render_summary(aggregate([summary]))
    assert "From <code>report.json</code>." in html
    assert "href=" not in html


def test_passing_collections_have_no_details():
    html = render_summary(
        aggregate([_html_summary("Good"), _html_summary("Bad", failures=[FailureRecord("GET /a", "t", "m")])])
    )
    assert "Failures — Bad" in html
    assert "Failures — Good" not in html


@pytest.mark.parametrize(
    "raw, note",
    [(0, NOTE_NO_ROWS), (3, NOTE_ALL_FILTERED)],
)
def test_empty_detail_notes(raw, note):
    summary = _html_summary(metrics={"total_failed_tests": "3"}, raw=raw)
    html = render_summary(aggregate([summary]))
    assert note in html


def test_text_is_escaped():
    records = [FailureRecord("GET /<script>", "<b>bold</b>", "a & b")]
    html = render_summary(aggregate([_html_summary(failures=records)]))
    assert "<script>" not in html
    assert "&lt;b&gt;bold&lt;/b&gt;" in html
    assert "a &amp; b" in html


def test_document_is_self_contained():
    html = render_summary(aggregate([_html_summary(failures=[FailureRecord("GET /a", "t", "m")])]))
    assert "<link" not in html
    assert "<script" not in html
    assert "http://" not in html and "https://" not in html


def test_write_summary(tmp_path):
    output = write_summary("<html></html>", str(tmp_path / "out" / "summary.html"))
    assert output.read_text(encoding="utf-8") == "<html></html>"


def test_write_summary_failure(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x", encoding="utf-8")
    with pytest.raises(RenderWriteError):
        write_summary("<html></html>", str(blocker / "summary.html"))
