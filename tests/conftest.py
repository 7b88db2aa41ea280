"""
Pytest configuration and shared fixtures.
"""

import json
import logging
import sys
from pathlib import Path
from typing import Dict, Iterable, Optional, Sequence

import pytest

# Add project root to path
_project_root = Path(__file__).resolve().parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from newman_summary.common.logger import ROOT_LOGGER_NAME
from newman_summary.common.security import SecretRedactor


def kpi_cards_html(metrics: Dict[str, str]) -> str:
    """KPI cards in the shape written by the htmlextra reporter."""
    cards = []
    for label, value in metrics.items():
        cards.append(
            '<div class="card"><div class="card-body">'
            f'<h6 class="text-uppercase">{label}</h6>'
            f'<h1 class="display-1">{value}</h1>'
            "</div></div>"
        )
    return "".join(cards)


def table_html(headers: Sequence[str], rows: Iterable[Sequence[str]], thead: bool = True) -> str:
    head = "".join(f"<th>{h}</th>" for h in headers)
    body = "".join(
        "<tr>" + "".join(f"<td>{cell}</td>" for cell in row) + "</tr>" for row in rows
    )
    if thead:
        return f"<table><thead><tr>{head}</tr></thead><tbody>{body}</tbody></table>"
    return f"<table><tbody><tr>{head}</tr>{body}</tbody></table>"


def failure_card_html(card_id: str, title: str, test: str, message: str) -> str:
    """One card of the "Failed" tab."""
    return (
        '<div class="card">'
        f'<div class="card-header"><a id="{card_id}" href="#">{title}</a></div>'
        '<div class="card-body">'
        f"<h5>Failed Test: {test}</h5>"
        f"<pre><code>{message}</code></pre>"
        "</div></div>"
    )


def report_html(*parts: str, failed_tab: Optional[str] = None) -> str:
    body = "".join(parts)
    if failed_tab is not None:
        body += f'<div id="pills-failed">{failed_tab}</div>'
    return f"<!DOCTYPE html><html><head><title>Report</title></head><body>{body}</body></html>"


def write_report(
    root: Path,
    collection: str,
    html: str,
    log: Optional[object] = None,
    raw_log: Optional[str] = None,
) -> Path:
    """Write ``<root>/<collection>/report.html`` and an optional ``report.json``."""
    report_dir = root / collection
    report_dir.mkdir(parents=True, exist_ok=True)
    html_path = report_dir / "report.html"
    html_path.write_text(html, encoding="utf-8")
    if log is not None:
        (report_dir / "report.json").write_text(json.dumps(log), encoding="utf-8")
    elif raw_log is not None:
        (report_dir / "report.json").write_text(raw_log, encoding="utf-8")
    return html_path


def run_log(*executions: Dict) -> Dict:
    return {"run": {"executions": list(executions)}}


def execution(request: str, *assertions: Dict) -> Dict:
    return {"item": {"name": request}, "assertions": list(assertions)}


@pytest.fixture
def reports_root(tmp_path):
    root = tmp_path / "unzipped"
    root.mkdir()
    return root


@pytest.fixture
def redactor():
    return SecretRedactor(enabled=True)


@pytest.fixture(autouse=True)
def reset_shared_redactor(monkeypatch):
    """Each test starts without a cached shared redactor."""
    import newman_summary.common.security as security

    monkeypatch.setattr(security, "_redactor", None)
    yield


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers installed by setup_logging; their streams close with the test."""
    yield
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
