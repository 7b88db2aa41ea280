"""
HTML rendering of an aggregated report.

The document is self-contained: styles are inline and nothing is fetched
from outside. Rendering is a pure function of the AggregatedReport; writing
to disk is a separate step.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from newman_summary.common.logger import get_logger
from newman_summary.models import (
    ASSERTION_KEYS,
    PLACEHOLDER,
    SKIPPED_KEYS,
    SOURCE_HTML,
    SOURCE_LOG,
    AggregatedCollection,
    AggregatedReport,
    RenderWriteError,
)

logger = get_logger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"
TEMPLATE_NAME = "summary.html.j2"
DEFAULT_TITLE = "Newman Test Results Summary"

NOTE_NO_ROWS = "No detailed assertion rows found for failed requests."
NOTE_ALL_FILTERED = "No failed request details after filtering."

_environment: Optional[Environment] = None


def _get_environment() -> Environment:
    global _environment
    if _environment is None:
        _environment = Environment(
            loader=FileSystemLoader(str(TEMPLATE_DIR)),
            autoescape=select_autoescape(default=True, default_for_string=True),
            trim_blocks=True,
            lstrip_blocks=True,
        )
    return _environment


def _request_href(entry: AggregatedCollection, anchor: Optional[str]) -> Optional[str]:
    source = entry.summary.source_html_path
    if not source:
        return None
    base = str(source).replace("\\", "/")
    return f"{base}{anchor}" if anchor else base


def _detail_block(entry: AggregatedCollection) -> Dict[str, Any]:
    summary = entry.summary
    groups = [
        {
            "request": group.request,
            "href": _request_href(entry, group.anchor),
            "total": group.total,
            "checks": [
                {"test": test, "message": message, "count": count}
                for (test, message), count in group.entries.items()
            ],
        }
        for group in entry.groups
    ]
    return {
        "name": summary.name,
        "failed": entry.failed,
        "groups": groups,
        "empty_note": NOTE_ALL_FILTERED if summary.raw_failure_count > 0 else NOTE_NO_ROWS,
        "source": SOURCE_LOG if summary.structured_log else SOURCE_HTML,
    }


def build_template_context(report: AggregatedReport, title: str = DEFAULT_TITLE) -> Dict[str, Any]:
    """Plain-data view of the report handed to the template."""
    show_skipped = report.show_skipped
    rows: List[Dict[str, Any]] = []
    for entry in report.collections:
        summary = entry.summary
        rows.append(
            {
                "name": summary.name,
                "assertions": summary.metric(ASSERTION_KEYS, PLACEHOLDER),
                "failed": entry.failed,
                "skipped": summary.metric(SKIPPED_KEYS, "0"),
            }
        )
    return {
        "title": title,
        "rows": rows,
        "show_skipped": show_skipped,
        "details": [_detail_block(entry) for entry in report.failing],
        "total_failed": report.total_failed,
    }


def render_summary(report: AggregatedReport, title: str = DEFAULT_TITLE) -> str:
    """
    Render the aggregated report as one HTML document.

    Args:
        report: Aggregated report.
        title: Document title and heading.

    Returns:
        The HTML document.
    """
    template = _get_environment().get_template(TEMPLATE_NAME)
    return template.render(**build_template_context(report, title=title))


def write_summary(html: str, output_path: str) -> Path:
    """
    Write the rendered document as UTF-8.

    Raises:
        RenderWriteError: If the file cannot be written.
    """
    output_file = Path(output_path)
    try:
        output_file.parent.mkdir(parents=True, exist_ok=True)
        output_file.write_text(html, encoding="utf-8")
    except OSError as e:
        logger.error(f"Failed to write summary to {output_file}: {e}")
        raise RenderWriteError(f"Cannot write summary to {output_file}: {e}") from e

    logger.info(f"Summary generated: {output_file}")
    return output_file
