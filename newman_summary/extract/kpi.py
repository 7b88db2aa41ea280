"""
KPI extraction from report documents.
"""

import re
from typing import Optional

from bs4 import BeautifulSoup

from newman_summary.common.logger import get_logger
from newman_summary.extract.dom import (
    FirstOf,
    body_rows,
    parse_html,
    row_cells,
    text_of,
    thead_headers,
)
from newman_summary.models import FAILED_KEYS, CollectionSummary, normalize_key, to_number

logger = get_logger(__name__)

# Card label / value shapes, oldest generator last
CARD_LABEL = FirstOf("h6.text-uppercase")
CARD_VALUE = FirstOf("h1.display-1", "h1.display-4")
LEGACY_LABEL = FirstOf(".label")
LEGACY_VALUE = FirstOf(".value")

FAILED_HEADER_RE = re.compile(r"\bfailed?\b", re.IGNORECASE)


def extract_kpis(html, collection_name: str) -> CollectionSummary:
    """
    Read the KPI cards of one report into a CollectionSummary.

    When the failed-count card is missing or zero, the largest per-table sum
    of a "Failed" column replaces it.

    Args:
        html: Raw report markup (str or bytes).
        collection_name: Name of the collection.

    Returns:
        CollectionSummary with metrics populated and no failures.
    """
    soup = parse_html(html)
    summary = CollectionSummary(name=collection_name)

    for card in soup.select(".card-body"):
        _store_metric(summary, CARD_LABEL.text(card), CARD_VALUE.text(card))

    for row in soup.select(".summary-row"):
        _store_metric(summary, LEGACY_LABEL.text(row), LEGACY_VALUE.text(row), overwrite=False)

    failed_from_tables = sum_failed_from_tables(soup)
    if failed_from_tables is not None:
        failed_kpi = summary.metric_number(FAILED_KEYS, None)
        if failed_kpi is None or failed_kpi == 0:
            logger.debug(
                f"{collection_name}: failed count {failed_kpi} replaced by table sum {failed_from_tables}"
            )
            summary.metrics["total_failed_tests"] = str(failed_from_tables)

    return summary


def _store_metric(
    summary: CollectionSummary, label: str, value: str, overwrite: bool = True
) -> None:
    if not label or not value:
        return
    key = normalize_key(label)
    if key and (overwrite or key not in summary.metrics):
        summary.metrics[key] = value


def sum_failed_from_tables(soup: BeautifulSoup) -> Optional[int]:
    """
    Largest "Failed" column sum over all tables.

    Returns:
        The maximum sum, or None when no table has a failed column with data rows.
    """
    best: Optional[int] = None
    for table in soup.find_all("table"):
        headers = thead_headers(table)
        if not headers:
            continue
        failed_idx = next(
            (i for i, header in enumerate(headers) if FAILED_HEADER_RE.search(header)),
            -1,
        )
        if failed_idx == -1:
            continue

        total = 0
        rows = 0
        for tr in body_rows(table):
            cells = row_cells(tr)
            if not cells:
                continue
            if failed_idx < len(cells):
                total += to_number(text_of(cells[failed_idx]), 0)
                rows += 1

        if rows > 0 and total >= 0 and (best is None or total > best):
            best = total
    return best
