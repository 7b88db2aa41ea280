"""
Failure extraction.

Failing checks come from the structured run log when a report has one. Without
it, two HTML passes are tried in order: the "Failed" tab cards written by newer
report generators, then a heuristic scan of tables. HTML rows are noise
filtered and redacted as they are found, so deduplication on (request, test,
message) and the row cap only ever see cleaned records.
"""

import re
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Set, Tuple

from bs4 import BeautifulSoup, Tag

from newman_summary.common.config import SummaryConfig
from newman_summary.common.logger import get_logger
from newman_summary.common.security import SecretRedactor
from newman_summary.extract.dom import (
    HEADING_TAGS,
    ContextMatch,
    body_rows,
    is_heading,
    next_elements,
    parse_html,
    row_cells,
    search_context,
    table_headers,
    text_of,
)
from newman_summary.extract.noise import NoiseFilter
from newman_summary.models import (
    DEFAULT_FAILURE_MESSAGE,
    UNKNOWN_ASSERTION,
    UNKNOWN_REQUEST,
    FailureRecord,
    to_number,
)

logger = get_logger(__name__)

DEFAULT_HTML_MAX_ROWS = 5000
DEFAULT_JSON_MAX_ROWS = 20000

FAILED_CARD_SELECTOR = '#pills-failed .card-header a[id^="fails-"]'
FAILED_TEST_LABEL_RE = re.compile(r"^\s*Failed\s*Test:\s*", re.IGNORECASE)
FAILURE_HEADING_RE = re.compile(r"fail|assertion", re.IGNORECASE)
URL_PREFIX_RE = re.compile(r"https?://", re.IGNORECASE)

REQUEST_HEADERS = ("request", "endpoint", "url", "item", "request name", "api", "path")
TEST_HEADERS = ("assertion", "test", "test name", "check", "rule")
MESSAGE_HEADERS = ("error", "message", "detail", "details", "reason", "failure", "error message")
FAILED_HEADERS = ("failed", "fails")
ASSERT_LIKE_RE = re.compile(r"assertion|test|check|rule", re.IGNORECASE)
MESSAGE_LIKE_RE = re.compile(r"error|message|detail|details|reason|failure", re.IGNORECASE)


def extract_failures(
    html,
    structured_log: Optional[Any],
    config: Optional[SummaryConfig] = None,
    noise_filter: Optional[NoiseFilter] = None,
    redactor: Optional[SecretRedactor] = None,
) -> List[FailureRecord]:
    """
    Produce the failure records of one report.

    Args:
        html: Report markup or an already parsed tree.
        structured_log: Parsed ``report.json``, or None when the report has none.
        config: Row caps and the HTML fallback switch.
        noise_filter: Applied to HTML rows before deduplication.
        redactor: Applied to HTML rows before deduplication.

    Returns:
        Ordered failure records. Structured-log records are returned unfiltered.
    """
    config = config or SummaryConfig()
    if structured_log is not None:
        return extract_from_log(structured_log, config.json_max_rows)
    if not config.html_details_fallback:
        return []
    return extract_from_html(html, config.html_max_rows, noise_filter, redactor)


def extract_from_log(log: Any, max_rows: int = DEFAULT_JSON_MAX_ROWS) -> List[FailureRecord]:
    """
    Failing assertions of a structured run log.

    An assertion fails when it carries an ``error`` object with a message.
    Output beyond max_rows is dropped.
    """
    records: List[FailureRecord] = []
    executions = _dig(log, "run", "executions")
    if not isinstance(executions, list):
        return records

    for execution in executions:
        if not isinstance(execution, dict):
            continue
        request = _dig(execution, "item", "name") or UNKNOWN_REQUEST
        assertions = execution.get("assertions") or []
        if not isinstance(assertions, list):
            continue
        for assertion in assertions:
            if not isinstance(assertion, dict):
                continue
            error = assertion.get("error")
            if not isinstance(error, dict) or error.get("message") is None:
                continue
            test = assertion.get("assertion") or assertion.get("name") or ""
            records.append(
                FailureRecord(request=str(request), test=str(test), message=str(error["message"]))
            )
            if len(records) >= max_rows:
                return records
    return records


def _dig(value: Any, *keys: str) -> Any:
    for key in keys:
        if not isinstance(value, dict):
            return None
        value = value.get(key)
    return value


def extract_from_html(
    html,
    max_rows: int = DEFAULT_HTML_MAX_ROWS,
    noise_filter: Optional[NoiseFilter] = None,
    redactor: Optional[SecretRedactor] = None,
) -> List[FailureRecord]:
    """Failing checks parsed from report markup."""
    return harvest_html(html, max_rows, noise_filter, redactor).records


def harvest_html(
    html,
    max_rows: int = DEFAULT_HTML_MAX_ROWS,
    noise_filter: Optional[NoiseFilter] = None,
    redactor: Optional[SecretRedactor] = None,
) -> "HtmlFailureHarvester":
    """
    Run the HTML passes over report markup.

    The card pass runs first; the table pass runs only when no failure card exists.

    Returns:
        The harvester, holding the kept records and the number of noise rows dropped.
    """
    harvester = HtmlFailureHarvester(
        parse_html(html), max_rows=max_rows, noise_filter=noise_filter, redactor=redactor
    )
    if harvester.harvest_cards() == 0:
        harvester.harvest_tables()
    if harvester.dropped:
        logger.debug(f"Dropped {harvester.dropped} noise row(s) from HTML")
    return harvester


@dataclass
class TableColumns:
    """Column indexes of a recognized failures table; -1 means absent."""
    request: int
    test: int
    message: int
    failed: int


def find_header(headers: Sequence[str], keys: Sequence[str]) -> int:
    """Index of the first header containing any of keys, or -1."""
    for i, header in enumerate(headers):
        if any(key in header for key in keys):
            return i
    return -1


def is_name_value_table(headers: Sequence[str]) -> bool:
    return (
        len(headers) == 2
        and re.fullmatch(r"name|key", headers[0]) is not None
        and headers[1] == "value"
    )


def locate_columns(headers: Sequence[str]) -> Optional[TableColumns]:
    """
    Map table headers to failure columns.

    Returns:
        TableColumns, or None when the headers do not describe failures.
    """
    if not headers or is_name_value_table(headers):
        return None

    columns = TableColumns(
        request=find_header(headers, REQUEST_HEADERS),
        test=find_header(headers, TEST_HEADERS),
        message=find_header(headers, MESSAGE_HEADERS),
        failed=find_header(headers, FAILED_HEADERS),
    )
    if columns.test == -1 or columns.message == -1:
        assert_like = any(ASSERT_LIKE_RE.search(h) for h in headers)
        message_like = any(MESSAGE_LIKE_RE.search(h) for h in headers)
        if len(headers) == 2 and (assert_like or message_like):
            columns.test = 0
            columns.message = 1
        else:
            return None
    return columns


def split_card_title(title: str) -> str:
    """Request part of an ``Iteration - ErrorType - Request`` card title."""
    parts = [p.strip() for p in title.split(" - ") if p.strip()]
    if len(parts) >= 3:
        return " - ".join(parts[2:])
    return parts[-1] if parts else UNKNOWN_REQUEST


class HtmlFailureHarvester:
    """
    Collects failure records from one parsed document.

    Records are kept in discovery order. Noise rows are dropped and the rest
    redacted before the (request, test, message) duplicate check, so neither
    noise nor secret-only differences count toward max_rows.

    Attributes:
        records: Cleaned, deduplicated records.
        dropped: Rows rejected as noise.
    """

    def __init__(
        self,
        soup: BeautifulSoup,
        max_rows: int = DEFAULT_HTML_MAX_ROWS,
        noise_filter: Optional[NoiseFilter] = None,
        redactor: Optional[SecretRedactor] = None,
    ):
        self.soup = soup
        self.max_rows = max_rows
        self.noise_filter = noise_filter
        self.redactor = redactor
        self.records: List[FailureRecord] = []
        self.dropped = 0
        self._seen: Set[Tuple[str, str, str]] = set()

    @property
    def full(self) -> bool:
        return len(self.records) >= self.max_rows

    def _add(self, record: FailureRecord) -> bool:
        if self.full:
            return False
        if self.noise_filter is not None and self.noise_filter.is_noise(record.test, record.message):
            self.dropped += 1
            return False
        if self.redactor is not None:
            record = FailureRecord(
                request=record.request,
                test=self.redactor.redact(record.test),
                message=self.redactor.redact(record.message),
                anchor=record.anchor,
            )
        if record.key in self._seen:
            return False
        self._seen.add(record.key)
        self.records.append(record)
        return True

    def harvest_cards(self) -> int:
        """
        Read the cards of the "Failed" tab.

        Returns:
            Number of failure cards present in the document, harvested or not.
        """
        anchors = self.soup.select(FAILED_CARD_SELECTOR)
        for anchor in anchors:
            if self.full:
                break
            title = text_of(anchor, collapse=True)
            anchor_id = anchor.get("id")
            request = split_card_title(title)

            card = anchor.find_parent(class_="card")
            body = card.select_one(".card-body") if card is not None else None
            test = ""
            message = ""
            if body is not None:
                test = FAILED_TEST_LABEL_RE.sub("", text_of(body.find("h5"))).strip()
                message = text_of(body.select_one("pre code"))

            if not test and not message:
                continue
            self._add(
                FailureRecord(
                    request=request,
                    test=test,
                    message=message,
                    anchor=f"#{anchor_id}" if anchor_id else None,
                )
            )
        return len(anchors)

    def harvest_tables(self) -> None:
        """Scan tables under failure headings first, then every table."""
        for heading in self.soup.find_all(list(HEADING_TAGS)):
            if self.full:
                return
            if not FAILURE_HEADING_RE.search(text_of(heading).lower()):
                continue
            for node in next_elements(heading):
                if is_heading(node):
                    break
                if node.name == "table":
                    self.harvest_table(node)
                else:
                    for table in node.find_all("table"):
                        self.harvest_table(table)
                if self.full:
                    break

        for table in self.soup.find_all("table"):
            if self.full:
                return
            self.harvest_table(table)

    def harvest_table(self, table: Tag) -> None:
        if self.full:
            return

        headers, uses_body_header = table_headers(table)
        columns = locate_columns(headers)
        if columns is None:
            return

        # An explicit request column wins; otherwise infer it once per table
        context = search_context(table) if columns.request == -1 else ContextMatch()

        rows = body_rows(table)
        start = 1 if uses_body_header and rows else 0
        for tr in rows[start:]:
            if self.full:
                break
            cells = row_cells(tr)
            if not cells:
                continue

            if 0 <= columns.failed < len(cells):
                failed = to_number(text_of(cells[columns.failed]), 0)
                if failed == 0:
                    continue

            if 0 <= columns.request < len(cells):
                request = text_of(cells[columns.request])
            else:
                request = context.request or UNKNOWN_REQUEST
            if context.url and not URL_PREFIX_RE.search(request):
                request = f"{request} — {context.url}"

            test = (
                text_of(cells[columns.test])
                if 0 <= columns.test < len(cells)
                else UNKNOWN_ASSERTION
            )
            message = (
                text_of(cells[columns.message])
                if 0 <= columns.message < len(cells)
                else DEFAULT_FAILURE_MESSAGE
            )
            if not test and not message:
                continue
            self._add(FailureRecord(request=request, test=test, message=message))
