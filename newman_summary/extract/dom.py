"""
Declarative query helpers over a BeautifulSoup tree.

Report generator versions disagree on tags and classes, so lookups are
expressed as ordered alternatives (``FirstOf``) instead of probing. Sibling and
ancestor walks only ever visit element nodes.
"""

import re
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from bs4 import BeautifulSoup, Tag

HEADING_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6")

ITERATION_RE = re.compile(r"iteration\s*:\s*\d+\s*-\s*(.+)$", re.IGNORECASE)
HTTP_VERB_RE = re.compile(r"\b(get|post|put|delete|patch)\b", re.IGNORECASE)
PATH_TOKEN_RE = re.compile(r"/[A-Za-z0-9/_\-?&=%.:]+")
URL_RE = re.compile(r"\bhttps?://[^\s'\"]+", re.IGNORECASE)
MAX_VERB_LINE_LENGTH = 120


def parse_html(markup) -> BeautifulSoup:
    """Parse report markup; never raises on malformed input."""
    if isinstance(markup, BeautifulSoup):
        return markup
    if isinstance(markup, bytes):
        markup = markup.decode("utf-8", errors="replace")
    return BeautifulSoup(markup or "", "html.parser")


def text_of(node: Optional[Tag], collapse: bool = False) -> str:
    """Stripped text content of node, or an empty string when node is absent."""
    if node is None:
        return ""
    text = node.get_text()
    if collapse:
        text = re.sub(r"\s+", " ", text)
    return text.strip()


class FirstOf:
    """Ordered CSS alternatives; the first selector yielding non-empty text wins."""

    def __init__(self, *selectors: str):
        self.selectors: Tuple[str, ...] = tuple(selectors)

    def __repr__(self) -> str:
        return f"FirstOf{self.selectors!r}"

    def element(self, scope: Tag) -> Optional[Tag]:
        for selector in self.selectors:
            found = scope.select_one(selector)
            if found is not None:
                return found
        return None

    def text(self, scope: Tag) -> str:
        for selector in self.selectors:
            value = text_of(scope.select_one(selector))
            if value:
                return value
        return ""


def is_heading(node: Tag) -> bool:
    return isinstance(node, Tag) and node.name in HEADING_TAGS


def previous_elements(node: Tag) -> Iterator[Tag]:
    """Preceding element siblings, nearest first."""
    for sibling in node.previous_siblings:
        if isinstance(sibling, Tag):
            yield sibling


def next_elements(node: Tag) -> Iterator[Tag]:
    """Following element siblings, nearest first."""
    for sibling in node.next_siblings:
        if isinstance(sibling, Tag):
            yield sibling


def ancestors(node: Tag) -> Iterator[Tag]:
    """Element ancestors, innermost first, excluding the document itself."""
    parent = node.parent
    while parent is not None and not isinstance(parent, BeautifulSoup):
        yield parent
        parent = parent.parent


def row_cells(row: Tag) -> List[Tag]:
    return row.find_all(["td", "th"])


def body_rows(table: Tag) -> List[Tag]:
    """
    Data rows of a table.

    Rows under ``tbody`` when the markup has one, otherwise every row that is
    not part of ``thead`` or ``tfoot``.
    """
    if table.find("tbody") is not None:
        return table.select("tbody tr")
    return [
        tr for tr in table.find_all("tr")
        if tr.find_parent(["thead", "tfoot"]) is None
    ]


def table_headers(table: Tag) -> Tuple[List[str], bool]:
    """
    Lowercased, whitespace-collapsed header texts of a table.

    Returns:
        (headers, uses_body_header). When the table has no ``thead`` row, the
        first body row stands in as a header and uses_body_header is True.
    """
    head_row = table.select_one("thead tr")
    cells = row_cells(head_row) if head_row is not None else []
    uses_body_header = False

    if not cells:
        rows = body_rows(table)
        if rows:
            cells = row_cells(rows[0])
            uses_body_header = bool(cells)
    if not cells:
        return [], False

    return [text_of(cell, collapse=True).lower() for cell in cells], uses_body_header


def thead_headers(table: Tag) -> List[str]:
    """Lowercased texts of every ``thead`` header cell."""
    return [text_of(cell).lower() for cell in table.select("thead tr th, thead tr td")]


@dataclass
class ContextMatch:
    request: Optional[str] = None
    url: Optional[str] = None

    @property
    def complete(self) -> bool:
        return self.request is not None and self.url is not None


def sniff_context(text: str, match: ContextMatch) -> None:
    """Fill whatever match still lacks from one node's text."""
    if not text:
        return
    if match.request is None:
        iteration = ITERATION_RE.search(text)
        if iteration:
            match.request = iteration.group(1).strip()
    if (
        match.request is None
        and len(text) <= MAX_VERB_LINE_LENGTH
        and HTTP_VERB_RE.search(text)
        and PATH_TOKEN_RE.search(text)
    ):
        match.request = text
    if match.url is None:
        url = URL_RE.search(text)
        if url:
            match.url = url.group(0)


def search_context(
    node: Tag,
    max_steps: int = 12,
    max_depth: int = 5,
    max_parent_steps: int = 6,
) -> ContextMatch:
    """
    Infer the request a node belongs to from the markup around it.

    Looks at up to ``max_steps`` preceding siblings, then climbs up to
    ``max_depth`` ancestors, checking each ancestor and up to
    ``max_parent_steps`` of its preceding siblings. Stops as soon as both a
    request label and an absolute URL are known.
    """
    match = ContextMatch()

    for steps, sibling in enumerate(previous_elements(node)):
        if steps >= max_steps or match.complete:
            break
        sniff_context(text_of(sibling), match)

    for depth, parent in enumerate(ancestors(node)):
        if depth >= max_depth or match.complete:
            break
        sniff_context(text_of(parent), match)
        for steps, sibling in enumerate(previous_elements(parent)):
            if steps >= max_parent_steps or match.complete:
                break
            sniff_context(text_of(sibling), match)

    return match
