"""
Data model shared by the extraction, aggregation and rendering stages.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

UNKNOWN_REQUEST = "Unknown request"
UNKNOWN_ASSERTION = "Unknown assertion"
DEFAULT_FAILURE_MESSAGE = "Failed"
DEFAULT_ERROR_MESSAGE = "Error"
PLACEHOLDER = "-"

FAILED_KEYS = ("total_failed_tests", "failed_tests", "failed")
SKIPPED_KEYS = ("total_skipped_tests", "skipped_tests", "skipped")
ASSERTION_KEYS = ("total_assertions",)
ITERATION_KEYS = ("total_iterations",)

SOURCE_LOG = "log"
SOURCE_HTML = "html"

MetricValue = Union[str, int]


class SummaryError(Exception):
    """Base class for summarizer errors."""


class ReportReadError(SummaryError):
    """A single report could not be read or parsed."""

    def __init__(self, path, message: str):
        self.path = str(path)
        super().__init__(f"{self.path}: {message}")


class RenderWriteError(SummaryError):
    """The rendered summary document could not be written."""


def normalize_key(label: str) -> str:
    """Lowercase a label and collapse every non-alphanumeric run to a single underscore."""
    key = re.sub(r"[^a-z0-9]", "_", str(label).lower())
    key = re.sub(r"_+", "_", key)
    return key.strip("_")


def to_number(value, fallback: Optional[int] = 0) -> Optional[int]:
    """Parse the first signed integer in value, ignoring thousands separators."""
    if value is None:
        return fallback
    match = re.search(r"-?\d+", str(value).replace(",", ""))
    return int(match.group(0)) if match else fallback


@dataclass(frozen=True)
class FailureRecord:
    """One failing check."""
    request: str
    test: str
    message: str
    anchor: Optional[str] = None

    @property
    def key(self) -> Tuple[str, str, str]:
        """Deduplication identity of the record."""
        return (self.request, self.test, self.message)


@dataclass
class CollectionSummary:
    """
    Metrics and failures of one discovered report.

    Attributes:
        name: Collection name, taken from the report directory.
        metrics: KPI values keyed by normalized label.
        failures: Filtered, redacted failure records.
        source_html_path: Report document path, kept only when details come from HTML.
        structured_log: Whether a ``report.json`` was present.
        raw_failure_count: Number of records extracted before filtering.
    """
    name: str
    metrics: Dict[str, MetricValue] = field(default_factory=dict)
    failures: List[FailureRecord] = field(default_factory=list)
    source_html_path: Optional[str] = None
    structured_log: bool = False
    raw_failure_count: int = 0

    def metric(self, keys, fallback=PLACEHOLDER):
        """Return the first non-empty metric among keys."""
        for key in keys:
            value = self.metrics.get(key)
            if value is not None and value != "":
                return value
        return fallback

    def metric_number(self, keys, fallback: Optional[int] = 0) -> Optional[int]:
        """Return the first non-empty metric among keys parsed as an integer."""
        return to_number(self.metric(keys, None), fallback)

    @property
    def detail_source(self) -> Optional[str]:
        """Where failure details came from: "log", "html", or None when unknown."""
        if self.structured_log:
            return SOURCE_LOG
        if self.source_html_path:
            return SOURCE_HTML
        return None


@dataclass
class GroupedFailure:
    """Failures of one request, grouped by (test, message) with repeat counts."""
    request: str
    entries: Dict[Tuple[str, str], int] = field(default_factory=dict)
    anchor: Optional[str] = None

    @property
    def total(self) -> int:
        """Number of failing checks in the group, repeats included."""
        return sum(self.entries.values())


@dataclass
class AggregatedCollection:
    """One collection with its normalized failed count and grouped failures."""
    summary: CollectionSummary
    failed: int
    groups: List[GroupedFailure] = field(default_factory=list)


@dataclass
class AggregatedReport:
    """Render-ready result of one run."""
    collections: List[AggregatedCollection] = field(default_factory=list)
    total_failed: int = 0

    @property
    def show_skipped(self) -> bool:
        """Whether any collection reports skipped tests."""
        return any(
            (c.summary.metric_number(SKIPPED_KEYS, 0) or 0) > 0 for c in self.collections
        )

    @property
    def failing(self) -> List[AggregatedCollection]:
        """Collections with at least one failed check."""
        return [c for c in self.collections if c.failed > 0]
