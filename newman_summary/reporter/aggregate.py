"""
Aggregation of per-collection failures into a render-ready report.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from newman_summary.common.logger import get_logger
from newman_summary.models import (
    ASSERTION_KEYS,
    DEFAULT_ERROR_MESSAGE,
    FAILED_KEYS,
    ITERATION_KEYS,
    PLACEHOLDER,
    SKIPPED_KEYS,
    UNKNOWN_ASSERTION,
    UNKNOWN_REQUEST,
    AggregatedCollection,
    AggregatedReport,
    CollectionSummary,
    FailureRecord,
    GroupedFailure,
    RenderWriteError,
)

logger = get_logger(__name__)


def group_failures(records: Sequence[FailureRecord]) -> List[GroupedFailure]:
    """
    Group records by request, then by (test, message) with repeat counts.

    Requests and checks keep first-seen order. The first anchor seen for a
    request becomes that request's link fragment.
    """
    groups: Dict[str, GroupedFailure] = {}
    for record in records:
        request = record.request or UNKNOWN_REQUEST
        test = record.test or UNKNOWN_ASSERTION
        message = record.message or DEFAULT_ERROR_MESSAGE

        group = groups.get(request)
        if group is None:
            group = groups[request] = GroupedFailure(request=request)
        if record.anchor and group.anchor is None:
            group.anchor = record.anchor
        key = (test, message)
        group.entries[key] = group.entries.get(key, 0) + 1
    return list(groups.values())


def normalized_failed_count(summary: CollectionSummary) -> int:
    """
    Failed count shown for a collection.

    A structured log is trusted over the KPI cards: its failure count is used
    as is. Without a log, a non-zero failed metric wins; otherwise the number
    of failure records parsed from the document is used.
    """
    if summary.structured_log:
        return summary.raw_failure_count
    metric = summary.metric_number(FAILED_KEYS, None)
    if metric is not None and metric > 0:
        return metric
    return len(summary.failures)


def aggregate(summaries: Sequence[CollectionSummary]) -> AggregatedReport:
    """Build the aggregated report, keeping the collection order given."""
    report = AggregatedReport()
    for summary in summaries:
        failed = normalized_failed_count(summary)
        report.collections.append(
            AggregatedCollection(
                summary=summary,
                failed=failed,
                groups=group_failures(summary.failures),
            )
        )
        report.total_failed += failed
    logger.info(
        f"Aggregated {len(report.collections)} collection(s), {report.total_failed} failed check(s)"
    )
    return report


def build_status_payload(report: AggregatedReport, generated_at: Optional[str] = None) -> Dict[str, Any]:
    """
    Per-collection status consumed by notification tooling.

    Returns:
        JSON-serializable dictionary.
    """
    collections = []
    for entry in report.collections:
        summary = entry.summary
        collections.append(
            {
                "name": summary.name,
                "iterations": summary.metric(ITERATION_KEYS, PLACEHOLDER),
                "assertions": summary.metric(ASSERTION_KEYS, PLACEHOLDER),
                "failed": entry.failed,
                "skipped": summary.metric_number(SKIPPED_KEYS, 0),
                "detail_source": summary.detail_source,
                "failure_groups": [
                    {
                        "request": group.request,
                        "checks": [
                            {"test": test, "message": message, "count": count}
                            for (test, message), count in group.entries.items()
                        ],
                    }
                    for group in entry.groups
                ],
            }
        )
    return {
        "generated_at": generated_at or datetime.now().isoformat(),
        "total_failed": report.total_failed,
        "collections": collections,
    }


def write_status_json(report: AggregatedReport, output_path: str) -> Path:
    """
    Write the status payload as JSON.

    Args:
        report: Aggregated report.
        output_path: Path to output JSON file.

    Returns:
        Path to generated file.

    Raises:
        RenderWriteError: If the file cannot be written.
    """
    output_file = Path(output_path)
    try:
        output_file.parent.mkdir(parents=True, exist_ok=True)
        with open(output_file, "w", encoding="utf-8") as f:
            json.dump(build_status_payload(report), f, indent=2, ensure_ascii=False)
    except OSError as e:
        logger.error(f"Failed to write status JSON to {output_file}: {e}")
        raise RenderWriteError(f"Cannot write status JSON to {output_file}: {e}") from e

    logger.info(f"Status JSON generated: {output_file}")
    return output_file
