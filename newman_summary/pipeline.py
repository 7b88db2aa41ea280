"""
Summarization pipeline.

locate -> KPI extraction -> failure extraction -> noise filter/redaction ->
aggregation -> rendering. Each report is processed in isolation; a report
that cannot be read or parsed is logged, recorded on the run context and
left out of the summary.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence

from newman_summary.common.config import SummaryConfig
from newman_summary.common.logger import get_logger
from newman_summary.common.security import SecretRedactor, get_redactor
from newman_summary.context import (
    STAGE_COLLATION,
    STAGE_COMPLETE,
    STAGE_ERROR,
    STAGE_PROCESSING,
    STAGE_VALIDATION,
    RunContext,
)
from newman_summary.extract.dom import parse_html
from newman_summary.extract.failures import extract_from_log, harvest_html
from newman_summary.extract.kpi import extract_kpis
from newman_summary.extract.locator import ReportLocation, find_reports, load_structured_log
from newman_summary.extract.noise import NoiseFilter, filter_and_redact
from newman_summary.models import AggregatedReport, CollectionSummary, ReportReadError
from newman_summary.reporter.aggregate import aggregate, write_status_json
from newman_summary.reporter.render import render_summary, write_summary

logger = get_logger(__name__)


class SummaryPipeline:
    """
    Turns a directory of reports into one summary document.

    Args:
        config: Summarizer configuration.
        redactor: Redactor to use; defaults to one following ``config.redaction_enabled``.
    """

    def __init__(self, config: Optional[SummaryConfig] = None, redactor: Optional[SecretRedactor] = None):
        self.config = config or SummaryConfig()
        if redactor is None:
            redactor = get_redactor() if self.config.redaction_enabled else SecretRedactor(enabled=False)
        self.redactor = redactor
        self.noise_filter = NoiseFilter.from_config(self.config)

    def process_report(self, location: ReportLocation) -> CollectionSummary:
        """
        Build the summary of one report.

        Raises:
            ReportReadError: If the report or its structured log cannot be read.
        """
        try:
            html = location.html_path.read_bytes()
        except OSError as e:
            raise ReportReadError(location.html_path, f"cannot read report: {e}") from e

        structured_log = load_structured_log(location)
        soup = parse_html(html)

        summary = extract_kpis(soup, location.collection_name)
        summary.structured_log = structured_log is not None
        if structured_log is not None:
            raw = extract_from_log(structured_log, self.config.json_max_rows)
            summary.raw_failure_count = len(raw)
            summary.failures = filter_and_redact(raw, self.noise_filter, self.redactor)
        else:
            summary.source_html_path = str(location.html_path)
            if self.config.html_details_fallback:
                # HTML rows are cleaned inside the harvester, before dedup and the row cap
                harvester = harvest_html(
                    soup, self.config.html_max_rows, self.noise_filter, self.redactor
                )
                summary.failures = harvester.records
                summary.raw_failure_count = len(harvester.records) + harvester.dropped

        logger.debug(
            f"{summary.name}: {len(summary.metrics)} metric(s), "
            f"{summary.raw_failure_count} raw / {len(summary.failures)} kept failure row(s)"
        )
        return summary

    def _process_isolated(self, location: ReportLocation, context: RunContext) -> Optional[CollectionSummary]:
        try:
            return self.process_report(location)
        except Exception as e:
            logger.error(f"Error reading {location.html_path}: {e}")
            context.record_error(location.html_path, e)
            return None

    def collect(self, locations: Sequence[ReportLocation], context: RunContext) -> List[CollectionSummary]:
        """Process reports, keeping traversal order regardless of completion order."""
        if self.config.workers > 1 and len(locations) > 1:
            with ThreadPoolExecutor(max_workers=self.config.workers) as executor:
                results = list(executor.map(lambda loc: self._process_isolated(loc, context), locations))
        else:
            results = [self._process_isolated(loc, context) for loc in locations]
        return [summary for summary in results if summary is not None]

    def build(self, context: Optional[RunContext] = None) -> AggregatedReport:
        """Locate, extract and aggregate every report under the input directory."""
        context = context or RunContext()
        context.update(STAGE_VALIDATION, f"Searching {self.config.input_dir}", 5)
        locations = find_reports(self.config.input_dir)

        context.update(STAGE_PROCESSING, f"Processing {len(locations)} report(s)", 20)
        context.collections = self.collect(locations, context)

        context.update(STAGE_COLLATION, "Collating reports into summary", 80)
        return aggregate(context.collections)

    def run(self, context: Optional[RunContext] = None) -> RunContext:
        """
        Execute the full pipeline and write the summary document.

        Raises:
            RenderWriteError: If the summary cannot be written.
        """
        context = context or RunContext()
        report = self.build(context)
        context.report = report
        html = render_summary(report, title=self.config.title)
        try:
            output = write_summary(html, self.config.output_path)
            if self.config.status_path:
                write_status_json(report, self.config.status_path)
        except Exception as e:
            context.update(STAGE_ERROR, str(e))
            raise
        context.output_path = str(output)
        context.update(STAGE_COMPLETE, f"Summary written to {output}", 100)
        return context
