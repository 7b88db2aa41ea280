"""
Extraction stages - report discovery, KPI and failure extraction, noise filtering.
"""

from newman_summary.extract.locator import ReportLocation, find_reports, load_structured_log
from newman_summary.extract.kpi import extract_kpis
from newman_summary.extract.failures import extract_failures, extract_from_html, extract_from_log, harvest_html
from newman_summary.extract.noise import NoiseFilter, filter_and_redact

__all__ = [
    "ReportLocation",
    "find_reports",
    "load_structured_log",
    "extract_kpis",
    "extract_failures",
    "extract_from_html",
    "extract_from_log",
    "harvest_html",
    "NoiseFilter",
    "filter_and_redact",
]
