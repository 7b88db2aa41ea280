"""
Reporter module - Aggregation and rendering of the test results summary.

This module turns extracted collections into one static HTML summary.
"""

from newman_summary.reporter.aggregate import aggregate, build_status_payload, write_status_json
from newman_summary.reporter.render import render_summary, write_summary

__all__ = [
    "aggregate",
    "build_status_payload",
    "write_status_json",
    "render_summary",
    "write_summary",
]
