"""
Newman Summary - aggregated summaries of Newman test-run reports

Walks a directory of individual ``report.html`` documents (optionally paired
with a ``report.json`` run log) and renders one summary listing pass/fail
counts and grouped, redacted failing checks per collection.
"""

import importlib
from typing import TYPE_CHECKING

__version__ = "0.1.0"

if TYPE_CHECKING:
    from newman_summary.pipeline import SummaryPipeline
    from newman_summary.context import RunContext
    from newman_summary.common.config import SummaryConfig, load_config
    from newman_summary.models import (
        FailureRecord,
        CollectionSummary,
        GroupedFailure,
        AggregatedReport,
        SummaryError,
        ReportReadError,
        RenderWriteError,
    )

_LAZY_IMPORTS = {
    "SummaryPipeline": ("newman_summary.pipeline", "SummaryPipeline"),
    "RunContext": ("newman_summary.context", "RunContext"),
    "SummaryConfig": ("newman_summary.common.config", "SummaryConfig"),
    "load_config": ("newman_summary.common.config", "load_config"),
    "FailureRecord": ("newman_summary.models", "FailureRecord"),
    "CollectionSummary": ("newman_summary.models", "CollectionSummary"),
    "GroupedFailure": ("newman_summary.models", "GroupedFailure"),
    "AggregatedReport": ("newman_summary.models", "AggregatedReport"),
    "SummaryError": ("newman_summary.models", "SummaryError"),
    "ReportReadError": ("newman_summary.models", "ReportReadError"),
    "RenderWriteError": ("newman_summary.models", "RenderWriteError"),
}


def __getattr__(name: str):
    if name in _LAZY_IMPORTS:
        module_name, attr_name = _LAZY_IMPORTS[name]
        module = importlib.import_module(module_name)
        value = getattr(module, attr_name)
        globals()[name] = value
        return value
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


def __dir__() -> list[str]:
    return sorted(list(globals().keys()) + list(_LAZY_IMPORTS.keys()))


__all__ = [
    "__version__",
    "SummaryPipeline",
    "RunContext",
    "SummaryConfig",
    "load_config",
    "FailureRecord",
    "CollectionSummary",
    "GroupedFailure",
    "AggregatedReport",
    "SummaryError",
    "ReportReadError",
    "RenderWriteError",
]
