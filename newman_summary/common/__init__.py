"""
Common utilities for the Newman summarizer.
"""

import importlib
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from newman_summary.common.config import load_config, save_config, SummaryConfig
    from newman_summary.common.logger import get_logger, setup_logging
    from newman_summary.common.security import SecretRedactor, get_redactor

_LAZY_IMPORTS = {
    "load_config": ("newman_summary.common.config", "load_config"),
    "save_config": ("newman_summary.common.config", "save_config"),
    "SummaryConfig": ("newman_summary.common.config", "SummaryConfig"),
    "get_logger": ("newman_summary.common.logger", "get_logger"),
    "setup_logging": ("newman_summary.common.logger", "setup_logging"),
    "SecretRedactor": ("newman_summary.common.security", "SecretRedactor"),
    "get_redactor": ("newman_summary.common.security", "get_redactor"),
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
    "load_config",
    "save_config",
    "SummaryConfig",
    "get_logger",
    "setup_logging",
    "SecretRedactor",
    "get_redactor",
]
