"""
Report discovery.

Walks an extraction root and finds every ``report.html`` together with its
optional sibling ``report.json`` structured log.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional

from newman_summary.common.logger import get_logger
from newman_summary.models import ReportReadError

logger = get_logger(__name__)

REPORT_FILENAME = "report.html"
STRUCTURED_LOG_FILENAME = "report.json"


@dataclass(frozen=True)
class ReportLocation:
    """A discovered report document and its directory."""
    html_path: Path

    @property
    def report_dir(self) -> Path:
        return self.html_path.parent

    @property
    def collection_name(self) -> str:
        return self.report_dir.name

    @property
    def log_path(self) -> Path:
        return self.report_dir / STRUCTURED_LOG_FILENAME

    @property
    def has_structured_log(self) -> bool:
        return self.log_path.is_file()


def find_reports(root) -> List[ReportLocation]:
    """
    Recursively find report documents under root.

    Directory entries are visited in lexical order so the result is reproducible.
    A missing root yields an empty list.

    Args:
        root: Directory to search.

    Returns:
        Report locations in traversal order.
    """
    root_path = Path(root)
    if not root_path.is_dir():
        logger.info(f"Report root {root_path} does not exist; no reports found")
        return []

    found: List[ReportLocation] = []
    _walk(root_path, found)
    logger.info(f"Found {len(found)} report(s) under {root_path}")
    return found


def _walk(directory: Path, found: List[ReportLocation]) -> None:
    try:
        entries = sorted(directory.iterdir(), key=lambda p: p.name)
    except OSError as e:
        logger.warning(f"Cannot list {directory}: {e}")
        return
    for entry in entries:
        if entry.is_dir():
            _walk(entry, found)
        elif entry.name.lower() == REPORT_FILENAME:
            found.append(ReportLocation(html_path=entry))


def load_structured_log(location: ReportLocation) -> Optional[Any]:
    """
    Load the report's structured log, if there is one.

    Returns:
        Parsed JSON value, or None when no ``report.json`` sits next to the report.

    Raises:
        ReportReadError: If the log exists but cannot be read or parsed.
    """
    log_path = location.log_path
    if not log_path.is_file():
        logger.debug(f"No structured log for {location.html_path}; using HTML heuristics")
        return None
    try:
        return json.loads(log_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as e:
        raise ReportReadError(log_path, f"cannot read structured log: {e}") from e
    except json.JSONDecodeError as e:
        raise ReportReadError(log_path, f"invalid JSON: {e}") from e
