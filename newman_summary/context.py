"""
Run context for one summarization invocation.

A RunContext is created per run and passed through the pipeline; it tracks
the current stage, progress, per-report errors and the produced collections.
"""

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from newman_summary.common.logger import get_logger
from newman_summary.models import AggregatedReport, CollectionSummary

logger = get_logger(__name__)

STAGE_VALIDATION = "validation"
STAGE_PROCESSING = "processing"
STAGE_COLLATION = "collation"
STAGE_COMPLETE = "complete"
STAGE_ERROR = "error"

STAGES = (STAGE_VALIDATION, STAGE_PROCESSING, STAGE_COLLATION, STAGE_COMPLETE, STAGE_ERROR)


class RunContext:
    """
    Status and results of a single run.

    Attributes:
        run_id: Unique identifier of the run.
        stage: Current stage name.
        progress: Completion percentage (0-100).
        message: Last status message.
        collections: Successfully processed collections, in traversal order.
        errors: Reports that failed, as {"path", "error"} entries.
    """

    def __init__(self, run_id: Optional[str] = None):
        self.run_id = run_id or str(uuid.uuid4())
        self.started_at = datetime.now().isoformat()
        self.stage = STAGE_VALIDATION
        self.progress = 0
        self.message = "Run created"
        self.output_path: Optional[str] = None
        self.report: Optional[AggregatedReport] = None
        self.collections: List[CollectionSummary] = []
        self.errors: List[Dict[str, str]] = []

    def update(self, stage: str, message: str, progress: Optional[int] = None) -> None:
        """
        Record a stage transition.

        Raises:
            ValueError: If stage is not a known stage name.
        """
        if stage not in STAGES:
            raise ValueError(f"Unknown stage: {stage}")
        self.stage = stage
        self.message = message
        if progress is not None:
            self.progress = max(0, min(100, int(progress)))
        logger.info(f"[{self.run_id[:8]}] {stage}: {message}")

    def record_error(self, path, error: Exception) -> None:
        self.errors.append({"path": str(path), "error": str(error)})

    @property
    def finished(self) -> bool:
        return self.stage in (STAGE_COMPLETE, STAGE_ERROR)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert context to dictionary for logging/serialization.

        Returns:
            Dictionary representation of context.
        """
        return {
            "run_id": self.run_id,
            "started_at": self.started_at,
            "stage": self.stage,
            "progress": self.progress,
            "message": self.message,
            "output_path": self.output_path,
            "collections": [c.name for c in self.collections],
            "errors": list(self.errors),
        }
