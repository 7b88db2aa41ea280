"""
Noise filtering and redaction of raw failure records.

Report tables mix real assertion failures with request metadata (header
names, header lines, bare tokens). This stage drops those rows and masks
secrets in whatever survives.
"""

import re
from typing import Iterable, List, Optional

from newman_summary.common.config import SummaryConfig
from newman_summary.common.logger import get_logger
from newman_summary.common.security import SecretRedactor, get_redactor
from newman_summary.models import FailureRecord

logger = get_logger(__name__)

NOISE_MESSAGE_PATTERNS = [
    re.compile(r"\s*"),
    re.compile(r"[A-Za-z\-]+:\s?.*"),
    re.compile(r"Bearer\s+[A-Za-z0-9\-._]+", re.IGNORECASE),
    re.compile(r"[A-Za-z0-9+/_\-]{32,}"),
]


class NoiseFilter:
    """
    Decides whether a (test, message) pair is a real failure.

    Attributes:
        exclude_patterns: Compiled, case-insensitive exclusion regexes.
        noise_names: Lowercased header/metadata names.
    """

    def __init__(self, exclude_patterns: Iterable[str] = (), noise_names: Iterable[str] = ()):
        self.exclude_patterns = [re.compile(p, re.IGNORECASE) for p in exclude_patterns]
        self.noise_names = {name.strip().lower() for name in noise_names}

    @classmethod
    def from_config(cls, config: SummaryConfig) -> "NoiseFilter":
        return cls(config.exclude_patterns, config.noise_assertion_names)

    def is_noise(self, test: Optional[str], message: Optional[str]) -> bool:
        t = (test or "").strip()
        m = (message or "").strip()

        for pattern in self.exclude_patterns:
            if pattern.search(t) or pattern.search(m):
                return True

        if t.lower() in self.noise_names:
            return True

        return any(pattern.fullmatch(m) for pattern in NOISE_MESSAGE_PATTERNS)


def filter_and_redact(
    records: Iterable[FailureRecord],
    noise_filter: NoiseFilter,
    redactor: Optional[SecretRedactor] = None,
) -> List[FailureRecord]:
    """
    Drop noise records and redact the rest.

    Used for structured-log records; HTML rows are cleaned by the harvester
    before deduplication. Test and message are redacted independently; request
    labels and anchors pass through unchanged.
    """
    redactor = redactor or get_redactor()
    kept: List[FailureRecord] = []
    dropped = 0
    for record in records:
        if noise_filter.is_noise(record.test, record.message):
            dropped += 1
            continue
        kept.append(
            FailureRecord(
                request=record.request,
                test=redactor.redact(record.test),
                message=redactor.redact(record.message),
                anchor=record.anchor,
            )
        )
    if dropped:
        logger.debug(f"Dropped {dropped} noise row(s)")
    return kept
