"""
Secret redaction for failure text.

Report tables and assertion messages routinely echo request headers, so bearer
tokens, signed tokens and API keys end up in failure details. Everything that
reaches the rendered summary passes through ``SecretRedactor.redact`` first.
"""

import os
import re
from typing import Optional

from newman_summary.common.logger import get_logger

logger = get_logger(__name__)


class SecretRedactor:
    """
    Credential redaction utility.

    Patterns are applied in a fixed order and every placeholder is chosen so
    that no pattern matches it again, which keeps ``redact`` idempotent.
    """

    PATTERNS = {
        "bearer_token": re.compile(
            r"\bBearer\s+[A-Za-z0-9\-._]+\b",
            re.IGNORECASE
        ),
        "jwt_token": re.compile(
            r"\beyJ[A-Za-z0-9_\-]{10,}\.[A-Za-z0-9_\-]{10,}\.[A-Za-z0-9_\-]{10,}\b"
        ),
        "long_token": re.compile(
            r"\b[A-Za-z0-9+/_\-]{32,}\b"
        ),
        "api_key": re.compile(
            r"(api[-_\s]?key\s*[:=]\s*)(\S+)",
            re.IGNORECASE
        ),
        "authorization": re.compile(
            r"(authorization\s*[:=]\s*)(\S+)",
            re.IGNORECASE
        ),
    }

    REDACTIONS = {
        "bearer_token": "Bearer ***redacted***",
        "jwt_token": "***redacted.jwt***",
        "long_token": "***redacted***",
        "api_key": "***redacted***",
        "authorization": "***redacted***",
    }

    def __init__(self, enabled: bool = True):
        """
        Initialize the redactor.

        Args:
            enabled: Whether redaction is enabled (can be disabled for debugging).
        """
        self.enabled = enabled
        if not enabled:
            logger.warning("Secret redaction is DISABLED - tokens may appear in the summary!")

    def redact(self, text: Optional[str]) -> Optional[str]:
        """
        Mask credential-like substrings in text.

        Args:
            text: Input text that may contain secrets.

        Returns:
            Text with secrets replaced by placeholders; surrounding text is untouched.
        """
        if not self.enabled or not text:
            return text

        redacted = str(text)

        # Token shapes first, key/value forms last
        redacted = self.PATTERNS["bearer_token"].sub(
            self.REDACTIONS["bearer_token"],
            redacted
        )
        redacted = self.PATTERNS["jwt_token"].sub(
            self.REDACTIONS["jwt_token"],
            redacted
        )
        redacted = self.PATTERNS["long_token"].sub(
            self.REDACTIONS["long_token"],
            redacted
        )
        redacted = self.PATTERNS["api_key"].sub(
            lambda m: m.group(1) + self.REDACTIONS["api_key"],
            redacted
        )
        redacted = self.PATTERNS["authorization"].sub(
            lambda m: m.group(1) + self.REDACTIONS["authorization"],
            redacted
        )

        return redacted

    def contains_secret(self, text: Optional[str]) -> bool:
        """Return True if text still holds a bearer token or a long opaque token."""
        if not text:
            return False
        return bool(
            self.PATTERNS["bearer_token"].search(text)
            or self.PATTERNS["long_token"].search(text)
        )


_redactor: Optional[SecretRedactor] = None


def get_redactor() -> SecretRedactor:
    """Get the shared redactor instance."""
    global _redactor
    if _redactor is None:
        enabled = os.getenv("NEWMAN_SUMMARY_REDACTION_ENABLED", "true").lower() == "true"
        _redactor = SecretRedactor(enabled=enabled)
    return _redactor
