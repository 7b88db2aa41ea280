"""
Unit tests for secret redaction.
"""

import pytest

from newman_summary.common.security import SecretRedactor, get_redactor

JWT = (
    "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9."
    "eyJzdWIiOiIxMjM0NTY3ODkwIiwibmFtZSI6IkpvaG4ifQ."
    "SflKxwRJSMeKKF2QT4fwpMeJf36POk6yJV_adQssw5c"
)


class TestSecretRedactor:
    """Test redaction of credential-like text."""

    def test_redact_bearer_token(self, redactor):
        result = redactor.redact("Sent Bearer abc123.def-456 upstream")
        assert result == "Sent Bearer ***redacted*** upstream"
        assert "abc123.def-456" not in result

    def test_redact_jwt(self, redactor):
        result = redactor.redact(f"token={JWT} rejected")
        assert JWT not in result
        assert "***redacted" in result
        assert result.endswith(" rejected")

    def test_redact_long_opaque_token(self, redactor):
        token = "A" * 20 + "b" * 20
        result = redactor.redact(f"session {token} expired")
        assert result == "session ***redacted*** expired"

    def test_redact_api_key_keeps_label(self, redactor):
        assert redactor.redact("api_key=s3cr3t") == "api_key=***redacted***"
        assert redactor.redact("API-KEY: s3cr3t") == "API-KEY: ***redacted***"

    def test_redact_authorization_value(self, redactor):
        assert redactor.redact("authorization=Basic") == "authorization=***redacted***"

    def test_short_words_untouched(self, redactor):
        text = "Expected 200 but got 500"
        assert redactor.redact(text) == text

    @pytest.mark.parametrize(
        "text",
        [
            "Authorization: Bearer abc123.def-456",
            f"token {JWT}",
            "api key = hunter2 and " + "x" * 40,
        ],
    )
    def test_redact_is_idempotent(self, redactor, text):
        once = redactor.redact(text)
        assert redactor.redact(once) == once

    @pytest.mark.parametrize(
        "text",
        [
            "Bearer abcdef",
            f"jwt {JWT}",
            "x" * 64,
        ],
    )
    def test_no_secret_survives(self, redactor, text):
        assert redactor.contains_secret(text)
        assert not redactor.contains_secret(redactor.redact(text))

    def test_empty_and_none(self, redactor):
        assert redactor.redact("") == ""
        assert redactor.redact(None) is None

    def test_disabled_redactor_passes_text_through(self):
        redactor = SecretRedactor(enabled=False)
        assert redactor.redact("Bearer abcdef") == "Bearer abcdef"


class TestSharedRedactor:
    def test_enabled_by_default(self, monkeypatch):
        monkeypatch.delenv("NEWMAN_SUMMARY_REDACTION_ENABLED", raising=False)
        assert get_redactor().enabled is True

    def test_disabled_from_environment(self, monkeypatch):
        monkeypatch.setenv("NEWMAN_SUMMARY_REDACTION_ENABLED", "false")
        assert get_redactor().enabled is False

    def test_instance_is_shared(self):
        assert get_redactor() is get_redactor()
