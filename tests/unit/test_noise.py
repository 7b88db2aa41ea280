"""
Unit tests for noise filtering and redaction of failure records.
"""

import pytest

from newman_summary.common.config import SummaryConfig
from newman_summary.common.security import SecretRedactor
from newman_summary.extract.noise import NoiseFilter, filter_and_redact
from newman_summary.models import FailureRecord


@pytest.fixture
def noise_filter():
    return NoiseFilter.from_config(SummaryConfig())


class TestNoiseFilter:
    @pytest.mark.parametrize("test", ["user-agent", "User-Agent", "  content-type "])
    def test_header_names_always_dropped(self, noise_filter, test):
        assert noise_filter.is_noise(test, "Expected 200 but got 500")

    @pytest.mark.parametrize(
        "message",
        [
            "",
            "   ",
            "Content-Type: application/json",
            "X-Request-Id:abc",
            "Bearer abc123.def456",
            "dGhpcyBpcyBhIHZlcnkgbG9uZyBiYXNlNjQgYmxvYg",
        ],
    )
    def test_noise_messages_dropped(self, noise_filter, message):
        assert noise_filter.is_noise("Status code is 200", message)

    @pytest.mark.parametrize(
        "message",
        [
            "Expected 200 but got 500",
            "expected response to have status code 200 but got 404",
            "Bearer token was rejected by the server",
        ],
    )
    def test_real_failures_kept(self, noise_filter, message):
        assert not noise_filter.is_noise("Status code is 200", message)

    def test_default_exclusion(self, noise_filter):
        assert noise_filter.is_noise("Response time is below threshold", "took 900ms")
        assert noise_filter.is_noise("timing", "response TIME IS BELOW THRESHOLD of 200ms")

    def test_custom_exclusions(self):
        noise_filter = NoiseFilter(exclude_patterns=[r"flaky\s+check"], noise_names=[])
        assert noise_filter.is_noise("Known Flaky  Check", "boom")
        assert not noise_filter.is_noise("user-agent", "boom")


class TestFilterAndRedact:
    def test_noise_dropped_and_survivors_redacted(self, noise_filter):
        token = "q" * 40
        records = [
            FailureRecord("GET /a", "user-agent", "PostmanRuntime/7.0"),
            FailureRecord("GET /a", "Status code is 200", f"got 401 for key {token}", anchor="#fails-1"),
            FailureRecord("GET /b", "Has body", "Bearer abcdef"),
        ]
        kept = filter_and_redact(records, noise_filter, SecretRedactor())
        assert kept == [
            FailureRecord("GET /a", "Status code is 200", "got 401 for key ***redacted***", anchor="#fails-1"),
        ]

    def test_request_label_not_redacted(self, noise_filter):
        request = "GET /tokens/" + "z" * 40
        [record] = filter_and_redact(
            [FailureRecord(request, "Status", "failed")], noise_filter, SecretRedactor()
        )
        assert record.request == request

    def test_disabled_redactor_keeps_text(self, noise_filter):
        token = "q" * 40
        [record] = filter_and_redact(
            [FailureRecord("GET /a", "Status", f"token {token}")], noise_filter, SecretRedactor(enabled=False)
        )
        assert record.message == f"token {token}"
