"""
Tests for artifactory_artifacts.infrastructure.retry
======================================================

RetryPolicy decides which failures are transient and how long to back off.
"""

import httpx
import pytest
from pydantic import ValidationError

from artifactory_artifacts.core.config import RetrySettings
from artifactory_artifacts.infrastructure.retry import RetryPolicy


class TestRetryPolicy:
    def test_defaults(self) -> None:
        policy = RetryPolicy()
        assert policy.max_attempts == 3
        assert policy.initial_delay == 0.2
        assert policy.max_delay == 5.0
        assert policy.backoff_multiplier == 2.0

    def test_from_settings(self) -> None:
        policy = RetryPolicy.from_settings(RetrySettings(max_attempts=7, initial_delay=1.0))
        assert policy.max_attempts == 7
        assert policy.initial_delay == 1.0

    def test_max_attempts_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            RetryPolicy(max_attempts=0)

    def test_delay_grows_exponentially_with_bounded_jitter(self) -> None:
        policy = RetryPolicy(initial_delay=1.0, backoff_multiplier=2.0, max_delay=100.0)
        for attempt, base in [(0, 1.0), (1, 2.0), (2, 4.0)]:
            delay = policy.calculate_delay(attempt)
            assert base <= delay <= base * 1.1

    def test_delay_is_capped(self) -> None:
        policy = RetryPolicy(initial_delay=1.0, max_delay=3.0)
        assert policy.calculate_delay(10) == 3.0

    @pytest.mark.parametrize("status,expected", [
        (500, True), (502, True), (503, True), (504, True),
        (400, False), (401, False), (404, False), (409, False),
    ])
    def test_retryable_status(self, status, expected) -> None:
        assert RetryPolicy().is_retryable_status(status) is expected

    def test_retryable_exceptions(self) -> None:
        policy = RetryPolicy()
        assert policy.is_retryable_exception(httpx.ConnectError("refused"))
        assert policy.is_retryable_exception(httpx.ReadTimeout("slow"))
        assert policy.is_retryable_exception(httpx.RemoteProtocolError("reset"))
        assert not policy.is_retryable_exception(httpx.UnsupportedProtocol("ftp"))
        assert not policy.is_retryable_exception(ValueError("nope"))

    def test_should_retry(self) -> None:
        policy = RetryPolicy(max_attempts=3)
        assert policy.should_retry(0)
        assert policy.should_retry(1)
        assert not policy.should_retry(2)
