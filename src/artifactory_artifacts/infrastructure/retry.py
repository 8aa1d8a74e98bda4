"""
artifactory_artifacts.infrastructure.retry - Retry Policy
===========================================================

Decides whether a failed remote call is worth retrying and how long to wait
before the next attempt.

Classification:
    Transient (retried):       connection errors, read/write errors,
                               timeouts, HTTP 5xx
    Permanent (surfaced now):  401/403 (auth), other 4xx (rejected)
    Absent (not an error):     404, handled by the caller per operation

The retry delay uses exponential backoff with proportional jitter:

    delay = min(initial_delay * (backoff_multiplier ^ attempt) + jitter, max_delay)

Example delay progression (default settings):
    Attempt 0: ~0.2s
    Attempt 1: ~0.4s
    Attempt 2: ~0.8s
"""

from __future__ import annotations

import random

import httpx
from pydantic import BaseModel, Field

from artifactory_artifacts.core.config import RetrySettings


class RetryPolicy(BaseModel):
    """Retry behaviour for transient failures of one remote call.

    Attributes:
        max_attempts: Total attempts, including the first one.
        initial_delay: Back-off in seconds before the first retry.
        max_delay: Cap on any single back-off.
        backoff_multiplier: Growth factor per attempt.

    Example:
        >>> policy = RetryPolicy(max_attempts=5, initial_delay=0.5)
        >>> policy.calculate_delay(attempt=2)  # ~2.0s (0.5 * 2^2 + jitter)
        >>> policy.is_retryable_status(503)  # True
        >>> policy.is_retryable_status(409)  # False
    """

    max_attempts: int = Field(default=3, ge=1, le=20)
    initial_delay: float = Field(default=0.2, ge=0, le=30.0)
    max_delay: float = Field(default=5.0, gt=0, le=300.0)
    backoff_multiplier: float = Field(default=2.0, ge=1.0, le=10.0)

    @classmethod
    def from_settings(cls, settings: RetrySettings) -> RetryPolicy:
        return cls(**settings.model_dump())

    def calculate_delay(self, attempt: int) -> float:
        """Back-off before retry number ``attempt`` (zero-based).

        Adds up to 10% of the base delay as random jitter so concurrent
        builds retrying against the same server spread out.
        """
        base_delay = self.initial_delay * (self.backoff_multiplier ** attempt)
        jitter = random.uniform(0, base_delay * 0.1)
        return min(base_delay + jitter, self.max_delay)

    def is_retryable_status(self, status_code: int) -> bool:
        return 500 <= status_code < 600

    def is_retryable_exception(self, exc: BaseException) -> bool:
        """True for transport-level failures (timeouts included)."""
        return isinstance(exc, httpx.TransportError) and not isinstance(
            exc, httpx.UnsupportedProtocol
        )

    def should_retry(self, attempt: int) -> bool:
        """Whether another attempt follows a failure of ``attempt`` (zero-based)."""
        return attempt + 1 < self.max_attempts
