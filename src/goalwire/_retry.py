"""
Retry utilities with exponential backoff and jitter.

Inspired by Tenacity's Retrying class, this module provides an iterator of
per-attempt context managers. Failed attempts are classified with
`is_retryable_error()`; retryable failures sleep
`base_delay * 2 ** (attempt - 1)` plus a random jitter before the next attempt.
When the attempts run out, or the failure is not retryable, the *original*
exception propagates unchanged.

Example:
    >>> from goalwire._retry import Retrying
    >>> for attempt in Retrying(max_attempts=3, base_delay=1.0):
    ...     with attempt:
    ...         return transfer(request)
"""

import logging
from collections.abc import Callable, Generator
from dataclasses import dataclass
from typing import TypeVar

from goalwire._errors import is_retryable_error
from goalwire._utils import sleep_with_jitter

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryAttempt:
    """
    Metadata about the current attempt within a retry loop.

    Attributes:
        attempt_number: One-based index of the current attempt.
        max_attempts: Total number of attempts allowed.
    """

    attempt_number: int
    max_attempts: int

    @property
    def is_last_attempt(self) -> bool:
        """Return True if no further attempt will be made after this one."""
        return self.attempt_number >= self.max_attempts


class Retrying:
    """
    Iterator of retry contexts with exponential backoff.

    Usage:
        >>> for attempt in Retrying(max_attempts=3, base_delay=0.5):
        ...     with attempt:
        ...         response = do_request()
        ...         break

    Args:
        max_attempts: Total number of attempts, including the first one.
            Use 1 to disable retries.
        base_delay: Delay before the second attempt in seconds. Doubles on
            every further attempt.
        max_jitter: Upper bound (exclusive) of the random offset added to
            every delay, in seconds.
        logger_prefix: Prefix for log messages (e.g., "GET /goals").

    Note:
        - The loop naturally exits on success (no exception raised)
        - Exceptions are re-raised unchanged, never wrapped
        - Each failure is classified afresh; nothing is memoised between attempts
    """

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        max_jitter: float = 1.0,
        logger_prefix: str = "",
    ):
        assert max_attempts >= 1, f"max_attempts must be >= 1, got {max_attempts}"
        assert base_delay >= 0, f"base_delay must be >= 0, got {base_delay}"
        assert max_jitter >= 0, f"max_jitter must be >= 0, got {max_jitter}"

        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_jitter = max_jitter
        self.logger_prefix = logger_prefix

    def __iter__(self) -> Generator["_RetryContext", None, None]:
        for attempt in range(1, self.max_attempts + 1):
            yield _RetryContext(self, attempt)

    def _prefix(self) -> str:
        return f"{self.logger_prefix} | " if self.logger_prefix else ""

    def _handle_retry(self, attempt: int, exception: Exception) -> None:
        base_wait = self.base_delay * (2 ** (attempt - 1))
        logger.warning(
            f"{self._prefix()}Attempt {attempt}/{self.max_attempts} failed: {exception}"
        )
        logger.warning(
            f"{self._prefix()}Retrying in ~{base_wait:.1f}s (+ jitter)..."
        )
        sleep_with_jitter(base_wait, self.max_jitter)

    def _handle_exhausted(self, exception: Exception) -> None:
        logger.error(
            f"{self._prefix()}Max attempts ({self.max_attempts}) exhausted. Last error: {exception}"
        )


class _RetryContext:
    """
    Context for a single attempt (internal).

    On success: exits normally, the caller breaks or returns.
    On retryable exception with attempts left: sleeps, suppresses, loop continues.
    Otherwise: the exception propagates unchanged.
    """

    def __init__(self, retrying: Retrying, attempt: int):
        self._retrying = retrying
        self.attempt = attempt

    def __enter__(self) -> RetryAttempt:
        return RetryAttempt(
            attempt_number=self.attempt,
            max_attempts=self._retrying.max_attempts,
        )

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> bool:
        if exc_val is None:
            return False

        # Only handle Exception, not BaseException (KeyboardInterrupt, etc.)
        if not isinstance(exc_val, Exception):
            return False

        if not is_retryable_error(exc_val):
            return False

        if self.attempt >= self._retrying.max_attempts:
            if self._retrying.max_attempts > 1:
                self._retrying._handle_exhausted(exc_val)
            return False

        self._retrying._handle_retry(self.attempt, exc_val)
        return True


def with_retry(
    operation: Callable[[], T],
    max_attempts: int = 3,
    base_delay: float = 1.0,
    logger_prefix: str = "",
) -> T:
    """
    Run `operation` with retries, returning its first successful result.

    Raises:
        Exception: The original exception of the last attempt, or of the
            first non-retryable failure.
    """
    for attempt in Retrying(max_attempts=max_attempts, base_delay=base_delay, logger_prefix=logger_prefix):
        with attempt:
            return operation()

    raise AssertionError("Retrying loop ended without a result")  # pragma: no cover
