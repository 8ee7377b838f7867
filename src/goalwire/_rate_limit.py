"""
Client-side rate limiting for the goalwire client.

This module provides a sliding-window rate limiter keyed by request URL. The
client asks the limiter whether a URL is over budget *before* doing any work
(`check`), and records a timestamp only when a real transfer starts (`track`).
Cache hits and deduplicated callers therefore never consume budget.

Example:
    >>> limiter = SlidingWindowRateLimiter()
    >>> limiter.check("https://api.example.com/goals", max_requests=100, time_window=60.0)
    >>> limiter.track("https://api.example.com/goals")
"""

import logging
import threading
import time
from collections import deque

from goalwire._errors import ClientSideRateLimitError

logger = logging.getLogger(__name__)


class SlidingWindowRateLimiter:
    """
    Per-key sliding-window rate limiter.

    Each key keeps a deque of monotonic timestamps. A key is rate limited
    when the number of timestamps younger than `time_window` already meets
    `max_requests`. Older timestamps are pruned lazily on every check.

    Thread-safe: all state is guarded by a single lock.
    """

    def __init__(self) -> None:
        self._requests: dict[str, deque[float]] = {}
        self._lock = threading.Lock()

    def is_rate_limited(self, key: str, max_requests: int, time_window: float) -> bool:
        """
        Report whether `key` has already used its budget for the current window.

        Args:
            key: The rate-limit key (fully-qualified URL).
            max_requests: Maximum number of requests allowed per window.
            time_window: Window duration in seconds.

        Returns:
            True if a new request for `key` must be rejected.
        """
        assert max_requests >= 1, "max_requests must be >= 1."
        assert time_window > 0, "time_window must be greater than 0."

        now = time.monotonic()
        with self._lock:
            timestamps = self._requests.get(key)
            if not timestamps:
                return False

            while timestamps and now - timestamps[0] >= time_window:
                timestamps.popleft()

            return len(timestamps) >= max_requests

    def check(self, key: str, max_requests: int, time_window: float) -> None:
        """
        Raise if `key` is rate limited, do nothing otherwise.

        Raises:
            ClientSideRateLimitError: If the window budget is exhausted.
        """
        if self.is_rate_limited(key, max_requests, time_window):
            logger.warning(
                f"⏳ Rate limit exceeded for {key} ({max_requests} requests per {time_window:.1f}s)"
            )
            raise ClientSideRateLimitError(key, max_requests, time_window)

    def track(self, key: str) -> None:
        """Record that a request for `key` is starting now."""
        now = time.monotonic()
        with self._lock:
            self._requests.setdefault(key, deque()).append(now)

    @property
    def tracker_count(self) -> int:
        """Number of keys currently tracked."""
        with self._lock:
            return len(self._requests)

    def reset(self) -> None:
        """Forget every tracked timestamp."""
        with self._lock:
            self._requests.clear()
