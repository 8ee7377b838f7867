"""
Request deduplication.

Concurrent callers issuing the same logical request share one transfer: the
first caller runs the work, the others block until it settles and receive the
same result (or the same exception).
"""

import logging
import threading
from collections.abc import Callable
from concurrent.futures import Future
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RequestDeduplicator:
    """
    Collapses concurrent identical requests into a single execution.

    The owner (first caller for a key) runs `factory()` on its own thread and
    publishes the outcome through a `concurrent.futures.Future`. The pending
    entry is removed as soon as the work settles, successfully or not, so a
    later call with the same key starts a fresh execution.

    Example:
        >>> dedup = RequestDeduplicator()
        >>> dedup.dedupe('GET:/goals:{}', lambda: fetch_goals())
    """

    def __init__(self) -> None:
        self._pending: dict[str, Future[Any]] = {}
        self._lock = threading.Lock()

    def dedupe(self, key: str, factory: Callable[[], T]) -> T:
        """
        Run `factory` unless an identical call is already in flight.

        Args:
            key: Identity of the logical request.
            factory: Zero-argument callable performing the work.

        Returns:
            The value produced by the (possibly shared) execution.

        Raises:
            Exception: Whatever the shared execution raised.
        """
        with self._lock:
            future = self._pending.get(key)
            is_owner = future is None
            if is_owner:
                future = Future()
                future.set_running_or_notify_cancel()
                self._pending[key] = future

        assert future is not None
        if not is_owner:
            logger.debug(f"Joining in-flight request: {key}")
            return future.result()

        try:
            result = factory()
        except BaseException as e:
            self._settle(key, future)
            future.set_exception(e)
            raise

        self._settle(key, future)
        future.set_result(result)
        return result

    def _settle(self, key: str, future: Future[Any]) -> None:
        # Unregister before publishing so woken waiters never see a settled entry
        with self._lock:
            if self._pending.get(key) is future:
                del self._pending[key]

    @property
    def pending_count(self) -> int:
        """Number of executions currently in flight."""
        with self._lock:
            return len(self._pending)
