"""
Cancellation tokens for in-flight requests.

A `CancelToken` is a thread-safe abort signal. Pass it to any request through
`cancel_token=` and call `cancel()` from another thread to abort the transfer.
The request then fails with `RequestCancelledError`.

Example:
    >>> source = client.create_cancel_token()
    >>> threading.Timer(1.0, source.cancel).start()
    >>> client.get("/goals", cancel_token=source.token)  # raises after ~1s
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import NamedTuple


class CancelToken:
    """
    Thread-safe, one-shot abort signal.

    Once cancelled, a token stays cancelled. Callbacks registered with
    `add_callback()` run exactly once, on the thread that calls `cancel()`,
    or immediately if the token is already cancelled.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._callbacks: list[Callable[[], None]] = []
        self._lock = threading.Lock()

    @property
    def is_cancelled(self) -> bool:
        """Return True once `cancel()` has been called."""
        return self._event.is_set()

    def cancel(self) -> None:
        """Signal cancellation and run the registered callbacks."""
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            callbacks, self._callbacks = self._callbacks, []

        for callback in callbacks:
            callback()

    def wait(self, timeout: float | None = None) -> bool:
        """
        Block until the token is cancelled or the timeout elapses.

        Returns:
            True if the token was cancelled, False on timeout.
        """
        return self._event.wait(timeout)

    def add_callback(self, callback: Callable[[], None]) -> Callable[[], None]:
        """
        Register a callback to run on cancellation.

        Args:
            callback: Zero-argument callable.

        Returns:
            A callable that unregisters the callback. Calling it more than
            once, or after cancellation, is a no-op.
        """
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)

                def _unregister() -> None:
                    with self._lock:
                        if callback in self._callbacks:
                            self._callbacks.remove(callback)

                return _unregister

        callback()
        return lambda: None

    def __repr__(self) -> str:
        return f"CancelToken(cancelled={self.is_cancelled})"


class CancelSource(NamedTuple):
    """A `CancelToken` paired with the function that cancels it."""

    token: CancelToken
    cancel: Callable[[], None]


def create_cancel_token() -> CancelSource:
    """
    Create a new `(token, cancel)` pair backed by a single `CancelToken`.

    Example:
        >>> token, cancel = create_cancel_token()
        >>> cancel()
        >>> token.is_cancelled
        True
    """
    token = CancelToken()
    return CancelSource(token=token, cancel=token.cancel)
