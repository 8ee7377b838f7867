"""
Structured errors raised by the goalwire client.

Every failure surfaced by `ApiClient` is an `ApiError` subclass. The class of
the error *is* its classification: flags such as `is_timeout`,
`is_network_error` and `is_retryable` are read-only properties derived from
the concrete class (and, for HTTP errors, from the status code), so an error
can never carry an inconsistent combination of flags.

Hierarchy:
    - ApiError: Base class for all client errors.
        - NetworkError: The transport failed before a response was received.
        - RequestTimeoutError: The request did not finish within its timeout.
            - RequestCancelledError: The caller cancelled the request.
        - HttpError: The server answered with a non-2xx status.
            - ServerSideRateLimitError: The server answered with HTTP 429.
        - ClientSideRateLimitError: The local sliding window rejected the call.

Example:
    >>> try:
    ...     client.get("/goals")
    ... except HttpError as e:
    ...     print(e.status, e.response.data)
    ... except ApiError as e:
    ...     print(f"Request failed: {e} (retryable={e.is_retryable})")
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

RETRYABLE_STATUS_CODES: frozenset[int] = frozenset({408, 429})


@dataclass(frozen=True)
class ErrorResponse:
    """
    Snapshot of an error response returned by the server.

    Attributes:
        data: Parsed response body (JSON value), or `{"message": status_text}`
            when the body could not be parsed.
        status: HTTP status code.
        status_text: HTTP reason phrase.
    """

    data: Any
    status: int
    status_text: str


class ApiError(Exception):
    """
    Base class for all errors raised by the goalwire client.

    Attributes:
        message: Human-readable error message.
        status: HTTP status code, if the error originated from a response.
        status_text: HTTP reason phrase, if available.
        response: The error response snapshot, if available.
    """

    def __init__(
        self,
        message: str,
        status: int | None = None,
        status_text: str | None = None,
        response: ErrorResponse | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.status = status
        self.status_text = status_text
        self.response = response

    @property
    def is_timeout(self) -> bool:
        """Return True if the request timed out or was aborted."""
        return False

    @property
    def is_network_error(self) -> bool:
        """Return True if no response was received from the server."""
        return self.status is None

    @property
    def is_retryable(self) -> bool:
        """
        Return True if retrying the same request may succeed.

        Errors without a status are retryable; HTTP 5xx, 408 and 429 are
        retryable; every other HTTP status is not.
        """
        if self.status is None:
            return True
        return self.status >= 500 or self.status in RETRYABLE_STATUS_CODES

    def __repr__(self) -> str:
        return f"{type(self).__name__}(message={self.message!r}, status={self.status!r})"


class NetworkError(ApiError):
    """Raised when the transport fails before any response is received."""

    def __init__(self, message: str = "Network error"):
        super().__init__(message)

    @property
    def is_network_error(self) -> bool:
        return True


class RequestTimeoutError(ApiError):
    """
    Raised when a request does not complete within its effective timeout.

    Timeouts carry no status and are therefore retryable.
    """

    def __init__(self, message: str = "Request timeout"):
        super().__init__(message)

    @property
    def is_timeout(self) -> bool:
        return True

    @property
    def is_network_error(self) -> bool:
        return False


class RequestCancelledError(RequestTimeoutError):
    """
    Raised when a request is aborted through its `CancelToken`.

    Classified as a timeout (`is_timeout` is True), but never retried: the
    token stays cancelled, so a new attempt would be aborted as well.
    """

    def __init__(self, message: str = "Request cancelled"):
        super().__init__(message)

    @property
    def is_retryable(self) -> bool:
        return False


class HttpError(ApiError):
    """
    Raised when the server answers with a status outside the 2xx range.

    Example:
        >>> try:
        ...     client.get("/goals/unknown")
        ... except HttpError as e:
        ...     if e.status == 404:
        ...         print(e.response.data.get("message"))
    """

    status: int

    def __init__(
        self,
        message: str,
        status: int,
        status_text: str = "",
        response: ErrorResponse | None = None,
    ):
        assert status is not None, "HTTP status cannot be None."
        super().__init__(
            message,
            status=status,
            status_text=status_text,
            response=response or ErrorResponse(data=None, status=status, status_text=status_text),
        )


class ServerSideRateLimitError(HttpError):
    """
    Raised when the server rate-limits a request (HTTP 429).

    Produced by the default error interceptor from the original `HttpError`,
    which stays reachable through `__cause__`.
    """

    def __init__(self, original: HttpError, message: str = "Rate limit exceeded"):
        super().__init__(
            message,
            status=original.status,
            status_text=original.status_text or "",
            response=original.response,
        )


class ClientSideRateLimitError(ApiError):
    """
    Raised when the local sliding-window rate limiter rejects a request.

    The request is rejected before any transport call. This error is not
    retried: the window only frees up as time passes.

    Attributes:
        key: The rate-limit key (fully-qualified URL) that was rejected.
        max_requests: The configured ceiling for the window.
        time_window: The window duration in seconds.
    """

    def __init__(self, key: str, max_requests: int, time_window: float):
        super().__init__("Rate limit exceeded")
        self.key = key
        self.max_requests = max_requests
        self.time_window = time_window

    @property
    def is_network_error(self) -> bool:
        return False

    @property
    def is_retryable(self) -> bool:
        return False


def is_retryable_error(exc: BaseException) -> bool:
    """
    Decide whether an exception raised by a transfer attempt may be retried.

    `ApiError` instances answer through their own classification. Any other
    exception carries no HTTP status and is considered retryable.

    Args:
        exc: The exception raised by the latest attempt.

    Returns:
        True if the attempt may be retried, False otherwise.
    """
    if isinstance(exc, ApiError):
        return exc.is_retryable
    return isinstance(exc, Exception)
