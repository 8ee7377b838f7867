"""
HTTP transport for the goalwire client.

This module provides the transport abstraction and the transfer executor:

    - HttpClient: Abstract base class for the raw transport.
    - RequestsHttpClient: Default implementation backed by a `requests.Session`.
    - TransferExecutor: Performs exactly one HTTP exchange for an `ApiRequest`,
      enforcing its timeout and cancellation, and maps the outcome to an
      `ApiResponse` or an `ApiError`.

Example:
    >>> from goalwire._http import RequestsHttpClient, TransferExecutor
    >>> executor = TransferExecutor(http_client=RequestsHttpClient())
    >>> response = executor.execute(ApiRequest(url="/goals"), "https://api.example.com/goals", 30.0)
    >>> response.data
"""

import json
import logging
import threading
import time
from abc import ABC, abstractmethod
from concurrent.futures import Future
from typing import Any, override

import requests

from goalwire._content import error_message, parse_error_body, parser_for
from goalwire._errors import (
    ErrorResponse,
    HttpError,
    NetworkError,
    RequestCancelledError,
    RequestTimeoutError,
)
from goalwire._models import ApiRequest, ApiResponse, HttpMethod

logger = logging.getLogger(__name__)


# =============================================================================
# Abstract Base Class
# =============================================================================


class HttpClient(ABC):
    """
    Abstract base class for the raw HTTP transport.

    Implementations perform a single blocking exchange and return the
    `requests.Response` untouched: status handling, decoding, retries and
    timeouts are the job of `TransferExecutor` and `ApiClient`.

    Example:
        >>> class MyHttpClient(HttpClient):
        ...     def request(self, method, url, headers=None, data=None, timeout=30.0):
        ...         return requests.request(method, url, headers=headers, data=data, timeout=timeout)
    """

    @abstractmethod
    def request(
        self,
        method: str,
        url: str,
        headers: dict[str, str] | None = None,
        data: str | bytes | None = None,
        timeout: float = 30.0,
    ) -> requests.Response:
        """
        Execute one HTTP request.

        Args:
            method: HTTP method name (e.g. "GET").
            url: The fully-qualified URL.
            headers: Request headers.
            data: Already-encoded request body, if any.
            timeout: Socket timeout in seconds.

        Returns:
            The HTTP response, whatever its status.

        Raises:
            requests.RequestException: If the exchange fails.
        """
        pass

    def close(self) -> None:
        """Release transport resources. No-op by default."""
        pass


# =============================================================================
# Requests Implementation
# =============================================================================


class RequestsHttpClient(HttpClient):
    """
    HTTP client backed by a shared `requests.Session`.

    The session pools connections across calls and threads.

    Args:
        session: Optional session to use. A new one is created when omitted
            and closed by `close()`.
    """

    def __init__(self, session: requests.Session | None = None):
        self._owns_session = session is None
        self._session = session or requests.Session()

    @override
    def request(
        self,
        method: str,
        url: str,
        headers: dict[str, str] | None = None,
        data: str | bytes | None = None,
        timeout: float = 30.0,
    ) -> requests.Response:
        assert method, "HTTP method cannot be empty."
        assert url, "URL cannot be empty."
        assert timeout is not None, "Timeout cannot be None."
        assert timeout > 0, "Timeout must be greater than 0."

        return self._session.request(
            method,
            url,
            headers=headers,
            data=data,
            timeout=timeout,
        )

    @override
    def close(self) -> None:
        if self._owns_session:
            self._session.close()


# =============================================================================
# Transfer Executor
# =============================================================================


class TransferExecutor:
    """
    Performs a single HTTP exchange with timeout and cancellation.

    Each blocking transport call runs on its own daemon thread while the
    calling thread waits for whichever comes first: the transfer finishing,
    the request's cancel token firing, or the effective timeout elapsing.

    At most `max_workers` calls wait on a transfer at the same time. A slot is
    held by the waiting caller, not by the transfer thread: an abandoned
    transfer keeps running in the background without blocking new calls, and
    its response is closed as soon as it arrives.

    Outcome mapping:
        - token already cancelled: `RequestCancelledError`, no network call
        - token cancelled mid-flight: `RequestCancelledError`
        - timeout elapsed (waiting for a slot included): `RequestTimeoutError`
        - `requests.Timeout`: `RequestTimeoutError`
        - any other `requests.RequestException`: `NetworkError`
        - status outside 200..299: `HttpError` with the parsed error body
        - 2xx: `ApiResponse` decoded according to its `Content-Type`

    Args:
        http_client: The transport used for the exchange.
        max_workers: Maximum number of concurrent transfers.
    """

    def __init__(self, http_client: HttpClient, max_workers: int = 10):
        assert http_client is not None, "http_client cannot be None."
        assert max_workers >= 1, "max_workers must be >= 1."

        self.http_client = http_client
        self.max_workers = max_workers
        self._slots = threading.BoundedSemaphore(max_workers)
        self._closed = False

    def execute(self, request: ApiRequest, full_url: str, default_timeout: float) -> ApiResponse[Any]:
        """
        Run one exchange for `request` against `full_url`.

        Args:
            request: The request descriptor (headers, body, timeout, token).
            full_url: The fully-qualified URL, query string included.
            default_timeout: Timeout in seconds used when the request has none.

        Returns:
            The decoded response.

        Raises:
            RuntimeError: If the executor was closed.
            ApiError: See the outcome mapping in the class docstring.
        """
        if self._closed:
            raise RuntimeError("TransferExecutor is closed.")

        token = request.cancel_token
        if token is not None and token.is_cancelled:
            raise RequestCancelledError()

        timeout = request.timeout or default_timeout
        deadline = time.monotonic() + timeout

        if not self._slots.acquire(timeout=timeout):
            logger.debug(f"No transfer slot within {timeout:.1f}s: {request.method} {full_url}")
            raise RequestTimeoutError()
        try:
            future = self._wait_for_transfer(request, full_url, timeout, deadline)
        finally:
            self._slots.release()

        try:
            response = future.result()
        except requests.Timeout as e:
            raise RequestTimeoutError() from e
        except requests.RequestException as e:
            raise NetworkError(f"Network error: {e}") from e

        return _to_api_response(response)

    def _wait_for_transfer(
        self,
        request: ApiRequest,
        full_url: str,
        timeout: float,
        deadline: float,
    ) -> Future[requests.Response]:
        token = request.cancel_token
        if token is not None and token.is_cancelled:
            raise RequestCancelledError()

        data = None if request.method == HttpMethod.GET else _encode_body(request.body)
        future = self._start_transfer(
            str(request.method),
            full_url,
            headers=dict(request.headers),
            data=data,
            timeout=timeout,
        )

        settled = threading.Event()
        future.add_done_callback(lambda _: settled.set())

        unregister = token.add_callback(settled.set) if token is not None else None
        try:
            settled.wait(max(0.0, deadline - time.monotonic()))
        finally:
            if unregister is not None:
                unregister()

        if not future.done():
            future.add_done_callback(_close_abandoned_response)
            if token is not None and token.is_cancelled:
                logger.debug(f"Request cancelled: {request.method} {full_url}")
                raise RequestCancelledError()
            logger.debug(f"Request timed out after {timeout:.1f}s: {request.method} {full_url}")
            raise RequestTimeoutError()

        return future

    def _start_transfer(self, method: str, url: str, **kwargs: Any) -> Future[requests.Response]:
        future: Future[requests.Response] = Future()
        future.set_running_or_notify_cancel()

        def _run() -> None:
            try:
                response = self.http_client.request(method, url, **kwargs)
            except BaseException as e:
                future.set_exception(e)
            else:
                future.set_result(response)

        threading.Thread(target=_run, name="goalwire-transfer", daemon=True).start()
        return future

    def close(self) -> None:
        """Reject new transfers and close the transport."""
        self._closed = True
        self.http_client.close()


def _encode_body(body: Any) -> str | bytes | None:
    if body is None:
        return None
    if isinstance(body, (str, bytes)):
        return body
    return json.dumps(body, default=str)


def _to_api_response(response: requests.Response) -> ApiResponse[Any]:
    status = response.status_code
    status_text = response.reason or ""

    if not 200 <= status <= 299:
        data = parse_error_body(response)
        raise HttpError(
            error_message(data, status, status_text),
            status=status,
            status_text=status_text,
            response=ErrorResponse(data=data, status=status, status_text=status_text),
        )

    parser = parser_for(response.headers.get("Content-Type"))
    try:
        data = parser.parse(response)
    except ValueError as e:
        raise NetworkError(f"Invalid response body: {e}") from e

    return ApiResponse(
        data=data,
        status=status,
        status_text=status_text,
        headers={name.lower(): value for name, value in response.headers.items()},
        kind=parser.kind,
    )


def _close_abandoned_response(future: Future[requests.Response]) -> None:
    if future.exception() is not None:
        return
    future.result().close()
