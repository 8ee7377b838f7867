"""
Request and response interceptors.

Interceptors are ordered hooks that run around every call made through
`ApiClient`:

    - RequestInterceptor.on_request: rewrites the outgoing `ApiRequest`.
    - ResponseInterceptor.on_response: rewrites a successful `ApiResponse`.
    - ResponseInterceptor.on_error: decides what happens to a failure. It
      returns an `ErrorOutcome`: `Propagate(error)` keeps failing (possibly
      with a different error), `Recovered(response)` resolves the call with
      a response and skips the remaining error interceptors.

All hooks run in registration order. Registering returns an unsubscribe
callable.

Example:
    >>> class TraceIdInterceptor(RequestInterceptor):
    ...     def on_request(self, request):
    ...         return request.with_headers({**request.headers, "X-Trace-Id": new_trace_id()})
    >>>
    >>> unsubscribe = client.add_request_interceptor(TraceIdInterceptor())
    >>> unsubscribe()
"""

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, override

from goalwire._errors import ApiError, HttpError, ServerSideRateLimitError
from goalwire._models import ApiRequest, ApiResponse

if TYPE_CHECKING:
    from goalwire._auth import CredentialStore

logger = logging.getLogger(__name__)


# =============================================================================
# Error Outcomes
# =============================================================================


@dataclass(frozen=True)
class Propagate:
    """The call keeps failing with `error`."""

    error: Exception


@dataclass(frozen=True)
class Recovered:
    """The call resolves successfully with `response`."""

    response: ApiResponse[Any]


ErrorOutcome = Propagate | Recovered


# =============================================================================
# Interceptor Base Classes
# =============================================================================


class RequestInterceptor:
    """
    Base class for request interceptors.

    Subclasses override `on_request` and return a new request, typically
    built with `ApiRequest.with_headers()` or `ApiRequest.with_overrides()`.
    Raising an exception aborts the call before any transfer.
    """

    def on_request(self, request: ApiRequest) -> ApiRequest:
        return request


class ResponseInterceptor:
    """
    Base class for response interceptors.

    All methods have default implementations that pass values through, so
    subclasses only override what they need.
    """

    def on_response(self, response: ApiResponse[Any]) -> ApiResponse[Any]:
        return response

    def on_error(self, error: Exception) -> ErrorOutcome:
        return Propagate(error)


# =============================================================================
# Pipeline
# =============================================================================


class InterceptorPipeline:
    """
    Ordered, thread-safe registry of interceptors.

    Each `apply_*` call works on a snapshot of the registered interceptors,
    so registering or unsubscribing during a call never affects that call.
    """

    def __init__(self) -> None:
        self._request_interceptors: list[RequestInterceptor] = []
        self._response_interceptors: list[ResponseInterceptor] = []
        self._lock = threading.Lock()

    def add_request_interceptor(self, interceptor: RequestInterceptor) -> Callable[[], None]:
        """Register a request interceptor. Returns an idempotent unsubscribe callable."""
        assert isinstance(interceptor, RequestInterceptor), "interceptor must be a RequestInterceptor instance"
        return self._register(self._request_interceptors, interceptor)

    def add_response_interceptor(self, interceptor: ResponseInterceptor) -> Callable[[], None]:
        """Register a response interceptor. Returns an idempotent unsubscribe callable."""
        assert isinstance(interceptor, ResponseInterceptor), "interceptor must be a ResponseInterceptor instance"
        return self._register(self._response_interceptors, interceptor)

    def _register(self, registry: list[Any], interceptor: Any) -> Callable[[], None]:
        with self._lock:
            registry.append(interceptor)

        unsubscribed = False

        def _unsubscribe() -> None:
            nonlocal unsubscribed
            with self._lock:
                if unsubscribed:
                    return
                unsubscribed = True
                # Identity, not equality: the same instance may be registered twice
                for index, registered in enumerate(registry):
                    if registered is interceptor:
                        del registry[index]
                        return

        return _unsubscribe

    def apply_request(self, request: ApiRequest) -> ApiRequest:
        with self._lock:
            interceptors = list(self._request_interceptors)
        for interceptor in interceptors:
            request = interceptor.on_request(request)
        return request

    def apply_response(self, response: ApiResponse[Any]) -> ApiResponse[Any]:
        with self._lock:
            interceptors = list(self._response_interceptors)
        for interceptor in interceptors:
            response = interceptor.on_response(response)
        return response

    def apply_error(self, error: Exception) -> ErrorOutcome:
        """
        Run the error hooks in order.

        A hook that raises replaces the current error and the chain goes on
        with the new one. The first `Recovered` outcome stops the chain.
        """
        with self._lock:
            interceptors = list(self._response_interceptors)

        current = error
        for interceptor in interceptors:
            try:
                outcome = interceptor.on_error(current)
            except Exception as e:
                current = e
                continue
            if isinstance(outcome, Recovered):
                return outcome
            current = outcome.error
        return Propagate(current)

    @property
    def request_interceptor_count(self) -> int:
        with self._lock:
            return len(self._request_interceptors)

    @property
    def response_interceptor_count(self) -> int:
        with self._lock:
            return len(self._response_interceptors)


# =============================================================================
# Default Interceptors
# =============================================================================


class AuthHeadersInterceptor(RequestInterceptor):
    """
    Adds the bearer token and the JSON content type to every request.

    `Authorization: Bearer <token>` is added when the credential store holds
    a token under `token_key`. `Content-Type: application/json` is added
    unless the request already sets a content type.

    Args:
        credential_store: Where the auth token is read from.
        token_key: Key of the auth token in the store.
    """

    def __init__(self, credential_store: "CredentialStore", token_key: str = "auth_token"):
        assert credential_store is not None, "credential_store cannot be None"
        assert token_key, "token_key cannot be empty"

        self.credential_store = credential_store
        self.token_key = token_key

    @override
    def on_request(self, request: ApiRequest) -> ApiRequest:
        headers = dict(request.headers)

        token = self.credential_store.get(self.token_key)
        if token:
            headers["Authorization"] = f"Bearer {token}"

        if not any(name.lower() == "content-type" for name in headers):
            headers["Content-Type"] = "application/json"

        return request.with_headers(headers)


class DefaultErrorInterceptor(ResponseInterceptor):
    """
    Handles authentication and server rate-limit failures.

    - HTTP 401: removes the auth token from the credential store, logs a
      warning and calls `on_unauthorized` when given. The error propagates.
    - HTTP 429: propagates a `ServerSideRateLimitError` instead, chained
      from the original `HttpError`.

    Args:
        credential_store: Store the auth token is removed from on 401.
        token_key: Key of the auth token in the store.
        on_unauthorized: Optional callback run after a 401, e.g. to redirect
            the user to a login flow.
    """

    def __init__(
        self,
        credential_store: "CredentialStore",
        token_key: str = "auth_token",
        on_unauthorized: Callable[[], None] | None = None,
    ):
        assert credential_store is not None, "credential_store cannot be None"
        assert token_key, "token_key cannot be empty"

        self.credential_store = credential_store
        self.token_key = token_key
        self.on_unauthorized = on_unauthorized

    @override
    def on_error(self, error: Exception) -> ErrorOutcome:
        if not isinstance(error, ApiError):
            return Propagate(error)

        if error.status == 401:
            self.credential_store.remove(self.token_key)
            logger.warning("🔒 Authentication required: auth token removed from the credential store.")
            if self.on_unauthorized is not None:
                self.on_unauthorized()

        if error.status == 429 and isinstance(error, HttpError) and not isinstance(error, ServerSideRateLimitError):
            rate_limit_error = ServerSideRateLimitError(error)
            rate_limit_error.__cause__ = error
            return Propagate(rate_limit_error)

        return Propagate(error)
