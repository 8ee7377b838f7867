"""
The goalwire API client.

`ApiClient` is the facade every caller goes through. Each call flows through
the same pipeline:

    request interceptors
    -> build URL
    -> rate-limit check
    -> cache lookup (GET only)
    -> deduplication
        -> rate-limit tracking
        -> retry(transfer)
        -> cache store (GET only)
        -> response interceptors, or error interceptors on failure

Example:
    >>> from goalwire import ApiClient, ClientConfig
    >>> client = ApiClient(ClientConfig(base_url="https://api.example.com/api"))
    >>> goals = client.get("/goals", params={"status": "active"}).data
    >>> client.post("/goals", body={"title": "Run a marathon"})
    >>> client.clear_cache(r"^GET:/goals")
"""

import logging
import threading
from collections.abc import Callable
from typing import Any
from urllib.parse import urlsplit

from goalwire._auth import CredentialStore, InMemoryCredentialStore
from goalwire._cache import ResponseCache
from goalwire._cancel import CancelSource, create_cancel_token
from goalwire._config import GOALWIRE, ClientConfig
from goalwire._dedup import RequestDeduplicator
from goalwire._http import HttpClient, RequestsHttpClient, TransferExecutor
from goalwire._interceptors import (
    AuthHeadersInterceptor,
    DefaultErrorInterceptor,
    InterceptorPipeline,
    Recovered,
    RequestInterceptor,
    ResponseInterceptor,
)
from goalwire._models import ApiRequest, ApiResponse, ClientStats, HttpMethod
from goalwire._rate_limit import SlidingWindowRateLimiter
from goalwire._retry import with_retry
from goalwire._utils import build_url, is_host_reachable

logger = logging.getLogger(__name__)


class ApiClient:
    """
    HTTP client with interceptors, rate limiting, caching, deduplication,
    retries, timeouts and cancellation.

    Thread-safe: a single instance can be shared by any number of threads.

    Args:
        config: Client configuration. Defaults to `GOALWIRE.config`.
        http_client: Transport used for the exchanges. Defaults to a
            `RequestsHttpClient`.
        credential_store: Where the bearer token is read from. Defaults to
            an empty `InMemoryCredentialStore`.
        on_unauthorized: Optional callback run after an HTTP 401.
        install_default_interceptors: If True (default), installs
            `AuthHeadersInterceptor` and `DefaultErrorInterceptor`.

    Raises:
        ConfigValidationError: If the configuration is invalid.
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        http_client: HttpClient | None = None,
        credential_store: CredentialStore | None = None,
        on_unauthorized: Callable[[], None] | None = None,
        install_default_interceptors: bool = True,
    ):
        self._config: ClientConfig = (config or GOALWIRE.config).validate()
        self._config_lock = threading.Lock()

        self.credential_store = credential_store or InMemoryCredentialStore()

        self._interceptors = InterceptorPipeline()
        self._rate_limiter = SlidingWindowRateLimiter()
        self._cache = ResponseCache()
        self._deduplicator = RequestDeduplicator()
        self._transfer = TransferExecutor(
            http_client=http_client or RequestsHttpClient(),
            max_workers=self._config.max_workers,
        )

        self._auth_interceptor: AuthHeadersInterceptor | None = None
        self._error_interceptor: DefaultErrorInterceptor | None = None
        if install_default_interceptors:
            self._auth_interceptor = AuthHeadersInterceptor(
                self.credential_store, token_key=self._config.auth_token_key,
            )
            self._error_interceptor = DefaultErrorInterceptor(
                self.credential_store,
                token_key=self._config.auth_token_key,
                on_unauthorized=on_unauthorized,
            )
            self._interceptors.add_request_interceptor(self._auth_interceptor)
            self._interceptors.add_response_interceptor(self._error_interceptor)

    # -------------------------------------------------------------------------
    # Requests
    # -------------------------------------------------------------------------

    def request(self, request: ApiRequest) -> ApiResponse[Any]:
        """
        Execute `request` through the full pipeline.

        Args:
            request: The request descriptor.

        Returns:
            The response, possibly served from the cache (`from_cache=True`)
            or recovered by an error interceptor.

        Raises:
            ClientSideRateLimitError: If the URL exceeded its local budget.
            ApiError: If the call failed and no interceptor recovered it.
            Exception: Whatever an interceptor raised.
        """
        config = self._config

        request = self._interceptors.apply_request(request)
        full_url = build_url(config.base_url, request.url, request.params)

        self._rate_limiter.check(full_url, config.rate_limit_requests, config.rate_limit_window)

        cache_key = request.cache_key
        if request.method == HttpMethod.GET:
            cached = self._cache.get_entry(cache_key)
            if cached is not None:
                logger.debug(f"Cache hit: {cache_key}")
                return ApiResponse(
                    data=cached.data,
                    status=200,
                    status_text="OK",
                    headers={},
                    kind=cached.kind,
                    from_cache=True,
                )

        return self._deduplicator.dedupe(
            cache_key,
            lambda: self._execute(request, full_url, cache_key, config),
        )

    def _execute(
        self,
        request: ApiRequest,
        full_url: str,
        cache_key: str,
        config: ClientConfig,
    ) -> ApiResponse[Any]:
        self._rate_limiter.track(full_url)

        max_attempts = request.retry_attempts if request.retry_attempts is not None else config.retry_attempts
        try:
            response = with_retry(
                lambda: self._transfer.execute(request, full_url, config.timeout),
                max_attempts=max_attempts,
                base_delay=config.retry_delay,
                logger_prefix=f"{request.method} {full_url}",
            )

            if request.method == HttpMethod.GET:
                self._cache.set(
                    cache_key,
                    response.data,
                    ttl=config.cache_ttl,
                    etag=response.headers.get("etag"),
                    kind=response.kind,
                )

            return self._interceptors.apply_response(response)
        except Exception as e:
            outcome = self._interceptors.apply_error(e)
            if isinstance(outcome, Recovered):
                logger.debug(f"Request recovered by an error interceptor: {request.method} {full_url}")
                return outcome.response
            raise outcome.error

    def get(self, url: str, params: dict[str, Any] | None = None, **options: Any) -> ApiResponse[Any]:
        """
        Send a GET request.

        Options: `headers`, `timeout`, `retry_attempts`, `cancel_token`.
        """
        return self.request(ApiRequest(url=url, method=HttpMethod.GET, params=params, **options))

    def post(self, url: str, body: Any = None, **options: Any) -> ApiResponse[Any]:
        """Send a POST request. Options as in `get()`, plus `params`."""
        return self.request(ApiRequest(url=url, method=HttpMethod.POST, body=body, **options))

    def put(self, url: str, body: Any = None, **options: Any) -> ApiResponse[Any]:
        return self.request(ApiRequest(url=url, method=HttpMethod.PUT, body=body, **options))

    def patch(self, url: str, body: Any = None, **options: Any) -> ApiResponse[Any]:
        return self.request(ApiRequest(url=url, method=HttpMethod.PATCH, body=body, **options))

    def delete(self, url: str, **options: Any) -> ApiResponse[Any]:
        return self.request(ApiRequest(url=url, method=HttpMethod.DELETE, **options))

    # -------------------------------------------------------------------------
    # Interceptors
    # -------------------------------------------------------------------------

    def add_request_interceptor(self, interceptor: RequestInterceptor) -> Callable[[], None]:
        """Register a request interceptor. Returns an unsubscribe callable."""
        return self._interceptors.add_request_interceptor(interceptor)

    def add_response_interceptor(self, interceptor: ResponseInterceptor) -> Callable[[], None]:
        """Register a response interceptor. Returns an unsubscribe callable."""
        return self._interceptors.add_response_interceptor(interceptor)

    # -------------------------------------------------------------------------
    # Configuration and state
    # -------------------------------------------------------------------------

    def update_config(self, **overrides: Any) -> ClientConfig:
        """
        Merge `overrides` into the configuration.

        Calls already in flight keep the configuration they started with.
        `max_workers` only applies to clients created afterwards.

        Raises:
            ValueError: If overrides contain unknown field names.
            ConfigValidationError: If the merged configuration is invalid.
        """
        with self._config_lock:
            new_config = self._config.with_overrides(overrides).validate()
            self._config = new_config

        for interceptor in (self._auth_interceptor, self._error_interceptor):
            if interceptor is not None:
                interceptor.token_key = new_config.auth_token_key

        logger.debug(f"Client configuration updated: {overrides}")
        return new_config

    def get_config(self) -> ClientConfig:
        """Return the current configuration (immutable snapshot)."""
        return self._config

    def clear_cache(self, pattern: str | None = None) -> int:
        """
        Remove cached responses whose key matches `pattern`, or all of them.

        Cache keys look like `GET:/goals:{"page":1}`.

        Returns:
            The number of removed entries.
        """
        removed = self._cache.clear(pattern)
        logger.debug(f"Cleared {removed} cache entries (pattern={pattern!r})")
        return removed

    def create_cancel_token(self) -> CancelSource:
        """Create a `(token, cancel)` pair to abort calls made with `cancel_token=token`."""
        return create_cancel_token()

    def is_online(self) -> bool:
        """
        Report whether the API host looks reachable.

        Probes the host of an absolute `base_url` with a TCP connection.
        A relative `base_url` has no host to probe and is reported online.
        """
        base_url = self._config.base_url
        if not urlsplit(base_url).hostname:
            return True
        return is_host_reachable(base_url, timeout=min(self._config.timeout, 3.0))

    def get_stats(self) -> ClientStats:
        """Return a snapshot of the cache, in-flight and rate-limiter sizes."""
        return ClientStats(
            cache_size=len(self._cache),
            pending_requests=self._deduplicator.pending_count,
            rate_limit_trackers=self._rate_limiter.tracker_count,
        )

    def reset(self) -> None:
        """Clear the response cache and every rate-limit tracker."""
        self._cache.clear()
        self._rate_limiter.reset()

    def close(self) -> None:
        """Stop accepting transfers and release the transport."""
        self._transfer.close()

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"ApiClient(base_url={self._config.base_url!r})"


_default_client: ApiClient | None = None
_default_client_lock = threading.Lock()


def default_client() -> ApiClient:
    """
    Return the process-wide default client, creating it on first use.

    The default client is built from `GOALWIRE.config` at the time of the
    first call.
    """
    global _default_client
    if _default_client is None:
        with _default_client_lock:
            if _default_client is None:
                _default_client = ApiClient()
    return _default_client
