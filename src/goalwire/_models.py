"""
Data models for the goalwire client.

This module contains the value objects that flow through the request pipeline:
- HttpMethod: Enum of supported HTTP methods.
- ApiRequest: Immutable descriptor of one logical HTTP call.
- ApiResponse: Immutable result of a successful call.
- PayloadKind: Tag telling how the response body was decoded.
- ClientStats: Snapshot of the client's internal state for observability.
"""

import enum
import json
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Generic, TypeVar

if TYPE_CHECKING:
    from goalwire._cancel import CancelToken

T = TypeVar("T")


class HttpMethod(enum.StrEnum):
    """HTTP methods supported by `ApiClient`."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"

    def __str__(self) -> str:
        return self.value


class PayloadKind(enum.StrEnum):
    """
    How a response body was decoded.

    Attributes:
        JSON: The body was parsed as JSON (`data` is a JSON value).
        TEXT: The body was read as text (`data` is a `str`).
    """

    JSON = "JSON"
    TEXT = "TEXT"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ApiRequest:
    """
    Immutable descriptor of one logical HTTP call.

    Interceptors never mutate a request: they return a new instance via
    `with_headers()` or `with_overrides()`.

    Attributes:
        url: Absolute URL, or path relative to the client's `base_url`.
        method: HTTP method.
        headers: Request headers.
        body: Request body. `str`/`bytes` are sent as-is, anything else is
            JSON-encoded. Ignored for GET.
        params: Query parameters. `None` values are dropped.
        timeout: Per-call timeout in seconds (overrides the client default).
        retry_attempts: Per-call maximum number of attempts (overrides the
            client default).
        cancel_token: Optional token that aborts the call when cancelled.

    Example:
        >>> request = ApiRequest(url="/goals", params={"status": "active"})
        >>> request.cache_key
        'GET:/goals:{"status":"active"}'
    """

    url: str
    method: HttpMethod = HttpMethod.GET
    headers: dict[str, str] = field(default_factory=dict)
    body: Any = None
    params: dict[str, Any] | None = None
    timeout: float | None = None
    retry_attempts: int | None = None
    cancel_token: "CancelToken | None" = field(default=None, compare=False)

    def __post_init__(self) -> None:
        assert self.url, "Request URL cannot be empty."
        assert self.timeout is None or self.timeout > 0, "Request timeout must be greater than 0."
        assert self.retry_attempts is None or self.retry_attempts >= 1, "Request retry_attempts must be >= 1."
        # Accept plain strings ("get", "POST") and normalize them
        if not isinstance(self.method, HttpMethod):
            object.__setattr__(self, "method", HttpMethod(str(self.method).upper()))

    @property
    def cache_key(self) -> str:
        """
        Key identifying logically equivalent requests.

        Format: `METHOD:URL:JSON(params)`. Used both by the response cache and
        by the request deduplicator.
        """
        params_json = json.dumps(self.params or {}, separators=(",", ":"), ensure_ascii=False, default=str)
        return f"{self.method}:{self.url}:{params_json}"

    def with_headers(self, headers: dict[str, str]) -> "ApiRequest":
        """Return a new request with the given headers replacing the current ones."""
        return replace(self, headers=dict(headers))

    def with_overrides(self, **overrides: Any) -> "ApiRequest":
        """Return a new request with the given fields replaced."""
        return replace(self, **overrides)


@dataclass(frozen=True)
class ApiResponse(Generic[T]):
    """
    Immutable result of a successful call.

    Attributes:
        data: The decoded body.
        status: HTTP status code.
        status_text: HTTP reason phrase.
        headers: Response headers with lower-cased names.
        kind: How `data` was decoded.
        from_cache: True when served from the response cache.
    """

    data: T
    status: int
    status_text: str
    headers: dict[str, str] = field(default_factory=dict)
    kind: PayloadKind = PayloadKind.JSON
    from_cache: bool = False

    def is_json(self) -> bool:
        """Return True if the body was decoded as JSON."""
        return self.kind == PayloadKind.JSON


@dataclass(frozen=True)
class ClientStats:
    """
    Snapshot of an `ApiClient`'s internal state.

    Attributes:
        cache_size: Number of entries in the response cache (expired entries
            included until they are looked up again).
        pending_requests: Number of in-flight deduplicated transfers.
        rate_limit_trackers: Number of URLs tracked by the rate limiter.
    """

    cache_size: int
    pending_requests: int
    rate_limit_trackers: int
