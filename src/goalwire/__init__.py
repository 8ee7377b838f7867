"""
goalwire: HTTP request orchestration client for the SMART-goals dashboard API.

Every call goes through one pipeline: interceptors, per-URL rate limiting,
response caching, in-flight deduplication, retries with exponential backoff,
timeouts and cancellation.

Quick Start:
    >>> from goalwire import ApiClient, ClientConfig
    >>> client = ApiClient(ClientConfig(base_url="https://api.example.com/api"))
    >>> response = client.get("/goals", params={"page": 1})
    >>> print(response.status, response.data)

Goals:
    >>> from goalwire.goals import GoalsApi, GoalStatus
    >>> goals = GoalsApi(client)
    >>> goals.update_goal_status("goal-1", GoalStatus.COMPLETED)

Global Configuration:
    >>> from goalwire import GOALWIRE
    >>>
    >>> # Pre-loaded with defaults + env vars
    >>> timeout = GOALWIRE.config.timeout
    >>>
    >>> # Custom configuration
    >>> GOALWIRE.configure(base_url="https://api.example.com/api", retry_attempts=5)

Main Classes:
    - ApiClient: The client facade.
    - ApiRequest: Immutable descriptor of one logical HTTP call.
    - ApiResponse: Immutable result of a successful call.
    - ClientStats: Snapshot of the client's internal state.
    - default_client: Process-wide default client.

Configuration:
    - GOALWIRE: Global singleton for configuration.
    - ClientConfig: Client configuration dataclass.
    - ConfigEnvVarError: Exception raised when env var parsing fails.
    - ConfigValidationError: Exception raised when config validation fails.

Errors:
    - ApiError: Base class for every client error.
    - NetworkError, RequestTimeoutError, RequestCancelledError, HttpError,
      ServerSideRateLimitError, ClientSideRateLimitError.

Interceptors:
    - RequestInterceptor, ResponseInterceptor: Base classes for hooks.
    - Propagate, Recovered: Outcomes of `ResponseInterceptor.on_error`.
    - AuthHeadersInterceptor, DefaultErrorInterceptor: Installed by default.

Authentication:
    - CredentialStore: Abstract base class for credential stores.
    - InMemoryCredentialStore, FileCredentialStore, ChainedCredentialStore.

HTTP Client:
    - HttpClient: Abstract base class for the raw transport.
    - RequestsHttpClient: Default transport backed by `requests`.

Cancellation:
    - CancelToken, CancelSource, create_cancel_token.
"""

from importlib.metadata import version as _get_version

__version__ = _get_version("goalwire")

from goalwire._auth import (
    ChainedCredentialStore,
    CredentialStore,
    FileCredentialStore,
    InMemoryCredentialStore,
)
from goalwire._cancel import CancelSource, CancelToken, create_cancel_token
from goalwire._client import ApiClient, default_client
from goalwire._config import (
    GOALWIRE,
    ClientConfig,
    ConfigEnvVarError,
    ConfigValidationError,
)
from goalwire._errors import (
    ApiError,
    ClientSideRateLimitError,
    ErrorResponse,
    HttpError,
    NetworkError,
    RequestCancelledError,
    RequestTimeoutError,
    ServerSideRateLimitError,
)
from goalwire._http import HttpClient, RequestsHttpClient
from goalwire._interceptors import (
    AuthHeadersInterceptor,
    DefaultErrorInterceptor,
    ErrorOutcome,
    Propagate,
    Recovered,
    RequestInterceptor,
    ResponseInterceptor,
)
from goalwire._models import ApiRequest, ApiResponse, ClientStats, HttpMethod, PayloadKind

__all__ = [
    "__version__",
    # Client
    "ApiClient",
    "default_client",
    "ApiRequest",
    "ApiResponse",
    "ClientStats",
    "HttpMethod",
    "PayloadKind",
    # Configuration
    "GOALWIRE",
    "ClientConfig",
    "ConfigEnvVarError",
    "ConfigValidationError",
    # Errors
    "ApiError",
    "ErrorResponse",
    "NetworkError",
    "RequestTimeoutError",
    "RequestCancelledError",
    "HttpError",
    "ServerSideRateLimitError",
    "ClientSideRateLimitError",
    # Interceptors
    "RequestInterceptor",
    "ResponseInterceptor",
    "ErrorOutcome",
    "Propagate",
    "Recovered",
    "AuthHeadersInterceptor",
    "DefaultErrorInterceptor",
    # Authentication
    "CredentialStore",
    "InMemoryCredentialStore",
    "FileCredentialStore",
    "ChainedCredentialStore",
    # HTTP Client
    "HttpClient",
    "RequestsHttpClient",
    # Cancellation
    "CancelToken",
    "CancelSource",
    "create_cancel_token",
]
