"""
Global configuration for the goalwire client.

This module provides a simple configuration system following Convention over
Configuration (CoC). Users can optionally call GOALWIRE.configure() at
application startup to customize defaults. If not called, sensible defaults
are used.

Hierarchy of precedence (highest to lowest):
1. `ClientConfig` passed to the `ApiClient` constructor
2. Values set via GOALWIRE.configure()
3. Environment variables (GOALWIRE_*) - when allow_env_override=True
4. Hardcoded defaults (in dataclass fields)

All durations are expressed in seconds.

Example:
    >>> from goalwire import GOALWIRE
    >>>
    >>> # Pre-loaded with defaults + env vars
    >>> timeout = GOALWIRE.config.timeout
    >>>
    >>> # Custom configuration
    >>> GOALWIRE.configure(base_url="https://api.example.com/api", retry_attempts=5)
"""

from __future__ import annotations

import os
from collections.abc import Callable
from dataclasses import dataclass, field, fields, replace
from typing import Any, Self

# =============================================================================
# Exceptions
# =============================================================================


class ConfigEnvVarError(ValueError):
    """Raised when an environment variable has an invalid value."""

    def __init__(
        self,
        env_var: str,
        value: str,
        expected_type: str,
        cause: Exception | None = None,
    ):
        self.env_var = env_var
        self.value = value
        self.expected_type = expected_type
        super().__init__(f"Invalid value for {env_var}: '{value}' (expected {expected_type})")
        self.__cause__ = cause


class ConfigValidationError(ValueError):
    """Raised when a configuration value fails validation."""

    def __init__(
        self,
        field: str,
        value: Any,
        message: str,
        section: str | None = None,
    ):
        self.field = field
        self.value = value
        self.section = section
        prefix = f"[{section}] " if section else ""
        super().__init__(f"{prefix}Invalid value for '{field}': {value!r}. {message}")


# =============================================================================
# Environment Variables
# =============================================================================


class EnvVars:
    """
    Reads environment variables with type conversion.

    Example:
        >>> EnvVars.get("GOALWIRE_TIMEOUT", type_hint=float)
        30.0
        >>> EnvVars.get("UNDEFINED_VAR")
        None
    """

    @staticmethod
    def get(
        var_name: str,
        type_hint: Any = str,
        converter: Callable[[str], Any] | None = None,
    ) -> Any:
        """
        Read an environment variable with optional type conversion.

        Args:
            var_name: The environment variable name.
            type_hint: Type hint used to infer the converter (ignored if converter is provided).
            converter: Custom converter function (takes precedence over type_hint).

        Returns:
            The converted value, or None if env var is not set/empty.

        Raises:
            ConfigEnvVarError: If the value cannot be converted.
        """
        raw_value = os.environ.get(var_name)
        if not raw_value:
            return None

        actual_converter = converter or EnvVars._infer_converter(type_hint)
        try:
            return actual_converter(raw_value)
        except (ValueError, TypeError) as e:
            raise ConfigEnvVarError(
                env_var=var_name,
                value=raw_value,
                expected_type=type_hint.__name__ if hasattr(type_hint, "__name__") else str(type_hint),
                cause=e,
            ) from e

    @staticmethod
    def _infer_converter(type_hint: Any) -> Callable[[str], Any]:
        # Annotations are strings here (PEP 563)
        type_str = str(type_hint)

        if type_hint is int or type_str == "int":
            return int
        if type_hint is float or type_str == "float":
            return float
        if type_hint is bool or type_str == "bool":
            return lambda v: v.lower() in ("true", "1", "yes")
        return str


# =============================================================================
# Base Class
# =============================================================================


@dataclass(frozen=True)
class OverridableConfig:
    """
    Base class for immutable configuration dataclasses.

    Provides `.with_overrides()` for creating new instances with partial field
    updates, and `.with_env_vars()` for applying the env vars declared in field
    metadata. Unknown field names are rejected to catch typos early.
    """

    def with_overrides(self, overrides: dict[str, Any]) -> Self:
        """
        Return a new instance with specified fields overridden.

        `None` values are ignored, so callers can pass optional arguments
        straight through.

        Raises:
            ValueError: If overrides contains unknown field names.

        Example:
            >>> ClientConfig().with_overrides({"timeout": 10.0}).timeout
            10.0
        """
        if not overrides:
            return self

        valid_fields = {f.name for f in fields(self)}
        invalid_fields = set(overrides.keys()) - valid_fields

        if invalid_fields:
            raise ValueError(
                f"Unknown config fields: {invalid_fields}. "
                f"Valid fields are: {valid_fields}"
            )

        filtered = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **filtered) if filtered else self

    def with_env_vars(self) -> Self:
        """
        Return new instance with environment variables applied.

        Raises:
            ConfigEnvVarError: If an env var has an invalid value.
        """
        overrides: dict[str, Any] = {}
        for f in fields(self):
            env_var = f.metadata.get("env")
            if env_var:
                value = EnvVars.get(
                    var_name=env_var,
                    type_hint=f.type,
                    converter=f.metadata.get("converter"),
                )
                if value is not None:
                    overrides[f.name] = value
        return self.with_overrides(overrides)


# =============================================================================
# Client Configuration
# =============================================================================


@dataclass(frozen=True)
class ClientConfig(OverridableConfig):
    """
    Configuration for `ApiClient`.

    Attributes:
        base_url: Prefix joined to relative request URLs.
            Env var: GOALWIRE_BASE_URL

        timeout: Default per-attempt timeout in seconds.
            Env var: GOALWIRE_TIMEOUT

        retry_attempts: Total number of attempts per call, including the
            first one. Use 1 to disable retries.
            Env var: GOALWIRE_RETRY_ATTEMPTS

        retry_delay: Base delay in seconds before the second attempt.
            Subsequent delays double (1s, 2s, 4s...), plus up to 1s of jitter.
            Env var: GOALWIRE_RETRY_DELAY

        rate_limit_requests: Maximum requests per URL within the window.
            Env var: GOALWIRE_RATE_LIMIT_REQUESTS

        rate_limit_window: Sliding window duration in seconds.
            Env var: GOALWIRE_RATE_LIMIT_WINDOW

        cache_ttl: Time-to-live of cached GET responses in seconds.
            Env var: GOALWIRE_CACHE_TTL

        max_workers: Maximum number of concurrent transfers.
            Env var: GOALWIRE_MAX_WORKERS

        auth_token_key: Key of the auth token in the credential store.
            Env var: GOALWIRE_AUTH_TOKEN_KEY

    Example:
        >>> from goalwire import GOALWIRE
        >>> GOALWIRE.config.retry_attempts
        3
    """

    base_url: str = field(default="/api", metadata={"env": "GOALWIRE_BASE_URL"})
    timeout: float = field(default=30.0, metadata={"env": "GOALWIRE_TIMEOUT"})
    retry_attempts: int = field(default=3, metadata={"env": "GOALWIRE_RETRY_ATTEMPTS"})
    retry_delay: float = field(default=1.0, metadata={"env": "GOALWIRE_RETRY_DELAY"})
    rate_limit_requests: int = field(default=100, metadata={"env": "GOALWIRE_RATE_LIMIT_REQUESTS"})
    rate_limit_window: float = field(default=60.0, metadata={"env": "GOALWIRE_RATE_LIMIT_WINDOW"})
    cache_ttl: float = field(default=300.0, metadata={"env": "GOALWIRE_CACHE_TTL"})
    max_workers: int = field(default=10, metadata={"env": "GOALWIRE_MAX_WORKERS"})
    auth_token_key: str = field(default="auth_token", metadata={"env": "GOALWIRE_AUTH_TOKEN_KEY"})

    def validate(self) -> Self:
        """Validate client configuration fields."""
        if not self.base_url:
            raise ConfigValidationError(
                "base_url", self.base_url,
                "Must not be empty.", section="client"
            )
        if self.timeout <= 0:
            raise ConfigValidationError(
                "timeout", self.timeout,
                "Must be greater than 0.", section="client"
            )
        if self.retry_attempts < 1:
            raise ConfigValidationError(
                "retry_attempts", self.retry_attempts,
                "Must be >= 1.", section="client"
            )
        if self.retry_delay < 0:
            raise ConfigValidationError(
                "retry_delay", self.retry_delay,
                "Must be >= 0.", section="client"
            )
        if self.rate_limit_requests < 1:
            raise ConfigValidationError(
                "rate_limit_requests", self.rate_limit_requests,
                "Must be >= 1.", section="client"
            )
        if self.rate_limit_window <= 0:
            raise ConfigValidationError(
                "rate_limit_window", self.rate_limit_window,
                "Must be greater than 0.", section="client"
            )
        if self.cache_ttl < 0:
            raise ConfigValidationError(
                "cache_ttl", self.cache_ttl,
                "Must be >= 0.", section="client"
            )
        if self.max_workers < 1:
            raise ConfigValidationError(
                "max_workers", self.max_workers,
                "Must be >= 1.", section="client"
            )
        if not self.auth_token_key:
            raise ConfigValidationError(
                "auth_token_key", self.auth_token_key,
                "Must not be empty.", section="client"
            )
        return self


# =============================================================================
# Global Singleton
# =============================================================================


class _GOALWIRE:
    """
    Singleton for client configuration.

    Use `GOALWIRE.configure()` to customize settings and `GOALWIRE.config`
    to access the current configuration. Clients created without an explicit
    `ClientConfig` start from `GOALWIRE.config`.

    Example:
        >>> from goalwire import GOALWIRE
        >>> GOALWIRE.configure(timeout=10.0)
        >>> print(GOALWIRE.config.timeout)
    """

    def __init__(self) -> None:
        self._config: ClientConfig = ClientConfig().with_env_vars()
        self._configured: set[str] = set()

    def configure(self, *, allow_env_override: bool = True, **overrides: Any) -> ClientConfig:
        """
        Configure client defaults.

        Call at application startup to customize defaults. Updates the
        internal configuration and returns the configured instance.

        Args:
            allow_env_override: If True (default), env vars are used as
                fallback for fields NOT provided. If False, ignores env vars.
            **overrides: `ClientConfig` field values.

        Returns:
            The configured ClientConfig instance.

        Raises:
            ValueError: If overrides contain unknown field names.
            ConfigValidationError: If any config value fails validation.
        """
        base = ClientConfig()
        if allow_env_override:
            base = base.with_env_vars()

        self._config = base.with_overrides(overrides)
        self._configured = {name for name, value in overrides.items() if value is not None}
        return self.validate()

    @property
    def config(self) -> ClientConfig:
        """Access current configuration (read-only)."""
        return self._config

    def reset(self) -> ClientConfig:
        """
        Reset configuration to defaults + env vars.

        Useful for testing to ensure clean state between tests.
        """
        self._config = ClientConfig().with_env_vars()
        self._configured = set()
        return self.validate()

    def validate(self) -> ClientConfig:
        """
        Validate current configuration.

        Raises:
            ConfigValidationError: If any config value is invalid.
        """
        return self._config.validate()

    def explain(self, output: Callable[[str], None] = print) -> None:
        """
        Print current configuration with the source of each value.

        Sources are "default", "env:VAR_NAME" or "configure".

        Args:
            output: Callable to output each line. Can be used with logging:
                `GOALWIRE.explain(logger.info)`
        """
        name_width = 22

        output("GOALWIRE Configuration:")
        output("=" * 60)
        for f in fields(self._config):
            value = getattr(self._config, f.name)
            env_var = f.metadata.get("env")
            if f.name in self._configured:
                source = "configure"
            elif env_var and os.environ.get(env_var):
                source = f"env:{env_var}"
            else:
                source = "default"
            dots = "." * (name_width - len(f.name))
            output(f"  {f.name} {dots} {value} ({source})")
        output("=" * 60)

    def __repr__(self) -> str:
        return f"GOALWIRE(config={self._config!r})"


# Global singleton instance - always reflects current configuration
GOALWIRE: _GOALWIRE = _GOALWIRE()
GOALWIRE.validate()  # Validate defaults + env vars on module load
