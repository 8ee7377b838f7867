"""Tests for the error hierarchy and its classification."""

import pytest

from goalwire import (
    ApiError,
    ClientSideRateLimitError,
    ErrorResponse,
    HttpError,
    NetworkError,
    RequestCancelledError,
    RequestTimeoutError,
    ServerSideRateLimitError,
)
from goalwire._errors import is_retryable_error


class TestErrorClassification:
    """Tests for the flags derived from each error class."""

    def test_network_error(self):
        error = NetworkError()

        assert str(error) == "Network error"
        assert error.status is None
        assert error.is_network_error
        assert not error.is_timeout
        assert error.is_retryable

    def test_timeout_error(self):
        error = RequestTimeoutError()

        assert str(error) == "Request timeout"
        assert error.is_timeout
        assert not error.is_network_error
        assert error.is_retryable

    def test_cancelled_error_is_timeout_but_not_retryable(self):
        error = RequestCancelledError()

        assert isinstance(error, RequestTimeoutError)
        assert error.is_timeout
        assert not error.is_retryable

    @pytest.mark.parametrize("status", [500, 502, 503, 504, 408, 429])
    def test_http_error_retryable_statuses(self, status):
        error = HttpError("boom", status=status)

        assert error.is_retryable
        assert not error.is_network_error
        assert not error.is_timeout

    @pytest.mark.parametrize("status", [400, 401, 403, 404, 409, 410, 422])
    def test_http_error_non_retryable_statuses(self, status):
        assert not HttpError("nope", status=status).is_retryable

    def test_http_error_carries_response_snapshot(self):
        error = HttpError("Not found", status=404, status_text="Not Found")

        assert error.response == ErrorResponse(data=None, status=404, status_text="Not Found")

    def test_server_side_rate_limit_error_copies_original(self):
        original = HttpError(
            "Too many",
            status=429,
            status_text="Too Many Requests",
            response=ErrorResponse(data={"message": "Too many"}, status=429, status_text="Too Many Requests"),
        )

        error = ServerSideRateLimitError(original)

        assert str(error) == "Rate limit exceeded"
        assert error.status == 429
        assert error.response is original.response
        assert isinstance(error, HttpError)

    def test_client_side_rate_limit_error(self):
        error = ClientSideRateLimitError("https://api/goals", max_requests=10, time_window=60.0)

        assert str(error) == "Rate limit exceeded"
        assert error.key == "https://api/goals"
        assert not error.is_retryable
        assert not error.is_network_error
        assert isinstance(error, ApiError)


class TestIsRetryableError:
    """Tests for is_retryable_error()."""

    def test_api_errors_use_their_own_flag(self):
        assert is_retryable_error(HttpError("x", status=503))
        assert not is_retryable_error(HttpError("x", status=404))

    def test_foreign_exceptions_are_retryable(self):
        assert is_retryable_error(RuntimeError("transport exploded"))

    def test_base_exceptions_are_not_retryable(self):
        assert not is_retryable_error(KeyboardInterrupt())
