"""
Response body decoding.

Successful bodies are decoded by a `ResponseParser` picked from the response
`Content-Type`: JSON when it contains `application/json`, text otherwise. The
decoded value is tagged with a `PayloadKind` so callers can tell a JSON string
apart from a plain-text body.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, override

import requests

from goalwire._models import PayloadKind

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"


class ResponseParser(ABC):
    """Strategy that turns a raw `requests.Response` body into a value."""

    kind: PayloadKind

    @abstractmethod
    def parse(self, response: requests.Response) -> Any:
        """
        Decode the body of `response`.

        Raises:
            ValueError: If the body cannot be decoded.
        """
        pass


class JsonResponseParser(ResponseParser):
    """Decodes JSON bodies. An empty body decodes to None."""

    kind = PayloadKind.JSON

    @override
    def parse(self, response: requests.Response) -> Any:
        if not response.content:
            return None
        return response.json()


class TextResponseParser(ResponseParser):
    """Reads the body as text using the response encoding."""

    kind = PayloadKind.TEXT

    @override
    def parse(self, response: requests.Response) -> Any:
        return response.text


_JSON_PARSER = JsonResponseParser()
_TEXT_PARSER = TextResponseParser()


def parser_for(content_type: str | None) -> ResponseParser:
    """Pick the parser for a `Content-Type` header value."""
    if content_type and JSON_CONTENT_TYPE in content_type.lower():
        return _JSON_PARSER
    return _TEXT_PARSER


def parse_error_body(response: requests.Response) -> Any:
    """
    Decode the body of an error response.

    Falls back to `{"message": <reason phrase>}` when the body is not valid
    JSON, so error handlers can always look up a message.
    """
    try:
        return response.json()
    except ValueError:
        logger.debug(f"Error response body is not JSON (HTTP {response.status_code})")
        return {"message": response.reason or ""}


def error_message(data: Any, status: int, status_text: str) -> str:
    """Return the server-provided message, or `HTTP <status>: <reason>`."""
    if isinstance(data, dict):
        message = data.get("message")
        if message:
            return str(message)
    return f"HTTP {status}: {status_text}"
