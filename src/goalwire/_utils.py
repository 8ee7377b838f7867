"""
Utility functions for the goalwire client.

This module provides internal helper functions used throughout the client.
These functions are not part of the public API and may change without notice.
"""

from __future__ import annotations

import json
import logging
import random
import socket
import time
from pathlib import Path
from typing import Any
from urllib.parse import urlencode, urlsplit

logger = logging.getLogger(__name__)


def sleep_with_jitter(seconds: float, max_jitter: float = 1.0) -> float:
    """
    Sleep for the given duration plus a random offset.

    Adds up to `max_jitter` seconds to the sleep to prevent synchronized
    retry storms when many clients fail at the same time.

    Args:
        seconds: Base sleep duration in seconds.
        max_jitter: Upper bound (exclusive) of the random offset in seconds.

    Returns:
        The number of seconds actually requested from `time.sleep`.
    """
    sleep_time = max(0.0, seconds + random.random() * max_jitter)
    time.sleep(sleep_time)
    return sleep_time


def build_url(base_url: str, url: str, params: dict[str, Any] | None = None) -> str:
    """
    Build the fully-qualified URL for a request.

    Absolute `http://` and `https://` URLs are used as-is. Relative URLs are
    joined to `base_url` with exactly one slash between them. Query parameters
    with `None` values are dropped; the rest are appended with `?` or `&`.

    Example:
        >>> build_url("https://api.example.com/api/", "goals", {"page": 2, "q": None})
        'https://api.example.com/api/goals?page=2'
    """
    if url.startswith("http://") or url.startswith("https://"):
        full_url = url
    else:
        base = base_url[:-1] if base_url.endswith("/") else base_url
        path = url if url.startswith("/") else f"/{url}"
        full_url = f"{base}{path}"

    return _add_params(full_url, params)


def _add_params(url: str, params: dict[str, Any] | None) -> str:
    if not params:
        return url

    query = urlencode(
        [(key, _param_to_str(value)) for key, value in params.items() if value is not None]
    )
    if not query:
        return url

    separator = "&" if "?" in url else "?"
    return f"{url}{separator}{query}"


def _param_to_str(value: Any) -> str:
    # Booleans follow the JSON/JS spelling used by the API
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def is_host_reachable(url: str, timeout: float = 3.0) -> bool:
    """
    Check whether a TCP connection can be opened to the host of `url`.

    Args:
        url: An absolute `http://` or `https://` URL.
        timeout: Connection timeout in seconds.

    Returns:
        True if the connection succeeded, False otherwise.
    """
    parts = urlsplit(url)
    if not parts.hostname:
        return False

    port = parts.port or (443 if parts.scheme == "https" else 80)
    try:
        with socket.create_connection((parts.hostname, port), timeout=timeout):
            return True
    except OSError as e:
        logger.debug(f"Host {parts.hostname}:{port} is not reachable: {e}")
        return False


def save_json_file(data: dict[str, Any], file_path: Path) -> None:
    """
    Save data as JSON to the specified file path.

    Writes a Python dict to disk as formatted JSON with UTF-8 encoding.
    Non-serializable values are converted to strings using the default=str option.

    Args:
        data: Dictionary to serialize as JSON.
        file_path: Destination path for the JSON file.

    Raises:
        RuntimeError: If the file cannot be written (wraps the original exception).
    """
    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        with file_path.open(mode="w", encoding="utf-8") as file:
            json.dump(
                data, file,
                indent=4, ensure_ascii=False, default=str
            )
    except OSError as e:
        logger.error(
            f"❌ Error while writing JSON file to disk ({file_path.name}): {e}",
            exc_info=logger.isEnabledFor(logging.DEBUG)
        )
        raise RuntimeError(f"It's not possible to save JSON file in the disk ({file_path.name}): {e}") from e


def load_json_file(file_path: Path) -> dict[str, Any]:
    """
    Load a JSON object from disk.

    Returns an empty dict when the file does not exist or does not contain
    a JSON object.

    Raises:
        RuntimeError: If the file exists but cannot be read or parsed.
    """
    if not file_path.exists():
        return {}

    try:
        with file_path.open(mode="r", encoding="utf-8") as file:
            data = json.load(file)
    except (OSError, ValueError) as e:
        raise RuntimeError(f"It's not possible to read JSON file from the disk ({file_path.name}): {e}") from e

    return data if isinstance(data, dict) else {}
