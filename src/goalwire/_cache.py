"""
In-memory response cache for GET requests.

Entries are keyed by `ApiRequest.cache_key` and expire after their TTL.
Expired entries are evicted lazily, on the next lookup for the same key.
"""

import logging
import re
import threading
import time
from dataclasses import dataclass
from typing import Any

from goalwire._models import PayloadKind

logger = logging.getLogger(__name__)

DEFAULT_CACHE_TTL = 300.0


@dataclass(frozen=True)
class CacheEntry:
    """
    A cached response body.

    Attributes:
        data: The cached body.
        timestamp: Monotonic time at which the entry was stored.
        ttl: Time-to-live in seconds.
        etag: The `ETag` response header, if the server sent one.
        kind: How `data` was decoded.
    """

    data: Any
    timestamp: float
    ttl: float
    etag: str | None = None
    kind: PayloadKind = PayloadKind.JSON

    def is_expired(self, now: float) -> bool:
        return now - self.timestamp > self.ttl


class ResponseCache:
    """
    Thread-safe TTL cache of response bodies.

    Example:
        >>> cache = ResponseCache()
        >>> cache.set('GET:/goals:{}', [{"id": "1"}], ttl=60.0)
        >>> cache.get('GET:/goals:{}')
        [{'id': '1'}]
        >>> cache.clear(r"^GET:/goals")
    """

    def __init__(self) -> None:
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get_entry(self, key: str) -> CacheEntry | None:
        """Return the live entry for `key`, evicting it if it has expired."""
        now = time.monotonic()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.is_expired(now):
                del self._entries[key]
                logger.debug(f"Cache entry expired: {key}")
                return None
            return entry

    def get(self, key: str) -> Any | None:
        """Return the cached body for `key`, or None on a miss."""
        entry = self.get_entry(key)
        return entry.data if entry is not None else None

    def set(
        self,
        key: str,
        data: Any,
        ttl: float = DEFAULT_CACHE_TTL,
        etag: str | None = None,
        kind: PayloadKind = PayloadKind.JSON,
    ) -> None:
        assert ttl >= 0, "Cache TTL must be >= 0."
        entry = CacheEntry(data=data, timestamp=time.monotonic(), ttl=ttl, etag=etag, kind=kind)
        with self._lock:
            self._entries[key] = entry

    def clear(self, pattern: str | re.Pattern[str] | None = None) -> int:
        """
        Remove cached entries.

        Args:
            pattern: Regular expression searched (not fully matched) against
                each key. When None, every entry is removed.

        Returns:
            The number of removed entries.
        """
        with self._lock:
            if pattern is None:
                removed = len(self._entries)
                self._entries.clear()
                return removed

            regex = re.compile(pattern)
            matching = [key for key in self._entries if regex.search(key)]
            for key in matching:
                del self._entries[key]
            return len(matching)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries
