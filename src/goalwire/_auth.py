"""
Credential stores for the goalwire client.

A credential store is where the client reads the bearer token it sends with
every request, and where the token is removed when the server answers 401.

The main classes are:
- CredentialStore: Abstract base class for credential stores.
- InMemoryCredentialStore: Process-local store, lost on exit.
- FileCredentialStore: JSON file on disk, survives restarts.
- ChainedCredentialStore: Looks up several stores in order.

Example:
    >>> from goalwire import ApiClient, FileCredentialStore
    >>> store = FileCredentialStore(Path.home() / ".goalwire" / "credentials.json")
    >>> store.set("auth_token", "eyJ...")
    >>> client = ApiClient(credential_store=store)
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import override

from goalwire._utils import load_json_file, save_json_file


class CredentialStore(ABC):
    """
    Abstract base class for credential stores.

    Implementations must be thread-safe: the client reads the token on every
    request and may remove it from any worker thread.
    """

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the value stored under `key`, or None."""
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store `value` under `key`."""
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        """Remove `key`. Removing a missing key is a no-op."""
        pass


class InMemoryCredentialStore(CredentialStore):
    """
    Credential store kept in process memory.

    Args:
        initial: Optional initial key/value pairs.
    """

    def __init__(self, initial: dict[str, str] | None = None):
        self._values: dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    @override
    def get(self, key: str) -> str | None:
        with self._lock:
            return self._values.get(key)

    @override
    def set(self, key: str, value: str) -> None:
        assert key, "Credential key cannot be empty."
        with self._lock:
            self._values[key] = value

    @override
    def remove(self, key: str) -> None:
        with self._lock:
            self._values.pop(key, None)


class FileCredentialStore(CredentialStore):
    """
    Credential store persisted as a JSON object in a file.

    The file is read on every lookup so tokens written by another process
    are picked up. Writes rewrite the whole file.

    Args:
        path: Location of the JSON file. Parent directories are created on
            the first write.

    Raises:
        RuntimeError: If the file cannot be read or written.
    """

    def __init__(self, path: Path | str):
        assert path, "Credential file path cannot be empty."
        self.path = Path(path)
        self._lock = threading.Lock()

    @override
    def get(self, key: str) -> str | None:
        with self._lock:
            value = load_json_file(self.path).get(key)
        return str(value) if value is not None else None

    @override
    def set(self, key: str, value: str) -> None:
        assert key, "Credential key cannot be empty."
        with self._lock:
            data = load_json_file(self.path)
            data[key] = value
            save_json_file(data, self.path)

    @override
    def remove(self, key: str) -> None:
        with self._lock:
            data = load_json_file(self.path)
            if key not in data:
                return
            del data[key]
            save_json_file(data, self.path)


class ChainedCredentialStore(CredentialStore):
    """
    Looks up a sequence of stores in order.

    - `get` returns the first value found.
    - `set` writes to the first store only.
    - `remove` removes the key from every store.

    Example:
        >>> store = ChainedCredentialStore([
        ...     FileCredentialStore(Path.home() / ".goalwire" / "credentials.json"),
        ...     InMemoryCredentialStore(),
        ... ])
    """

    def __init__(self, stores: list[CredentialStore]):
        assert stores, "At least one credential store is required."
        self.stores = list(stores)

    @override
    def get(self, key: str) -> str | None:
        for store in self.stores:
            value = store.get(key)
            if value is not None:
                return value
        return None

    @override
    def set(self, key: str, value: str) -> None:
        self.stores[0].set(key, value)

    @override
    def remove(self, key: str) -> None:
        for store in self.stores:
            store.remove(key)
