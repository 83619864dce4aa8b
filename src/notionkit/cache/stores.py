"""Storage backends for :class:`~notionkit.cache.ResponseCache`.

A store is a dumb key/value container of serialised
:class:`~notionkit.models.CacheEntry` dicts.  Expiry is decided by the
cache, never by the store, so one clock governs every backend.

* :class:`MemoryStore` -- process-local dict guarded by a lock.
* :class:`DiskStore` -- persisted on disk through :mod:`diskcache`, so
  entries survive a restart.

Both namespace their keys under ``"<prefix>:"`` so several caches can share
a backing directory.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from typing import Any, Protocol, runtime_checkable

import diskcache

DEFAULT_PREFIX = "notionkit"


@runtime_checkable
class CacheStore(Protocol):
    """Minimal key/value interface a cache backend must provide."""

    def get(self, key: str) -> dict[str, Any] | None: ...

    def set(self, key: str, entry: dict[str, Any]) -> None: ...

    def delete(self, key: str) -> None: ...

    def clear(self) -> None: ...

    def keys(self) -> Iterator[str]: ...


class MemoryStore:
    """In-memory store.  Last write wins on concurrent sets of one key."""

    def __init__(self, prefix: str = DEFAULT_PREFIX) -> None:
        self._prefix = f"{prefix}:"
        self._data: dict[str, dict[str, Any]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> dict[str, Any] | None:
        with self._lock:
            return self._data.get(self._prefix + key)

    def set(self, key: str, entry: dict[str, Any]) -> None:
        with self._lock:
            self._data[self._prefix + key] = entry

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(self._prefix + key, None)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def keys(self) -> Iterator[str]:
        with self._lock:
            names = [k[len(self._prefix):] for k in self._data]
        return iter(names)


class DiskStore:
    """Store backed by a :class:`diskcache.Cache` directory.

    Parameters
    ----------
    directory:
        Directory holding the cache database.  Created if missing.
    prefix:
        Key namespace.  :meth:`clear` only removes keys in this namespace.
    """

    def __init__(self, directory: str, prefix: str = DEFAULT_PREFIX) -> None:
        self._prefix = f"{prefix}:"
        self._cache = diskcache.Cache(directory)

    def get(self, key: str) -> dict[str, Any] | None:
        return self._cache.get(self._prefix + key)

    def set(self, key: str, entry: dict[str, Any]) -> None:
        self._cache.set(self._prefix + key, entry)

    def delete(self, key: str) -> None:
        self._cache.delete(self._prefix + key)

    def clear(self) -> None:
        for name in list(self._own_keys()):
            self._cache.delete(name)

    def keys(self) -> Iterator[str]:
        return iter([name[len(self._prefix):] for name in self._own_keys()])

    def _own_keys(self) -> Iterator[str]:
        for name in self._cache.iterkeys():
            if isinstance(name, str) and name.startswith(self._prefix):
                yield name

    def close(self) -> None:
        self._cache.close()
