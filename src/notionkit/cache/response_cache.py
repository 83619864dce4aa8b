"""Caller-driven response cache with per-entry TTL.

The cache is never consulted automatically by the transport: callers decide
which responses are worth keeping and under which key.  Typical use::

    stats = cache.get("workspace-stats")
    if stats is None:
        stats = client.search()
        cache.set("workspace-stats", stats, ttl=1800)

Contract:

* an entry past its expiry is never returned, even if still stored; it is
  deleted on the next access;
* no network calls, no background eviction, no size bound;
* values are JSON snapshots, so later mutation of the caller's object does
  not change what is cached.
"""

from __future__ import annotations

import json
import time
from collections.abc import Callable
from typing import Any

from notionkit.models import CacheEntry
from notionkit.observability import NoopMetricsHook, get_logger
from notionkit.observability.metrics import CACHE_HITS_TOTAL, CACHE_MISSES_TOTAL

from .stores import CacheStore, MemoryStore

log = get_logger("notionkit.cache")


def _snapshot(value: Any) -> Any:
    try:
        return json.loads(json.dumps(value))
    except (TypeError, ValueError) as exc:
        raise TypeError(f"cache values must be JSON-serialisable: {exc}") from exc


class ResponseCache:
    """Time-bounded key/value cache for JSON responses.

    Parameters
    ----------
    store:
        Backend holding the entries.  Defaults to a fresh
        :class:`MemoryStore`.
    clock:
        Returns the current time in seconds.  Defaults to
        :func:`time.time`; tests inject a fake.
    default_ttl:
        TTL in seconds used when :meth:`set` is called without one.
        ``None`` stores such entries without expiry.
    metrics:
        Optional metrics hook receiving hit/miss counters.
    """

    def __init__(
        self,
        store: CacheStore | None = None,
        *,
        clock: Callable[[], float] = time.time,
        default_ttl: float | None = None,
        metrics: Any | None = None,
    ) -> None:
        self._store: CacheStore = store if store is not None else MemoryStore()
        self._clock = clock
        self._default_ttl = default_ttl
        self._metrics = metrics if metrics is not None else NoopMetricsHook()

    @property
    def store(self) -> CacheStore:
        return self._store

    def get(self, key: str, default: Any = None) -> Any:
        """Return the cached value for *key*, or *default* if absent or expired."""
        entry = self.get_entry(key)
        if entry is None:
            self._metrics.increment(CACHE_MISSES_TOTAL)
            return default
        self._metrics.increment(CACHE_HITS_TOTAL)
        return _snapshot(entry.value)

    def get_entry(self, key: str) -> CacheEntry | None:
        """Return the live :class:`CacheEntry` for *key*, purging it if expired."""
        raw = self._store.get(key)
        if raw is None:
            return None
        entry = CacheEntry.from_dict(raw)
        if entry.is_expired(self._clock()):
            self._store.delete(key)
            log.debug(
                "Purged expired cache entry",
                extra={"extra_fields": {"op": "cache_get", "key": key}},
            )
            return None
        return entry

    def __contains__(self, key: str) -> bool:
        return self.get_entry(key) is not None

    def set(self, key: str, value: Any, ttl: float | None = None) -> CacheEntry:
        """Store *value* under *key*, replacing any previous entry.

        Parameters
        ----------
        key:
            Caller-chosen key.
        value:
            Any JSON-serialisable value.
        ttl:
            Seconds until the entry expires.  ``0`` expires it immediately.
            ``None`` falls back to the cache's ``default_ttl``.

        Raises
        ------
        ValueError
            If *ttl* is negative.
        TypeError
            If *value* is not JSON-serialisable.
        """
        effective_ttl = self._default_ttl if ttl is None else ttl
        if effective_ttl is not None and effective_ttl < 0:
            raise ValueError(f"ttl must be >= 0, got {effective_ttl}")

        now = self._clock()
        entry = CacheEntry(
            value=_snapshot(value),
            created_at=now,
            expires_at=None if effective_ttl is None else now + effective_ttl,
        )
        self._store.set(key, entry.to_dict())
        return entry

    def clear(self, key: str | None = None) -> None:
        """Remove the entry under *key*, or every entry when *key* is ``None``."""
        if key is None:
            self._store.clear()
        else:
            self._store.delete(key)

    def cleanup(self) -> int:
        """Delete every expired entry and return how many were removed."""
        now = self._clock()
        removed = 0
        for key in list(self._store.keys()):
            raw = self._store.get(key)
            if raw is None:
                continue
            if CacheEntry.from_dict(raw).is_expired(now):
                self._store.delete(key)
                removed += 1
        if removed:
            log.info(
                "Cleaned up expired cache entries",
                extra={"extra_fields": {"op": "cache_cleanup", "removed": removed}},
            )
        return removed

    def keys(self) -> list[str]:
        """Return the keys of all live entries."""
        return [key for key in list(self._store.keys()) if key in self]
