"""Metrics hook for notionkit.

The transport and the response cache report counters and timings through
a :class:`MetricsHook`.  Pass any object with ``increment`` and ``timing``
methods as ``NotionkitConfig(metrics=...)`` to forward them to StatsD,
Prometheus or similar; without one, :class:`NoopMetricsHook` drops them.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

# Counters, tagged with method/path and the HTTP status or "error".
REQUESTS_TOTAL = "notionkit.requests_total"
# Tagged with method/path and reason: rate_limited, server_error, network_error.
RETRIES_TOTAL = "notionkit.retries_total"
RATE_LIMITED_TOTAL = "notionkit.rate_limited_total"
CACHE_HITS_TOTAL = "notionkit.cache_hits_total"
CACHE_MISSES_TOTAL = "notionkit.cache_misses_total"

# Timing of one HTTP attempt, in milliseconds.
REQUEST_DURATION_MS = "notionkit.request_duration_ms"

Tags = dict[str, str]


@runtime_checkable
class MetricsHook(Protocol):
    """What notionkit needs from a metrics backend."""

    def increment(self, name: str, value: int = 1, tags: Tags | None = None) -> None:
        """Add *value* to the counter *name*."""
        ...

    def timing(self, name: str, ms: float, tags: Tags | None = None) -> None:
        """Record one duration sample of *ms* milliseconds."""
        ...


class NoopMetricsHook:
    """Discards every data point."""

    __slots__ = ()

    def increment(self, name: str, value: int = 1, tags: Tags | None = None) -> None:
        return None

    def timing(self, name: str, ms: float, tags: Tags | None = None) -> None:
        return None
