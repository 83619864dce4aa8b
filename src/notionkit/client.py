"""Synchronous Notion API client.

:class:`NotionClient` bundles a :class:`NotionTransport`, the endpoint
wrappers and a :class:`ResponseCache` behind one object.

Usage::

    from notionkit import NotionClient, configure

    with NotionClient(config=configure("secret_xxx", "2022-06-28")) as client:
        me = client.request("GET", "/users/me")
        pages = client.search.search("Roadmap")

        stats = client.cache_get("stats")
        if stats is None:
            stats = client.request("POST", "/search", body={"page_size": 100})
            client.cache_set("stats", stats, ttl=600)
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterator, Mapping
from typing import Any

import httpx

from notionkit.cache import DiskStore, MemoryStore, ResponseCache
from notionkit.config import NotionkitConfig
from notionkit.errors import NotionkitError
from notionkit.models import ConnectionCheck, Outcome, WorkspaceStats
from notionkit.notion_api.blocks import BlockAPI
from notionkit.notion_api.comments import CommentAPI
from notionkit.notion_api.databases import DatabaseAPI
from notionkit.notion_api.pages import PageAPI
from notionkit.notion_api.search import SearchAPI
from notionkit.notion_api.transport import NotionTransport
from notionkit.notion_api.users import UserAPI
from notionkit.observability import get_logger

log = get_logger("notionkit.client")

WORKSPACE_STATS_KEY = "workspace-stats"
WORKSPACE_STATS_TTL = 30 * 60

_MISSING = object()


def resolve_config(
    token: str | None,
    config: NotionkitConfig | None,
    overrides: dict[str, Any],
) -> NotionkitConfig:
    """Return *config*, or build one from *token* and *overrides*."""
    if config is not None:
        if token is not None or overrides:
            raise TypeError("pass either config= or token/keyword options, not both")
        return config
    return NotionkitConfig(token=token or "", **overrides)


def build_cache(config: NotionkitConfig, clock: Callable[[], float] = time.time) -> ResponseCache:
    """Create the cache described by *config* (on disk when ``cache_dir`` is set)."""
    store = DiskStore(config.cache_dir) if config.cache_dir else MemoryStore()
    return ResponseCache(
        store,
        clock=clock,
        default_ttl=config.cache_default_ttl,
        metrics=config.metrics,
    )


def count_search_results(results: list[dict[str, Any]]) -> tuple[int, int]:
    """Return ``(pages, databases)`` found in a list of search results."""
    pages = sum(1 for item in results if item.get("object") == "page")
    databases = sum(1 for item in results if item.get("object") == "database")
    return pages, databases


class NotionClient:
    """Synchronous Notion API client.

    Parameters
    ----------
    token:
        Notion integration token.  Ignored when *config* is given.
    config:
        A prebuilt :class:`NotionkitConfig`.
    cache:
        A custom :class:`ResponseCache`.  Defaults to one built from the
        config.
    sleep:
        Backoff sleep function, forwarded to the transport.
    http_transport:
        Optional ``httpx`` transport, forwarded to the transport.
    **kwargs:
        Remaining keyword arguments are forwarded to
        :class:`NotionkitConfig` when *config* is not given.
    """

    def __init__(
        self,
        token: str | None = None,
        *,
        config: NotionkitConfig | None = None,
        cache: ResponseCache | None = None,
        sleep: Callable[[float], None] = time.sleep,
        http_transport: httpx.BaseTransport | None = None,
        **kwargs: Any,
    ) -> None:
        self._config = resolve_config(token, config, kwargs)
        self._transport = NotionTransport(
            self._config, sleep=sleep, http_transport=http_transport,
        )
        # Only a store built here is closed by close().
        self._owns_cache = cache is None
        self._cache = cache if cache is not None else build_cache(self._config)
        self.users = UserAPI(self._transport)
        self.databases = DatabaseAPI(self._transport)
        self.pages = PageAPI(self._transport)
        self.blocks = BlockAPI(self._transport)
        self.search = SearchAPI(self._transport)
        self.comments = CommentAPI(self._transport)

    @property
    def config(self) -> NotionkitConfig:
        return self._config

    @property
    def cache(self) -> ResponseCache:
        return self._cache

    # ------------------------------------------------------------------
    # Raw requests
    # ------------------------------------------------------------------

    def request(
        self,
        method: str,
        path: str,
        *,
        query: Mapping[str, str] | None = None,
        body: Any | None = None,
        timeout_seconds: float | None = None,
    ) -> Any:
        """Perform one logical call; see :meth:`NotionTransport.request`."""
        return self._transport.request(
            method, path, query=query, body=body, timeout_seconds=timeout_seconds,
        )

    def request_outcome(
        self,
        method: str,
        path: str,
        *,
        query: Mapping[str, str] | None = None,
        body: Any | None = None,
        timeout_seconds: float | None = None,
    ) -> Outcome:
        """Perform one logical call and return ``Ok`` or ``Err``."""
        return self._transport.request_outcome(
            method, path, query=query, body=body, timeout_seconds=timeout_seconds,
        )

    def paginate(
        self,
        path: str,
        *,
        method: str = "GET",
        query: Mapping[str, str] | None = None,
        body: dict[str, Any] | None = None,
    ) -> Iterator[Any]:
        return self._transport.paginate(path, method=method, query=query, body=body)

    # ------------------------------------------------------------------
    # Cache
    # ------------------------------------------------------------------

    def cache_get(self, key: str, default: Any = None) -> Any:
        return self._cache.get(key, default)

    def cache_set(self, key: str, value: Any, ttl: float | None = None) -> None:
        self._cache.set(key, value, ttl)

    def cache_clear(self, key: str | None = None) -> None:
        self._cache.clear(key)

    def fetch_cached(
        self,
        key: str,
        path: str,
        *,
        query: Mapping[str, str] | None = None,
        ttl: float | None = None,
    ) -> Any:
        """``GET`` *path*, serving and saving the result under *key*.

        A live cache entry short-circuits the network call.  Errors are
        never cached.
        """
        cached = self._cache.get(key, _MISSING)
        if cached is not _MISSING:
            return cached
        data = self.request("GET", path, query=query)
        self._cache.set(key, data, ttl)
        return data

    # ------------------------------------------------------------------
    # Convenience helpers
    # ------------------------------------------------------------------

    def workspace_stats(
        self,
        *,
        use_cache: bool = True,
        ttl: float = WORKSPACE_STATS_TTL,
    ) -> WorkspaceStats:
        """Count the users, pages and databases visible to the integration.

        The result is cached under ``"workspace-stats"`` for *ttl* seconds.
        """
        if use_cache:
            cached = self._cache.get(WORKSPACE_STATS_KEY)
            if cached is not None:
                return WorkspaceStats.from_dict(cached)

        users = self.users.list_all()
        results = list(self._transport.paginate("/search", method="POST"))
        pages, databases = count_search_results(results)
        stats = WorkspaceStats(
            total_users=len(users),
            total_pages=pages,
            total_databases=databases,
        )
        self._cache.set(WORKSPACE_STATS_KEY, stats.to_dict(), ttl)
        return stats

    def test_connection(self) -> ConnectionCheck:
        """Call ``/users/me`` and report whether the credential works.

        Failures are reported in the returned :class:`ConnectionCheck`
        rather than raised.
        """
        try:
            bot = self.users.me()
        except NotionkitError as exc:
            log.warning(
                "Connection check failed",
                extra={"extra_fields": {"op": "test_connection", "kind": exc.kind.value}},
            )
            return ConnectionCheck(success=False, message=exc.message)
        return ConnectionCheck(success=True, message="Connection successful", bot=bot)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Close the HTTP client and the on-disk cache this client opened.

        A cache passed in by the caller is left open.
        """
        self._transport.close()
        store = self._cache.store
        if self._owns_cache and isinstance(store, DiskStore):
            store.close()

    def __enter__(self) -> NotionClient:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
