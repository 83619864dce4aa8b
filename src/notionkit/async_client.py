"""Asynchronous Notion API client.

:class:`AsyncNotionClient` mirrors :class:`NotionClient` but every I/O
method is an ``async def`` coroutine.  Concurrent calls on one client are
independent; the configuration is read-only after construction.

Usage::

    import asyncio
    from notionkit import AsyncNotionClient

    async def main():
        async with AsyncNotionClient(token="secret_xxx") as client:
            me, users = await asyncio.gather(
                client.users.me(),
                client.users.list(),
            )

    asyncio.run(main())
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable, Mapping
from typing import Any

import httpx

from notionkit.cache import DiskStore, MemoryStore, ResponseCache
from notionkit.client import (
    _MISSING,
    WORKSPACE_STATS_KEY,
    WORKSPACE_STATS_TTL,
    build_cache,
    count_search_results,
    resolve_config,
)
from notionkit.config import NotionkitConfig
from notionkit.errors import NotionkitError
from notionkit.models import ConnectionCheck, Outcome, WorkspaceStats
from notionkit.notion_api.blocks import AsyncBlockAPI
from notionkit.notion_api.comments import AsyncCommentAPI
from notionkit.notion_api.databases import AsyncDatabaseAPI
from notionkit.notion_api.pages import AsyncPageAPI
from notionkit.notion_api.search import AsyncSearchAPI
from notionkit.notion_api.transport import AsyncNotionTransport
from notionkit.notion_api.users import AsyncUserAPI
from notionkit.observability import get_logger

log = get_logger("notionkit.client")


class AsyncNotionClient:
    """Asynchronous Notion API client.

    Parameters
    ----------
    token:
        Notion integration token.  Ignored when *config* is given.
    config:
        A prebuilt :class:`NotionkitConfig`.
    cache:
        A custom :class:`ResponseCache`.
    sleep:
        Awaitable backoff sleep, forwarded to the transport.
    http_transport:
        Optional async ``httpx`` transport.
    **kwargs:
        Forwarded to :class:`NotionkitConfig` when *config* is not given.
    """

    def __init__(
        self,
        token: str | None = None,
        *,
        config: NotionkitConfig | None = None,
        cache: ResponseCache | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        http_transport: httpx.AsyncBaseTransport | None = None,
        **kwargs: Any,
    ) -> None:
        self._config = resolve_config(token, config, kwargs)
        self._transport = AsyncNotionTransport(
            self._config, sleep=sleep, http_transport=http_transport,
        )
        # Only a store built here is closed by close().
        self._owns_cache = cache is None
        self._cache = cache if cache is not None else build_cache(self._config)
        self.users = AsyncUserAPI(self._transport)
        self.databases = AsyncDatabaseAPI(self._transport)
        self.pages = AsyncPageAPI(self._transport)
        self.blocks = AsyncBlockAPI(self._transport)
        self.search = AsyncSearchAPI(self._transport)
        self.comments = AsyncCommentAPI(self._transport)

    @property
    def config(self) -> NotionkitConfig:
        return self._config

    @property
    def cache(self) -> ResponseCache:
        return self._cache

    # ------------------------------------------------------------------
    # Raw requests
    # ------------------------------------------------------------------

    async def request(
        self,
        method: str,
        path: str,
        *,
        query: Mapping[str, str] | None = None,
        body: Any | None = None,
        timeout_seconds: float | None = None,
    ) -> Any:
        return await self._transport.request(
            method, path, query=query, body=body, timeout_seconds=timeout_seconds,
        )

    async def request_outcome(
        self,
        method: str,
        path: str,
        *,
        query: Mapping[str, str] | None = None,
        body: Any | None = None,
        timeout_seconds: float | None = None,
    ) -> Outcome:
        return await self._transport.request_outcome(
            method, path, query=query, body=body, timeout_seconds=timeout_seconds,
        )

    def paginate(
        self,
        path: str,
        *,
        method: str = "GET",
        query: Mapping[str, str] | None = None,
        body: dict[str, Any] | None = None,
    ) -> AsyncIterator[Any]:
        return self._transport.paginate(path, method=method, query=query, body=body)

    # ------------------------------------------------------------------
    # Cache
    #
    # The cache_* methods are synchronous and, with a DiskStore, block the
    # event loop on SQLite I/O. The coroutines below push disk access to a
    # worker thread instead.
    # ------------------------------------------------------------------

    async def _cache_call(self, fn: Callable[..., Any], *args: Any) -> Any:
        if isinstance(self._cache.store, MemoryStore):
            return fn(*args)
        return await asyncio.to_thread(fn, *args)

    def cache_get(self, key: str, default: Any = None) -> Any:
        return self._cache.get(key, default)

    def cache_set(self, key: str, value: Any, ttl: float | None = None) -> None:
        self._cache.set(key, value, ttl)

    def cache_clear(self, key: str | None = None) -> None:
        self._cache.clear(key)

    async def fetch_cached(
        self,
        key: str,
        path: str,
        *,
        query: Mapping[str, str] | None = None,
        ttl: float | None = None,
    ) -> Any:
        """Async equivalent of :meth:`NotionClient.fetch_cached`."""
        cached = await self._cache_call(self._cache.get, key, _MISSING)
        if cached is not _MISSING:
            return cached
        data = await self.request("GET", path, query=query)
        await self._cache_call(self._cache.set, key, data, ttl)
        return data

    # ------------------------------------------------------------------
    # Convenience helpers
    # ------------------------------------------------------------------

    async def workspace_stats(
        self,
        *,
        use_cache: bool = True,
        ttl: float = WORKSPACE_STATS_TTL,
    ) -> WorkspaceStats:
        """Count users, pages and databases; user and search listings run
        concurrently.
        """
        if use_cache:
            cached = await self._cache_call(self._cache.get, WORKSPACE_STATS_KEY)
            if cached is not None:
                return WorkspaceStats.from_dict(cached)

        async def _search_all() -> list[dict[str, Any]]:
            return [item async for item in self._transport.paginate("/search", method="POST")]

        users_task = asyncio.ensure_future(self.users.list_all())
        search_task = asyncio.ensure_future(_search_all())
        try:
            users, results = await asyncio.gather(users_task, search_task)
        except BaseException:
            # A failure in one listing must not leave the other retrying.
            for task in (users_task, search_task):
                if not task.done():
                    task.cancel()
            await asyncio.gather(users_task, search_task, return_exceptions=True)
            raise
        pages, databases = count_search_results(results)
        stats = WorkspaceStats(
            total_users=len(users),
            total_pages=pages,
            total_databases=databases,
        )
        await self._cache_call(self._cache.set, WORKSPACE_STATS_KEY, stats.to_dict(), ttl)
        return stats

    async def test_connection(self) -> ConnectionCheck:
        try:
            bot = await self.users.me()
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

    async def close(self) -> None:
        await self._transport.close()
        store = self._cache.store
        if self._owns_cache and isinstance(store, DiskStore):
            store.close()

    async def __aenter__(self) -> AsyncNotionClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()
