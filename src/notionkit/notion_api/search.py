"""Search API wrapper for the Notion API.

``POST /search`` finds pages and databases shared with the integration.
"""

from __future__ import annotations

from typing import Any

from .transport import PAGE_SIZE, AsyncNotionTransport, NotionTransport


def _search_body(
    query: str,
    filter: dict[str, Any] | None,
    sort: dict[str, Any] | None,
    start_cursor: str | None,
    page_size: int,
) -> dict[str, Any]:
    body: dict[str, Any] = {"page_size": page_size}
    if query:
        body["query"] = query
    if filter:
        body["filter"] = filter
    if sort:
        body["sort"] = sort
    if start_cursor:
        body["start_cursor"] = start_cursor
    return body


class SearchAPI:
    """Synchronous wrapper for the Notion Search API."""

    def __init__(self, transport: NotionTransport) -> None:
        self._transport = transport

    def search(
        self,
        query: str = "",
        filter: dict[str, Any] | None = None,
        sort: dict[str, Any] | None = None,
        start_cursor: str | None = None,
        page_size: int = PAGE_SIZE,
    ) -> dict[str, Any]:
        """Search pages and databases by title.

        Parameters
        ----------
        query:
            Text to match against titles.  An empty query returns every
            object the integration can see.
        filter:
            e.g. ``{"property": "object", "value": "database"}``.
        sort:
            e.g. ``{"direction": "descending", "timestamp": "last_edited_time"}``.
        """
        return self._transport.request(
            "POST", "/search", body=_search_body(query, filter, sort, start_cursor, page_size),
        )


class AsyncSearchAPI:
    """Asynchronous wrapper for the Notion Search API."""

    def __init__(self, transport: AsyncNotionTransport) -> None:
        self._transport = transport

    async def search(
        self,
        query: str = "",
        filter: dict[str, Any] | None = None,
        sort: dict[str, Any] | None = None,
        start_cursor: str | None = None,
        page_size: int = PAGE_SIZE,
    ) -> dict[str, Any]:
        return await self._transport.request(
            "POST", "/search", body=_search_body(query, filter, sort, start_cursor, page_size),
        )
