"""Database API wrappers for the Notion API.

Provides :class:`DatabaseAPI` (sync) and :class:`AsyncDatabaseAPI` (async)
thin wrappers around the ``/databases`` endpoints.
"""

from __future__ import annotations

from typing import Any

from .transport import PAGE_SIZE, AsyncNotionTransport, NotionTransport


def _query_body(
    filter: dict[str, Any] | None,
    sorts: list[dict[str, Any]] | None,
    start_cursor: str | None,
    page_size: int,
) -> dict[str, Any]:
    body: dict[str, Any] = {"page_size": page_size}
    if filter:
        body["filter"] = filter
    if sorts:
        body["sorts"] = sorts
    if start_cursor:
        body["start_cursor"] = start_cursor
    return body


def _create_body(
    parent_page_id: str,
    title: str,
    properties: dict[str, Any],
    extra: dict[str, Any] | None,
) -> dict[str, Any]:
    body: dict[str, Any] = {
        "parent": {"type": "page_id", "page_id": parent_page_id},
        "title": [{"type": "text", "text": {"content": title}}],
        "properties": properties,
    }
    if extra:
        body.update(extra)
    return body


class DatabaseAPI:
    """Synchronous wrapper for the Notion Databases API.

    Parameters
    ----------
    transport:
        A configured :class:`NotionTransport` instance.
    """

    def __init__(self, transport: NotionTransport) -> None:
        self._transport = transport

    def retrieve(self, database_id: str) -> dict[str, Any]:
        """Retrieve a database object (schema, title, parent)."""
        return self._transport.request("GET", f"/databases/{database_id}")

    def query(
        self,
        database_id: str,
        filter: dict[str, Any] | None = None,
        sorts: list[dict[str, Any]] | None = None,
        start_cursor: str | None = None,
        page_size: int = PAGE_SIZE,
    ) -> dict[str, Any]:
        """Query a database.

        Parameters
        ----------
        database_id:
            The UUID of the database.
        filter:
            A Notion filter object, e.g.
            ``{"property": "Done", "checkbox": {"equals": False}}``.
        sorts:
            A list of Notion sort objects.
        start_cursor:
            Cursor returned as ``next_cursor`` by a previous page.
        page_size:
            Results per page (Notion caps this at 100).

        Returns
        -------
        dict
            A Notion list object with ``results``, ``has_more`` and
            ``next_cursor``.
        """
        return self._transport.request(
            "POST",
            f"/databases/{database_id}/query",
            body=_query_body(filter, sorts, start_cursor, page_size),
        )

    def create(
        self,
        parent_page_id: str,
        title: str,
        properties: dict[str, Any],
        extra: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Create a database under *parent_page_id*.

        *extra* is merged into the request body (e.g. ``icon``,
        ``is_inline``).
        """
        return self._transport.request(
            "POST", "/databases", body=_create_body(parent_page_id, title, properties, extra),
        )

    def update(self, database_id: str, updates: dict[str, Any]) -> dict[str, Any]:
        """Update a database's title, description or property schema."""
        return self._transport.request("PATCH", f"/databases/{database_id}", body=updates)


class AsyncDatabaseAPI:
    """Asynchronous wrapper for the Notion Databases API.

    Mirrors :class:`DatabaseAPI` but all methods are coroutines.
    """

    def __init__(self, transport: AsyncNotionTransport) -> None:
        self._transport = transport

    async def retrieve(self, database_id: str) -> dict[str, Any]:
        return await self._transport.request("GET", f"/databases/{database_id}")

    async def query(
        self,
        database_id: str,
        filter: dict[str, Any] | None = None,
        sorts: list[dict[str, Any]] | None = None,
        start_cursor: str | None = None,
        page_size: int = PAGE_SIZE,
    ) -> dict[str, Any]:
        return await self._transport.request(
            "POST",
            f"/databases/{database_id}/query",
            body=_query_body(filter, sorts, start_cursor, page_size),
        )

    async def create(
        self,
        parent_page_id: str,
        title: str,
        properties: dict[str, Any],
        extra: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        return await self._transport.request(
            "POST", "/databases", body=_create_body(parent_page_id, title, properties, extra),
        )

    async def update(self, database_id: str, updates: dict[str, Any]) -> dict[str, Any]:
        return await self._transport.request(
            "PATCH", f"/databases/{database_id}", body=updates,
        )
