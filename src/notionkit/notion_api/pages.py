"""Page API wrappers for the Notion API.

Provides :class:`PageAPI` (sync) and :class:`AsyncPageAPI` (async) thin
wrappers around the ``/pages`` endpoints.  Both delegate all HTTP concerns
(auth, retries, error classification) to the underlying transport.
"""

from __future__ import annotations

from typing import Any

from .transport import AsyncNotionTransport, NotionTransport

PROPERTY_PAGE_SIZE = 25


def _create_body(
    parent: dict[str, Any],
    properties: dict[str, Any],
    children: list[dict[str, Any]] | None,
) -> dict[str, Any]:
    body: dict[str, Any] = {
        "parent": parent,
        "properties": properties,
    }
    if children:
        body["children"] = children
    return body


def _update_body(
    properties: dict[str, Any] | None,
    archived: bool | None,
) -> dict[str, Any]:
    body: dict[str, Any] = {}
    if properties is not None:
        body["properties"] = properties
    if archived is not None:
        body["archived"] = archived
    return body


def _property_query(start_cursor: str | None, page_size: int) -> dict[str, str]:
    query = {"page_size": str(page_size)}
    if start_cursor:
        query["start_cursor"] = start_cursor
    return query


class PageAPI:
    """Synchronous wrapper for the Notion Pages API.

    Parameters
    ----------
    transport:
        A configured :class:`NotionTransport` instance.
    """

    def __init__(self, transport: NotionTransport) -> None:
        self._transport = transport

    def create(
        self,
        parent: dict[str, Any],
        properties: dict[str, Any],
        children: list[dict[str, Any]] | None = None,
    ) -> dict[str, Any]:
        """Create a new page.

        Parameters
        ----------
        parent:
            Parent object, e.g. ``{"page_id": "..."}`` or
            ``{"database_id": "..."}``.
        properties:
            Page properties.  For pages under another page the minimal
            required shape is
            ``{"title": [{"text": {"content": "Page title"}}]}``.
        children:
            Optional list of block objects to use as page content.  Omitted
            from the request when empty.

        Returns
        -------
        dict
            The created page object as returned by the Notion API.
        """
        return self._transport.request(
            "POST", "/pages", body=_create_body(parent, properties, children),
        )

    def retrieve(self, page_id: str) -> dict[str, Any]:
        """Retrieve a page by its ID."""
        return self._transport.request("GET", f"/pages/{page_id}")

    def update(
        self,
        page_id: str,
        properties: dict[str, Any] | None = None,
        archived: bool | None = None,
    ) -> dict[str, Any]:
        """Update a page's properties or archive status.

        Only specified properties are changed; omitted properties are left
        untouched.  ``archived=True`` soft-deletes the page.
        """
        return self._transport.request(
            "PATCH", f"/pages/{page_id}", body=_update_body(properties, archived),
        )

    def archive(self, page_id: str) -> dict[str, Any]:
        """Archive (soft-delete) a page."""
        return self.update(page_id, properties={}, archived=True)

    def retrieve_property(
        self,
        page_id: str,
        property_id: str,
        start_cursor: str | None = None,
        page_size: int = PROPERTY_PAGE_SIZE,
    ) -> dict[str, Any]:
        """Retrieve one property item of a page (paginated for long values)."""
        return self._transport.request(
            "GET",
            f"/pages/{page_id}/properties/{property_id}",
            query=_property_query(start_cursor, page_size),
        )


class AsyncPageAPI:
    """Asynchronous wrapper for the Notion Pages API.

    Mirrors :class:`PageAPI` but all methods are coroutines.
    """

    def __init__(self, transport: AsyncNotionTransport) -> None:
        self._transport = transport

    async def create(
        self,
        parent: dict[str, Any],
        properties: dict[str, Any],
        children: list[dict[str, Any]] | None = None,
    ) -> dict[str, Any]:
        return await self._transport.request(
            "POST", "/pages", body=_create_body(parent, properties, children),
        )

    async def retrieve(self, page_id: str) -> dict[str, Any]:
        return await self._transport.request("GET", f"/pages/{page_id}")

    async def update(
        self,
        page_id: str,
        properties: dict[str, Any] | None = None,
        archived: bool | None = None,
    ) -> dict[str, Any]:
        return await self._transport.request(
            "PATCH", f"/pages/{page_id}", body=_update_body(properties, archived),
        )

    async def archive(self, page_id: str) -> dict[str, Any]:
        return await self.update(page_id, properties={}, archived=True)

    async def retrieve_property(
        self,
        page_id: str,
        property_id: str,
        start_cursor: str | None = None,
        page_size: int = PROPERTY_PAGE_SIZE,
    ) -> dict[str, Any]:
        return await self._transport.request(
            "GET",
            f"/pages/{page_id}/properties/{property_id}",
            query=_property_query(start_cursor, page_size),
        )
