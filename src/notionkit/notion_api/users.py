"""User API wrappers for the Notion API.

Provides :class:`UserAPI` (sync) and :class:`AsyncUserAPI` (async) thin
wrappers around the ``/users`` endpoints.
"""

from __future__ import annotations

from typing import Any

from .transport import PAGE_SIZE, AsyncNotionTransport, NotionTransport


def _list_query(start_cursor: str | None, page_size: int) -> dict[str, str]:
    query = {"page_size": str(page_size)}
    if start_cursor:
        query["start_cursor"] = start_cursor
    return query


class UserAPI:
    """Synchronous wrapper for the Notion Users API.

    Parameters
    ----------
    transport:
        A configured :class:`NotionTransport` instance.
    """

    def __init__(self, transport: NotionTransport) -> None:
        self._transport = transport

    def list(
        self,
        start_cursor: str | None = None,
        page_size: int = PAGE_SIZE,
    ) -> dict[str, Any]:
        """Return one page of workspace users (a Notion list object)."""
        return self._transport.request(
            "GET", "/users", query=_list_query(start_cursor, page_size),
        )

    def list_all(self) -> list[dict[str, Any]]:
        """Return every user in the workspace, following pagination."""
        return list(self._transport.paginate("/users"))

    def retrieve(self, user_id: str) -> dict[str, Any]:
        """Retrieve a user by ID."""
        return self._transport.request("GET", f"/users/{user_id}")

    def me(self) -> dict[str, Any]:
        """Retrieve the bot user tied to the integration token."""
        return self._transport.request("GET", "/users/me")


class AsyncUserAPI:
    """Asynchronous wrapper for the Notion Users API."""

    def __init__(self, transport: AsyncNotionTransport) -> None:
        self._transport = transport

    async def list(
        self,
        start_cursor: str | None = None,
        page_size: int = PAGE_SIZE,
    ) -> dict[str, Any]:
        return await self._transport.request(
            "GET", "/users", query=_list_query(start_cursor, page_size),
        )

    async def list_all(self) -> list[dict[str, Any]]:
        return [user async for user in self._transport.paginate("/users")]

    async def retrieve(self, user_id: str) -> dict[str, Any]:
        return await self._transport.request("GET", f"/users/{user_id}")

    async def me(self) -> dict[str, Any]:
        return await self._transport.request("GET", "/users/me")
