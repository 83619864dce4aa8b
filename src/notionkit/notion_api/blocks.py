"""Block API wrappers for the Notion API.

Provides :class:`BlockAPI` (sync) and :class:`AsyncBlockAPI` (async) thin
wrappers around the ``/blocks`` endpoints.  ``get_children`` auto-paginates
to retrieve all children of a block in a single call.
"""

from __future__ import annotations

from typing import Any

from .transport import PAGE_SIZE, AsyncNotionTransport, NotionTransport

MAX_CHILDREN_PER_APPEND = 100


def _children_query(start_cursor: str | None, page_size: int) -> dict[str, str]:
    query = {"page_size": str(page_size)}
    if start_cursor:
        query["start_cursor"] = start_cursor
    return query


def _check_children(children: list[dict[str, Any]]) -> None:
    if len(children) > MAX_CHILDREN_PER_APPEND:
        raise ValueError(
            f"Notion accepts at most {MAX_CHILDREN_PER_APPEND} children per "
            f"append call, got {len(children)}"
        )


class BlockAPI:
    """Synchronous wrapper for the Notion Blocks API.

    Parameters
    ----------
    transport:
        A configured :class:`NotionTransport` instance.
    """

    def __init__(self, transport: NotionTransport) -> None:
        self._transport = transport

    def retrieve(self, block_id: str) -> dict[str, Any]:
        """Retrieve a single block by its ID."""
        return self._transport.request("GET", f"/blocks/{block_id}")

    def update(self, block_id: str, payload: dict[str, Any]) -> dict[str, Any]:
        """Update a block's content.

        *payload* is typically ``{block_type: {"rich_text": [...]}}``; only
        the fields it contains are modified.
        """
        return self._transport.request("PATCH", f"/blocks/{block_id}", body=payload)

    def delete(self, block_id: str) -> dict[str, Any]:
        """Delete (archive) a block."""
        return self._transport.request("DELETE", f"/blocks/{block_id}")

    def list_children(
        self,
        block_id: str,
        start_cursor: str | None = None,
        page_size: int = PAGE_SIZE,
    ) -> dict[str, Any]:
        """Return one page of a block's children (a Notion list object)."""
        return self._transport.request(
            "GET",
            f"/blocks/{block_id}/children",
            query=_children_query(start_cursor, page_size),
        )

    def get_children(self, block_id: str) -> list[dict[str, Any]]:
        """Return all direct children of *block_id*, following pagination."""
        return list(self._transport.paginate(f"/blocks/{block_id}/children"))

    def append_children(
        self,
        block_id: str,
        children: list[dict[str, Any]],
    ) -> dict[str, Any]:
        """Append up to 100 child blocks to a page or block.

        Raises
        ------
        ValueError
            If more than 100 children are given.
        """
        _check_children(children)
        return self._transport.request(
            "PATCH", f"/blocks/{block_id}/children", body={"children": children},
        )


class AsyncBlockAPI:
    """Asynchronous wrapper for the Notion Blocks API.

    Mirrors :class:`BlockAPI` but all methods are coroutines.
    """

    def __init__(self, transport: AsyncNotionTransport) -> None:
        self._transport = transport

    async def retrieve(self, block_id: str) -> dict[str, Any]:
        return await self._transport.request("GET", f"/blocks/{block_id}")

    async def update(self, block_id: str, payload: dict[str, Any]) -> dict[str, Any]:
        return await self._transport.request("PATCH", f"/blocks/{block_id}", body=payload)

    async def delete(self, block_id: str) -> dict[str, Any]:
        return await self._transport.request("DELETE", f"/blocks/{block_id}")

    async def list_children(
        self,
        block_id: str,
        start_cursor: str | None = None,
        page_size: int = PAGE_SIZE,
    ) -> dict[str, Any]:
        return await self._transport.request(
            "GET",
            f"/blocks/{block_id}/children",
            query=_children_query(start_cursor, page_size),
        )

    async def get_children(self, block_id: str) -> list[dict[str, Any]]:
        return [
            block
            async for block in self._transport.paginate(f"/blocks/{block_id}/children")
        ]

    async def append_children(
        self,
        block_id: str,
        children: list[dict[str, Any]],
    ) -> dict[str, Any]:
        _check_children(children)
        return await self._transport.request(
            "PATCH", f"/blocks/{block_id}/children", body={"children": children},
        )
