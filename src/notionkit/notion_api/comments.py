"""Comment API wrappers for the Notion API."""

from __future__ import annotations

from typing import Any

from .transport import PAGE_SIZE, AsyncNotionTransport, NotionTransport


def _list_query(block_id: str, start_cursor: str | None, page_size: int) -> dict[str, str]:
    query = {"block_id": block_id, "page_size": str(page_size)}
    if start_cursor:
        query["start_cursor"] = start_cursor
    return query


def _create_body(
    page_id: str,
    rich_text: list[dict[str, Any]],
    discussion_id: str | None,
) -> dict[str, Any]:
    # Replies go to the discussion thread and must not carry a parent.
    if discussion_id:
        return {"discussion_id": discussion_id, "rich_text": rich_text}
    return {"parent": {"page_id": page_id}, "rich_text": rich_text}


class CommentAPI:
    """Synchronous wrapper for the Notion Comments API."""

    def __init__(self, transport: NotionTransport) -> None:
        self._transport = transport

    def list(
        self,
        block_id: str,
        start_cursor: str | None = None,
        page_size: int = PAGE_SIZE,
    ) -> dict[str, Any]:
        """List unresolved comments on a page or block."""
        return self._transport.request(
            "GET", "/comments", query=_list_query(block_id, start_cursor, page_size),
        )

    def create(
        self,
        page_id: str,
        rich_text: list[dict[str, Any]],
        discussion_id: str | None = None,
    ) -> dict[str, Any]:
        """Add a top-level comment to *page_id*, or reply to *discussion_id*."""
        return self._transport.request(
            "POST", "/comments", body=_create_body(page_id, rich_text, discussion_id),
        )


class AsyncCommentAPI:
    """Asynchronous wrapper for the Notion Comments API."""

    def __init__(self, transport: AsyncNotionTransport) -> None:
        self._transport = transport

    async def list(
        self,
        block_id: str,
        start_cursor: str | None = None,
        page_size: int = PAGE_SIZE,
    ) -> dict[str, Any]:
        return await self._transport.request(
            "GET", "/comments", query=_list_query(block_id, start_cursor, page_size),
        )

    async def create(
        self,
        page_id: str,
        rich_text: list[dict[str, Any]],
        discussion_id: str | None = None,
    ) -> dict[str, Any]:
        return await self._transport.request(
            "POST", "/comments", body=_create_body(page_id, rich_text, discussion_id),
        )
