"""Unit tests for AsyncNotionTransport.

Uses ``httpx.MockTransport`` with an async-compatible handler and a
recording sleep so no real time passes between retries.
"""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest
from conftest import AsyncFakeSleep, MockServer, make_config, reply

from notionkit.errors import (
    ErrorKind,
    NotionkitNetworkError,
    NotionkitNotFoundError,
    NotionkitRateLimitError,
    NotionkitServerError,
)
from notionkit.models import Err, Ok
from notionkit.notion_api.transport import AsyncNotionTransport


def make_transport(server, sleep=None, **overrides) -> AsyncNotionTransport:
    return AsyncNotionTransport(
        make_config(**overrides),
        sleep=sleep if sleep is not None else AsyncFakeSleep(),
        http_transport=server.transport(),
    )


class TestAsyncRequest:
    async def test_success_returns_body(self):
        server = MockServer(reply(200, {"object": "user", "id": "u1", "type": "bot"}))
        async with make_transport(server) as transport:
            data = await transport.request("GET", "/users/me")
        assert data == {"object": "user", "id": "u1", "type": "bot"}
        assert server.requests[0].headers["Notion-Version"] == "2022-06-28"

    async def test_post_body_sent(self):
        server = MockServer(reply(200, {"results": []}))
        async with make_transport(server) as transport:
            await transport.request("POST", "/databases/db1/query", body={"page_size": 5})
        assert json.loads(server.requests[0].content) == {"page_size": 5}

    async def test_not_found_single_attempt(self):
        server = MockServer(reply(404, {"code": "object_not_found", "message": "missing"}))
        sleep = AsyncFakeSleep()
        async with make_transport(server, sleep) as transport:
            with pytest.raises(NotionkitNotFoundError) as exc_info:
                await transport.request("GET", "/pages/nope")
        assert exc_info.value.code == "object_not_found"
        assert server.attempts == 1
        assert sleep.calls == []

    async def test_rate_limited_exhausts_retries(self):
        server = MockServer(reply(429, {"code": "rate_limited", "message": "slow down"}))
        sleep = AsyncFakeSleep()
        async with make_transport(server, sleep) as transport:
            with pytest.raises(NotionkitRateLimitError) as exc_info:
                await transport.request("GET", "/users/me")
        assert exc_info.value.kind is ErrorKind.RATE_LIMITED
        assert server.attempts == 4
        assert sleep.calls == [1.0, 2.0, 3.0]

    async def test_recovers_after_server_errors(self):
        server = MockServer(reply(502, {}), reply(503, {}), reply(200, {"id": "abc"}))
        async with make_transport(server) as transport:
            assert await transport.request("GET", "/pages/abc") == {"id": "abc"}
        assert server.attempts == 3

    async def test_server_error_exhausted(self):
        server = MockServer(reply(500, {"code": "internal_server_error"}))
        async with make_transport(server, retry_max_retries=1) as transport:
            with pytest.raises(NotionkitServerError):
                await transport.request("GET", "/x")
        assert server.attempts == 2

    async def test_network_error_has_status_zero(self):
        server = MockServer(httpx.ConnectError("refused"))
        async with make_transport(server, retry_max_retries=2) as transport:
            with pytest.raises(NotionkitNetworkError) as exc_info:
                await transport.request("GET", "/x")
        assert exc_info.value.status == 0
        assert server.attempts == 3

    async def test_invalid_options_rejected_before_sending(self):
        server = MockServer(reply(200, {}))
        async with make_transport(server) as transport:
            with pytest.raises(ValueError):
                await transport.request("GET", "/x", body={"a": 1})
        assert server.attempts == 0


class TestAsyncCancellation:
    async def test_cancel_during_backoff_stops_retrying(self):
        server = MockServer(reply(503, {}))
        started = asyncio.Event()

        async def slow_sleep(delay: float) -> None:
            started.set()
            await asyncio.sleep(3600)

        transport = make_transport(server, slow_sleep)
        task = asyncio.create_task(transport.request("GET", "/x"))
        await started.wait()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert server.attempts == 1
        await transport.close()


class TestAsyncOutcomeAndPaginate:
    async def test_request_outcome_ok_and_err(self):
        server = MockServer(reply(200, {"id": "a"}), reply(401, {"code": "unauthorized"}))
        async with make_transport(server) as transport:
            first = await transport.request_outcome("GET", "/users/me")
            second = await transport.request_outcome("GET", "/users/me")
        assert isinstance(first, Ok) and first.value == {"id": "a"}
        assert isinstance(second, Err)
        assert second.kind is ErrorKind.UNAUTHORIZED
        assert second.code == "unauthorized"

    async def test_paginate_yields_all_items(self):
        server = MockServer(
            reply(200, {"results": [{"id": 1}], "has_more": True, "next_cursor": "c"}),
            reply(200, {"results": [{"id": 2}], "has_more": False}),
        )
        async with make_transport(server) as transport:
            items = [item async for item in transport.paginate("/users")]
        assert items == [{"id": 1}, {"id": 2}]
        assert server.requests[1].url.params["start_cursor"] == "c"

    async def test_concurrent_requests_are_independent(self):
        def handler(request: httpx.Request) -> httpx.Response:
            page_id = request.url.path.rsplit("/", 1)[-1]
            return httpx.Response(200, json={"id": page_id}, request=request)

        transport = AsyncNotionTransport(
            make_config(), http_transport=httpx.MockTransport(handler),
        )
        async with transport:
            results = await asyncio.gather(
                *(transport.request("GET", f"/pages/p{i}") for i in range(5))
            )
        assert [r["id"] for r in results] == [f"p{i}" for i in range(5)]
