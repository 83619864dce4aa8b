"""Shared test fixtures for the notionkit test suite."""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from notionkit.config import NotionkitConfig

TEST_TOKEN = "secret_test_token_1234"


def make_config(**overrides: Any) -> NotionkitConfig:
    """Return a NotionkitConfig tuned for deterministic tests."""
    defaults: dict[str, Any] = dict(
        token=TEST_TOKEN,
        retry_max_retries=3,
        retry_base_delay=1.0,
    )
    defaults.update(overrides)
    return NotionkitConfig(**defaults)


def reply(
    status: int = 200,
    body: Any = None,
    headers: dict[str, str] | None = None,
) -> Callable[[httpx.Request], httpx.Response]:
    """Build a response factory for :class:`MockServer`."""

    def _factory(request: httpx.Request) -> httpx.Response:
        content = b"" if body is None else json.dumps(body).encode()
        return httpx.Response(
            status,
            content=content,
            headers={"content-type": "application/json", **(headers or {})},
            request=request,
        )

    return _factory


class MockServer:
    """Scripted handler for ``httpx.MockTransport``.

    Each incoming request consumes the next scripted item; the last item
    repeats once the script runs out.  Items are response factories from
    :func:`reply` or exceptions to raise.
    """

    def __init__(self, *script: Any) -> None:
        if not script:
            raise ValueError("MockServer needs at least one scripted reply")
        self.script = list(script)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        item = self.script[min(len(self.requests), len(self.script)) - 1]
        if isinstance(item, BaseException):
            raise item
        return item(request)

    @property
    def attempts(self) -> int:
        return len(self.requests)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


class FakeSleep:
    """Records backoff delays instead of sleeping."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    def __call__(self, delay: float) -> None:
        self.calls.append(delay)


class AsyncFakeSleep:
    """Awaitable variant of :class:`FakeSleep`."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.calls.append(delay)


class FakeClock:
    """Manually advanced clock for cache TTL tests."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def config() -> NotionkitConfig:
    """Default test configuration with a dummy token."""
    return make_config()


@pytest.fixture
def fake_sleep() -> FakeSleep:
    return FakeSleep()


@pytest.fixture
def async_fake_sleep() -> AsyncFakeSleep:
    return AsyncFakeSleep()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
