"""Sync and async HTTP transports for the Notion API.

Each transport performs one *logical* call per :meth:`request`:

1. Validate the method against the query/body options.
2. Send the HTTP request with the bearer and ``Notion-Version`` headers.
3. On ``2xx`` -- return the parsed JSON body.
4. On a non-retryable status -- raise the classified error immediately.
5. On ``429`` / ``5xx`` / network error -- wait ``base * i`` seconds and
   retry, up to ``retry_max_retries`` additional attempts.
6. Once retries are exhausted -- raise the classified error of the last
   attempt.

The transports never read or write the response cache.
"""

from __future__ import annotations

import asyncio
import json as _json
import sys
import time
from collections.abc import AsyncIterator, Awaitable, Callable, Iterator, Mapping
from typing import Any

import httpx

from notionkit.config import NotionkitConfig
from notionkit.errors import (
    ErrorKind,
    NotionkitError,
    NotionkitNetworkError,
    NotionkitUnknownError,
    error_for_status,
)
from notionkit.models import Err, Ok, Outcome, RequestOptions
from notionkit.observability import NoopMetricsHook, get_logger
from notionkit.observability.metrics import (
    RATE_LIMITED_TOTAL,
    REQUEST_DURATION_MS,
    REQUESTS_TOTAL,
    RETRIES_TOTAL,
)
from notionkit.utils.redact import redact, redact_text

from .retries import RETRYABLE_EXCEPTIONS, compute_backoff, should_retry

log = get_logger("notionkit.transport")

PAGE_SIZE = 100

_MESSAGE_PREFIXES: dict[ErrorKind, str] = {
    ErrorKind.BAD_REQUEST: "Bad request",
    ErrorKind.UNAUTHORIZED: "Authentication failed",
    ErrorKind.FORBIDDEN: "Access denied",
    ErrorKind.NOT_FOUND: "Resource not found",
    ErrorKind.CONFLICT: "Conflict",
    ErrorKind.VALIDATION_ERROR: "Validation failed",
    ErrorKind.RATE_LIMITED: "Rate limit exceeded",
    ErrorKind.SERVER_ERROR: "Server error",
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _parse_retry_after(response: httpx.Response) -> float | None:
    """Extract the ``Retry-After`` header value as a float, or ``None``."""
    raw = response.headers.get("retry-after")
    if raw is None:
        return None
    try:
        return float(raw)
    except (ValueError, TypeError):
        return None


def _error_from_response(
    response: httpx.Response,
    method: str,
    path: str,
    token: str | None = None,
) -> NotionkitError:
    """Build the classified error for a non-2xx *response*."""
    status = response.status_code
    try:
        body = response.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}

    notion_message = str(body.get("message") or response.text[:500] or "no details")
    notion_code = body.get("code") or None

    error_cls = error_for_status(status)
    prefix = _MESSAGE_PREFIXES.get(error_cls.kind, f"Unexpected status {status}")
    context: dict[str, Any] = {"method": method, "path": path}
    if error_cls.kind is ErrorKind.RATE_LIMITED:
        context["retry_after"] = _parse_retry_after(response)
    elif error_cls.kind is ErrorKind.FORBIDDEN:
        context["operation"] = f"{method} {path}"

    return error_cls(
        message=redact_text(f"{prefix} on {method} {path}: {notion_message}", token),
        status=status,
        code=str(notion_code) if notion_code is not None else None,
        context=context,
    )


def _parse_success(response: httpx.Response, method: str, path: str) -> Any:
    """Return the JSON body of a 2xx *response* (``{}`` when empty)."""
    if response.status_code == 204 or not response.content:
        return {}
    try:
        return response.json()
    except ValueError as exc:
        raise NotionkitUnknownError(
            message=f"Invalid JSON in {response.status_code} response to {method} {path}",
            status=response.status_code,
            context={"method": method, "path": path},
            cause=exc,
        ) from exc


def _dump_payload(
    method: str,
    url: str,
    headers: Mapping[str, str],
    payload: Any | None,
    response_status: int | None,
    response_body: Any | None,
    token: str | None = None,
) -> None:
    """Write a redacted debug dump of the request/response to stderr."""
    dump: dict[str, Any] = {
        "method": method,
        "url": url,
        "headers": dict(headers),
    }
    if payload is not None:
        dump["request_body"] = payload
    if response_status is not None:
        dump["response_status"] = response_status
    if response_body is not None:
        dump["response_body"] = response_body
    safe_dump = redact(dump, token)
    print(
        _json.dumps(safe_dump, indent=2, default=str),
        file=sys.stderr,
    )


def _emit_debug_dump(
    config: NotionkitConfig,
    method: str,
    response: httpx.Response,
    json_payload: Any,
) -> None:
    """Emit a redacted debug dump of request/response if enabled."""
    if not config.debug_dump_payload:
        return
    try:
        resp_body = response.json()
    except ValueError:
        resp_body = response.text[:1000]
    _dump_payload(
        method, str(response.url), config.headers, json_payload,
        response.status_code, resp_body,
        token=config.token,
    )


# ---------------------------------------------------------------------------
# Shared request helpers (used by both sync and async transports)
# ---------------------------------------------------------------------------

def _prepare(
    method: str,
    options: RequestOptions,
) -> tuple[str, dict[str, Any]]:
    """Validate *options* and return the verb plus ``httpx`` keyword args."""
    verb = options.validate_for(method)
    send_kwargs: dict[str, Any] = {}
    if options.query is not None:
        send_kwargs["params"] = {str(k): str(v) for k, v in options.query.items()}
    if options.body is not None:
        send_kwargs["json"] = options.body
    if options.timeout_seconds is not None:
        send_kwargs["timeout"] = httpx.Timeout(options.timeout_seconds)
    return verb, send_kwargs


def _network_error(
    config: NotionkitConfig,
    metrics: Any,
    method: str,
    path: str,
    exc: Exception,
    attempt: int,
) -> NotionkitNetworkError:
    """Record a network failure and wrap it in :class:`NotionkitNetworkError`."""
    metrics.increment(
        REQUESTS_TOTAL,
        tags={"method": method, "path": path, "status": "error"},
    )
    detail = redact_text(str(exc) or type(exc).__name__, config.token)
    log.warning(
        "Request network error",
        extra={
            "extra_fields": {
                "op": "request",
                "method": method,
                "path": path,
                "attempt": attempt,
                "error": detail,
            }
        },
    )
    return NotionkitNetworkError(
        message=f"Network error on {method} {path}: {detail}",
        context={"url": path, "attempt": attempt},
        cause=exc,
    )


def _process_response(
    config: NotionkitConfig,
    metrics: Any,
    method: str,
    path: str,
    response: httpx.Response,
    elapsed_ms: float,
    json_payload: Any,
) -> Ok[Any] | NotionkitError:
    """Turn one HTTP response into ``Ok(body)`` or a retryable error.

    Non-retryable errors are raised directly.
    """
    status = response.status_code
    metrics.increment(
        REQUESTS_TOTAL,
        tags={"method": method, "path": path, "status": str(status)},
    )
    metrics.timing(
        REQUEST_DURATION_MS,
        elapsed_ms,
        tags={"method": method, "path": path, "status": str(status)},
    )
    _emit_debug_dump(config, method, response, json_payload)

    if 200 <= status < 300:
        log.debug(
            "Request complete",
            extra={
                "extra_fields": {
                    "op": "request",
                    "method": method,
                    "path": path,
                    "status": status,
                    "duration_ms": round(elapsed_ms, 2),
                }
            },
        )
        return Ok(_parse_success(response, method, path))

    error = _error_from_response(response, method, path, config.token)
    if not error.retryable:
        raise error
    return error


def _retry_delay(
    config: NotionkitConfig,
    metrics: Any,
    method: str,
    path: str,
    error: NotionkitError,
    retries_done: int,
) -> float | None:
    """Return the backoff before the next attempt, or ``None`` to give up."""
    if not should_retry(
        error.status or None,
        error.cause,
        retries_done,
        config.retry_max_retries,
    ):
        return None

    retry_number = retries_done + 1
    reason = "network_error"
    if error.kind is ErrorKind.RATE_LIMITED:
        reason = "rate_limited"
        metrics.increment(
            RATE_LIMITED_TOTAL,
            tags={"method": method, "path": path},
        )
    elif error.kind is ErrorKind.SERVER_ERROR:
        reason = "server_error"

    delay = compute_backoff(retry_number, base=config.retry_base_delay)
    metrics.increment(
        RETRIES_TOTAL,
        tags={"method": method, "path": path, "reason": reason},
    )
    log.warning(
        "Retrying request",
        extra={
            "extra_fields": {
                "op": "request",
                "method": method,
                "path": path,
                "status": error.status,
                "reason": reason,
                "retry": retry_number,
                "delay_s": delay,
            }
        },
    )
    return delay


def _page_options(
    method: str,
    query: Mapping[str, str] | None,
    body: dict[str, Any] | None,
    cursor: str | None,
) -> RequestOptions:
    """Merge pagination parameters into the query (GET) or body (POST)."""
    if method.upper() == "GET":
        params = dict(query or {})
        params["page_size"] = str(PAGE_SIZE)
        if cursor is not None:
            params["start_cursor"] = cursor
        return RequestOptions(query=params)
    json_body = dict(body or {})
    json_body["page_size"] = PAGE_SIZE
    if cursor is not None:
        json_body["start_cursor"] = cursor
    return RequestOptions(body=json_body)


def _make_client_kwargs(config: NotionkitConfig) -> dict[str, Any]:
    return {
        "base_url": config.base_url,
        "headers": {
            **config.headers,
            "Content-Type": "application/json",
        },
        "timeout": httpx.Timeout(config.timeout_seconds),
        "proxy": config.http_proxy,
    }


# ---------------------------------------------------------------------------
# Sync transport
# ---------------------------------------------------------------------------

class NotionTransport:
    """Synchronous HTTP transport with auth headers, retries and error
    classification.

    Parameters
    ----------
    config:
        A :class:`NotionkitConfig` controlling all transport behaviour.
    sleep:
        Called with the backoff delay in seconds between attempts.
        Defaults to :func:`time.sleep`; tests inject a recording fake.
    http_transport:
        Optional ``httpx`` transport (e.g. ``httpx.MockTransport``).
    """

    def __init__(
        self,
        config: NotionkitConfig,
        *,
        sleep: Callable[[float], None] = time.sleep,
        http_transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._config = config
        self._sleep = sleep
        self._metrics = config.metrics if config.metrics is not None else NoopMetricsHook()
        self._client = httpx.Client(
            **_make_client_kwargs(config),
            transport=http_transport,
        )

    @property
    def config(self) -> NotionkitConfig:
        return self._config

    # -- public API --------------------------------------------------------

    def request(
        self,
        method: str,
        path: str,
        *,
        query: Mapping[str, str] | None = None,
        body: Any | None = None,
        timeout_seconds: float | None = None,
    ) -> Any:
        """Execute one logical call against the Notion API.

        Parameters
        ----------
        method:
            ``GET``, ``POST``, ``PATCH`` or ``DELETE``.
        path:
            API path relative to ``base_url`` (e.g. ``/users/me``).
        query:
            Query-string parameters (``GET`` only).
        body:
            JSON body (``POST`` / ``PATCH`` only).
        timeout_seconds:
            Per-attempt timeout override.

        Returns
        -------
        Any
            Parsed JSON body of the first successful attempt.

        Raises
        ------
        NotionkitError
            The classified error of the final attempt.
        ValueError
            If the method or option combination is not allowed.
        """
        options = RequestOptions(query=query, body=body, timeout_seconds=timeout_seconds)
        return self.send(method, path, options)

    def send(self, method: str, path: str, options: RequestOptions) -> Any:
        """Same as :meth:`request`, taking a prebuilt :class:`RequestOptions`."""
        verb, send_kwargs = _prepare(method, options)
        retries_done = 0

        while True:
            t0 = time.monotonic()
            try:
                response = self._client.request(verb, path, **send_kwargs)
            except RETRYABLE_EXCEPTIONS as exc:
                error: NotionkitError = _network_error(
                    self._config, self._metrics, verb, path, exc, retries_done + 1,
                )
            else:
                outcome = _process_response(
                    self._config, self._metrics, verb, path, response,
                    (time.monotonic() - t0) * 1000, options.body,
                )
                if isinstance(outcome, Ok):
                    return outcome.value
                error = outcome

            delay = _retry_delay(
                self._config, self._metrics, verb, path, error, retries_done,
            )
            if delay is None:
                raise error
            retries_done += 1
            self._sleep(delay)

    def request_outcome(
        self,
        method: str,
        path: str,
        *,
        query: Mapping[str, str] | None = None,
        body: Any | None = None,
        timeout_seconds: float | None = None,
    ) -> Outcome:
        """Like :meth:`request` but return ``Ok(value)`` or ``Err(error)``."""
        try:
            return Ok(self.request(
                method, path, query=query, body=body, timeout_seconds=timeout_seconds,
            ))
        except NotionkitError as exc:
            return Err(exc)

    def paginate(
        self,
        path: str,
        *,
        method: str = "GET",
        query: Mapping[str, str] | None = None,
        body: dict[str, Any] | None = None,
    ) -> Iterator[Any]:
        """Auto-paginate a Notion list endpoint, yielding each result item.

        ``GET`` endpoints receive ``page_size`` / ``start_cursor`` in the
        query string, ``POST`` endpoints in the JSON body.  Iteration stops
        when ``has_more`` is false or no ``next_cursor`` is returned.
        """
        cursor: str | None = None
        while True:
            data = self.send(method, path, _page_options(method, query, body, cursor))
            yield from data.get("results", [])

            if not data.get("has_more", False):
                break
            cursor = data.get("next_cursor")
            if cursor is None:
                break

    def close(self) -> None:
        """Close the underlying HTTP client and release resources."""
        self._client.close()

    def __enter__(self) -> NotionTransport:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


# ---------------------------------------------------------------------------
# Async transport
# ---------------------------------------------------------------------------

class AsyncNotionTransport:
    """Asynchronous HTTP transport with auth headers, retries and error
    classification.

    Mirrors :class:`NotionTransport` but uses ``httpx.AsyncClient`` and an
    awaitable *sleep* (default :func:`asyncio.sleep`).  Cancelling the
    awaiting task propagates ``asyncio.CancelledError`` into the in-flight
    ``httpx`` call, which releases its connection; cancellation is never
    retried.
    """

    def __init__(
        self,
        config: NotionkitConfig,
        *,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._sleep = sleep
        self._metrics = config.metrics if config.metrics is not None else NoopMetricsHook()
        self._client = httpx.AsyncClient(
            **_make_client_kwargs(config),
            transport=http_transport,
        )

    @property
    def config(self) -> NotionkitConfig:
        return self._config

    # -- public API --------------------------------------------------------

    async def request(
        self,
        method: str,
        path: str,
        *,
        query: Mapping[str, str] | None = None,
        body: Any | None = None,
        timeout_seconds: float | None = None,
    ) -> Any:
        """Execute one logical call against the Notion API (async).

        See :meth:`NotionTransport.request`; the semantics are identical.
        """
        options = RequestOptions(query=query, body=body, timeout_seconds=timeout_seconds)
        return await self.send(method, path, options)

    async def send(self, method: str, path: str, options: RequestOptions) -> Any:
        verb, send_kwargs = _prepare(method, options)
        retries_done = 0

        while True:
            t0 = time.monotonic()
            try:
                response = await self._client.request(verb, path, **send_kwargs)
            except RETRYABLE_EXCEPTIONS as exc:
                error: NotionkitError = _network_error(
                    self._config, self._metrics, verb, path, exc, retries_done + 1,
                )
            else:
                outcome = _process_response(
                    self._config, self._metrics, verb, path, response,
                    (time.monotonic() - t0) * 1000, options.body,
                )
                if isinstance(outcome, Ok):
                    return outcome.value
                error = outcome

            delay = _retry_delay(
                self._config, self._metrics, verb, path, error, retries_done,
            )
            if delay is None:
                raise error
            retries_done += 1
            await self._sleep(delay)

    async def request_outcome(
        self,
        method: str,
        path: str,
        *,
        query: Mapping[str, str] | None = None,
        body: Any | None = None,
        timeout_seconds: float | None = None,
    ) -> Outcome:
        """Like :meth:`request` but return ``Ok(value)`` or ``Err(error)``."""
        try:
            return Ok(await self.request(
                method, path, query=query, body=body, timeout_seconds=timeout_seconds,
            ))
        except NotionkitError as exc:
            return Err(exc)

    async def paginate(
        self,
        path: str,
        *,
        method: str = "GET",
        query: Mapping[str, str] | None = None,
        body: dict[str, Any] | None = None,
    ) -> AsyncIterator[Any]:
        """Async equivalent of :meth:`NotionTransport.paginate`."""
        cursor: str | None = None
        while True:
            data = await self.send(method, path, _page_options(method, query, body, cursor))
            for item in data.get("results", []):
                yield item

            if not data.get("has_more", False):
                break
            cursor = data.get("next_cursor")
            if cursor is None:
                break

    async def close(self) -> None:
        """Close the underlying async HTTP client and release resources."""
        await self._client.aclose()

    async def __aenter__(self) -> AsyncNotionTransport:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()
