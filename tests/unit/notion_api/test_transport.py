"""Unit tests for notionkit/notion_api/transport.py (sync transport).

Covers:
- _parse_retry_after
- _error_from_response classification
- _dump_payload redaction
- NotionTransport.request: headers, query/body encoding, retry policy,
  backoff delays, network errors, option validation
- NotionTransport.request_outcome and paginate
"""

from __future__ import annotations

import io
import json
import logging
from unittest.mock import MagicMock

import httpx
import pytest
from conftest import TEST_TOKEN, FakeSleep, MockServer, make_config, reply

from notionkit.config import configure
from notionkit.errors import (
    ErrorKind,
    NotionkitBadRequestError,
    NotionkitConflictError,
    NotionkitForbiddenError,
    NotionkitNetworkError,
    NotionkitNotFoundError,
    NotionkitRateLimitError,
    NotionkitServerError,
    NotionkitUnauthorizedError,
    NotionkitUnknownError,
    NotionkitValidationError,
)
from notionkit.models import Err, Ok
from notionkit.notion_api.transport import (
    NotionTransport,
    _dump_payload,
    _error_from_response,
    _parse_retry_after,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def make_response(
    status_code: int = 200,
    body: dict | None = None,
    headers: dict | None = None,
) -> httpx.Response:
    content = json.dumps(body).encode() if body is not None else b""
    resp = httpx.Response(status_code, content=content, headers=headers or {})
    resp.request = httpx.Request("GET", "https://api.notion.com/v1/test")
    return resp


def make_transport(
    server: MockServer,
    sleep: FakeSleep | None = None,
    **cfg_overrides,
) -> NotionTransport:
    return NotionTransport(
        make_config(**cfg_overrides),
        sleep=sleep if sleep is not None else FakeSleep(),
        http_transport=server.transport(),
    )


# ---------------------------------------------------------------------------
# _parse_retry_after
# ---------------------------------------------------------------------------

class TestParseRetryAfter:
    def test_numeric_string_returns_float(self):
        assert _parse_retry_after(make_response(headers={"retry-after": "5"})) == 5.0

    def test_invalid_string_returns_none(self):
        resp = make_response(headers={"retry-after": "not-a-number"})
        assert _parse_retry_after(resp) is None

    def test_missing_header_returns_none(self):
        assert _parse_retry_after(make_response()) is None


# ---------------------------------------------------------------------------
# _error_from_response
# ---------------------------------------------------------------------------

class TestErrorFromResponse:
    @pytest.mark.parametrize(
        ("status", "error_cls"),
        [
            (400, NotionkitBadRequestError),
            (401, NotionkitUnauthorizedError),
            (403, NotionkitForbiddenError),
            (404, NotionkitNotFoundError),
            (409, NotionkitConflictError),
            (422, NotionkitValidationError),
            (429, NotionkitRateLimitError),
            (500, NotionkitServerError),
            (503, NotionkitServerError),
            (418, NotionkitUnknownError),
        ],
    )
    def test_status_maps_to_error_class(self, status, error_cls):
        resp = make_response(status, body={"code": "some_code", "message": "details"})
        error = _error_from_response(resp, "GET", "/pages/abc")
        assert type(error) is error_cls
        assert error.status == status
        assert error.code == "some_code"
        assert "details" in error.message

    def test_missing_code_is_none(self):
        error = _error_from_response(make_response(404, body={}), "GET", "/x")
        assert error.code is None

    def test_non_json_body_falls_back_to_text(self):
        resp = httpx.Response(400, content=b"plain text error")
        error = _error_from_response(resp, "DELETE", "/blocks/1")
        assert "plain text error" in error.message

    def test_non_dict_json_body_is_ignored(self):
        resp = httpx.Response(500, content=b"[1, 2]")
        error = _error_from_response(resp, "GET", "/x")
        assert error.code is None

    def test_rate_limit_context_carries_retry_after(self):
        resp = make_response(429, body={"code": "rate_limited"}, headers={"retry-after": "2"})
        error = _error_from_response(resp, "GET", "/x")
        assert error.context["retry_after"] == 2.0

    def test_token_echoed_by_server_is_redacted(self):
        resp = make_response(401, body={"message": f"token {TEST_TOKEN} is invalid"})
        error = _error_from_response(resp, "GET", "/users/me", TEST_TOKEN)
        assert TEST_TOKEN not in error.message
        assert TEST_TOKEN not in str(error)


# ---------------------------------------------------------------------------
# _dump_payload
# ---------------------------------------------------------------------------

class TestDumpPayload:
    def test_dump_with_payload_and_response(self, capsys):
        _dump_payload(
            method="POST",
            url="https://api.notion.com/v1/pages",
            headers={"Authorization": f"Bearer {TEST_TOKEN}"},
            payload={"title": "Hello"},
            response_status=200,
            response_body={"id": "page-id"},
            token=TEST_TOKEN,
        )
        data = json.loads(capsys.readouterr().err)
        assert data["method"] == "POST"
        assert data["request_body"] == {"title": "Hello"}
        assert data["response_status"] == 200

    def test_token_is_redacted_in_dump(self, capsys):
        _dump_payload(
            method="GET",
            url=f"https://api.notion.com/v1/pages?token={TEST_TOKEN}",
            headers={"Authorization": f"Bearer {TEST_TOKEN}"},
            payload=None,
            response_status=None,
            response_body=None,
            token=TEST_TOKEN,
        )
        captured = capsys.readouterr()
        assert TEST_TOKEN not in captured.err
        data = json.loads(captured.err)
        assert "response_status" not in data


# ---------------------------------------------------------------------------
# NotionTransport.request -- success path
# ---------------------------------------------------------------------------

class TestRequestSuccess:
    def test_bot_user_returned_with_zero_retries(self):
        bot = {"object": "user", "id": "u1", "type": "bot"}
        server = MockServer(reply(200, bot))
        sleep = FakeSleep()
        transport = NotionTransport(
            configure("secret_abc", "2022-02-22"),
            sleep=sleep,
            http_transport=server.transport(),
        )

        assert transport.request("GET", "/users/me") == bot
        assert server.attempts == 1
        assert sleep.calls == []

    def test_auth_and_version_headers_sent(self):
        server = MockServer(reply(200, {}))
        transport = NotionTransport(
            configure("secret_abc", "2022-02-22"),
            http_transport=server.transport(),
        )
        transport.request("GET", "/users/me")
        sent = server.requests[0]
        assert sent.headers["Authorization"] == "Bearer secret_abc"
        assert sent.headers["Notion-Version"] == "2022-02-22"
        assert sent.url.path == "/v1/users/me"

    def test_body_serialised_as_json(self):
        server = MockServer(reply(200, {"object": "page"}))
        transport = make_transport(server)
        transport.request("POST", "/pages", body={"parent": {"page_id": "p"}})
        sent = server.requests[0]
        assert sent.headers["Content-Type"] == "application/json"
        assert json.loads(sent.content) == {"parent": {"page_id": "p"}}

    def test_query_appended_to_url(self):
        server = MockServer(reply(200, {"results": []}))
        transport = make_transport(server)
        transport.request("GET", "/users", query={"page_size": "10", "start_cursor": "c1"})
        params = server.requests[0].url.params
        assert params["page_size"] == "10"
        assert params["start_cursor"] == "c1"

    def test_lowercase_method_accepted(self):
        server = MockServer(reply(200, {"ok": True}))
        transport = make_transport(server)
        assert transport.request("get", "/users/me") == {"ok": True}
        assert server.requests[0].method == "GET"

    def test_204_returns_empty_dict(self):
        server = MockServer(reply(204))
        transport = make_transport(server)
        assert transport.request("DELETE", "/blocks/abc") == {}

    def test_invalid_json_on_2xx_raises_unknown_error(self):
        server = MockServer(lambda req: httpx.Response(200, content=b"<html>", request=req))
        transport = make_transport(server)
        with pytest.raises(NotionkitUnknownError):
            transport.request("GET", "/users/me")


# ---------------------------------------------------------------------------
# NotionTransport.request -- non-retryable statuses
# ---------------------------------------------------------------------------

class TestNonRetryableStatuses:
    @pytest.mark.parametrize(
        ("status", "kind"),
        [
            (400, ErrorKind.BAD_REQUEST),
            (401, ErrorKind.UNAUTHORIZED),
            (403, ErrorKind.FORBIDDEN),
            (404, ErrorKind.NOT_FOUND),
            (409, ErrorKind.CONFLICT),
            (422, ErrorKind.VALIDATION_ERROR),
            (418, ErrorKind.UNKNOWN_ERROR),
        ],
    )
    def test_exactly_one_attempt(self, status, kind):
        server = MockServer(reply(status, {"code": "nope", "message": "no"}))
        sleep = FakeSleep()
        transport = make_transport(server, sleep)

        with pytest.raises(Exception) as exc_info:
            transport.request("GET", "/pages/abc")

        assert exc_info.value.kind is kind
        assert exc_info.value.status == status
        assert exc_info.value.retryable is False
        assert server.attempts == 1
        assert sleep.calls == []


# ---------------------------------------------------------------------------
# NotionTransport.request -- retry policy
# ---------------------------------------------------------------------------

class TestRetryPolicy:
    def test_rate_limited_on_every_attempt(self):
        server = MockServer(reply(429, {"code": "rate_limited", "message": "slow down"}))
        transport = make_transport(server, retry_max_retries=3)

        with pytest.raises(NotionkitRateLimitError) as exc_info:
            transport.request("GET", "/users/me")

        assert server.attempts == 4
        assert exc_info.value.kind is ErrorKind.RATE_LIMITED
        assert exc_info.value.code == "rate_limited"
        assert "slow down" in exc_info.value.message

    @pytest.mark.parametrize("status", [500, 502, 503, 504])
    def test_server_error_on_every_attempt(self, status):
        server = MockServer(reply(status, {"code": "internal_server_error"}))
        transport = make_transport(server, retry_max_retries=2)

        with pytest.raises(NotionkitServerError) as exc_info:
            transport.request("GET", "/pages/p1")

        assert server.attempts == 3
        assert exc_info.value.status == status

    def test_two_503_then_success(self):
        server = MockServer(
            reply(503, {"code": "service_unavailable"}),
            reply(503, {"code": "service_unavailable"}),
            reply(200, {"object": "page", "id": "abc"}),
        )
        transport = make_transport(server)
        assert transport.request("GET", "/pages/abc") == {"object": "page", "id": "abc"}
        assert server.attempts == 3

    def test_backoff_is_linear_in_attempt(self):
        server = MockServer(reply(500, {}))
        sleep = FakeSleep()
        transport = make_transport(server, sleep, retry_max_retries=3, retry_base_delay=1.0)

        with pytest.raises(NotionkitServerError):
            transport.request("GET", "/x")

        assert sleep.calls == [1.0, 2.0, 3.0]

    def test_backoff_scales_with_base_delay(self):
        server = MockServer(reply(429, {}), reply(429, {}), reply(200, {}))
        sleep = FakeSleep()
        transport = make_transport(server, sleep, retry_base_delay=0.25)
        transport.request("GET", "/x")
        assert sleep.calls == [0.25, 0.5]

    def test_zero_retries_makes_single_attempt(self):
        server = MockServer(reply(503, {}))
        transport = make_transport(server, retry_max_retries=0)
        with pytest.raises(NotionkitServerError):
            transport.request("GET", "/x")
        assert server.attempts == 1

    def test_final_error_is_last_attempt_classification(self):
        server = MockServer(reply(503, {"code": "a"}), reply(429, {"code": "rate_limited"}))
        transport = make_transport(server, retry_max_retries=1)
        with pytest.raises(NotionkitRateLimitError) as exc_info:
            transport.request("GET", "/x")
        assert exc_info.value.code == "rate_limited"

    def test_retry_after_header_does_not_change_delay(self):
        server = MockServer(reply(429, {}, headers={"retry-after": "30"}), reply(200, {}))
        sleep = FakeSleep()
        transport = make_transport(server, sleep, retry_base_delay=1.0)
        transport.request("GET", "/x")
        assert sleep.calls == [1.0]


# ---------------------------------------------------------------------------
# NotionTransport.request -- network failures
# ---------------------------------------------------------------------------

class TestNetworkErrors:
    def test_connect_error_retried_then_success(self):
        server = MockServer(httpx.ConnectError("connection refused"), reply(200, {"id": "p1"}))
        sleep = FakeSleep()
        transport = make_transport(server, sleep)
        assert transport.request("GET", "/pages/p1") == {"id": "p1"}
        assert server.attempts == 2
        assert sleep.calls == [1.0]

    def test_timeout_exhausted_raises_network_error(self):
        server = MockServer(httpx.ReadTimeout("timed out"))
        transport = make_transport(server, retry_max_retries=3)

        with pytest.raises(NotionkitNetworkError) as exc_info:
            transport.request("GET", "/pages")

        assert server.attempts == 4
        assert exc_info.value.status == 0
        assert exc_info.value.code is None
        assert exc_info.value.retryable is True
        assert isinstance(exc_info.value.__cause__, httpx.ReadTimeout)

    def test_proxy_error_retried_as_network_error(self):
        server = MockServer(httpx.ProxyError("CONNECT rejected"))
        sleep = FakeSleep()
        transport = make_transport(server, sleep, retry_max_retries=2)

        with pytest.raises(NotionkitNetworkError) as exc_info:
            transport.request("GET", "/users/me")

        assert server.attempts == 3
        assert sleep.calls == [1.0, 2.0]
        assert exc_info.value.status == 0
        assert isinstance(exc_info.value.__cause__, httpx.ProxyError)

    def test_non_network_exception_propagates_unchanged(self):
        server = MockServer(RuntimeError("boom"))
        transport = make_transport(server)
        with pytest.raises(RuntimeError, match="boom"):
            transport.request("GET", "/x")
        assert server.attempts == 1


# ---------------------------------------------------------------------------
# NotionTransport.request -- option validation
# ---------------------------------------------------------------------------

class TestOptionValidation:
    def _transport(self) -> tuple[NotionTransport, MockServer]:
        server = MockServer(reply(200, {}))
        return make_transport(server), server

    def test_unsupported_method_rejected(self):
        transport, server = self._transport()
        with pytest.raises(ValueError, match="Unsupported method"):
            transport.request("PUT", "/pages")
        assert server.attempts == 0

    def test_query_on_post_rejected(self):
        transport, _ = self._transport()
        with pytest.raises(ValueError, match="query"):
            transport.request("POST", "/search", query={"a": "b"})

    def test_body_on_get_rejected(self):
        transport, _ = self._transport()
        with pytest.raises(ValueError, match="body"):
            transport.request("GET", "/users", body={"a": 1})

    def test_body_on_delete_rejected(self):
        transport, _ = self._transport()
        with pytest.raises(ValueError):
            transport.request("DELETE", "/blocks/b1", body={})

    def test_non_positive_timeout_rejected(self):
        transport, _ = self._transport()
        with pytest.raises(ValueError, match="timeout"):
            transport.request("GET", "/users/me", timeout_seconds=0)

    def test_per_call_timeout_forwarded(self):
        server = MockServer(reply(200, {}))
        transport = make_transport(server)
        transport.request("GET", "/users/me", timeout_seconds=5)
        timeout = server.requests[0].extensions["timeout"]
        assert timeout["read"] == 5


# ---------------------------------------------------------------------------
# request_outcome
# ---------------------------------------------------------------------------

class TestRequestOutcome:
    def test_success_returns_ok(self):
        server = MockServer(reply(200, {"id": "u1"}))
        outcome = make_transport(server).request_outcome("GET", "/users/u1")
        assert isinstance(outcome, Ok)
        assert outcome.ok is True
        assert outcome.value == {"id": "u1"}

    def test_failure_returns_err_without_raising(self):
        server = MockServer(reply(404, {"code": "object_not_found", "message": "gone"}))
        outcome = make_transport(server).request_outcome("GET", "/pages/x")
        assert isinstance(outcome, Err)
        assert outcome.ok is False
        assert outcome.kind is ErrorKind.NOT_FOUND
        assert outcome.status == 404
        assert outcome.code == "object_not_found"
        assert outcome.retryable is False


# ---------------------------------------------------------------------------
# paginate
# ---------------------------------------------------------------------------

class TestPaginate:
    def test_get_pagination_follows_cursor(self):
        server = MockServer(
            reply(200, {"results": [1, 2], "has_more": True, "next_cursor": "c2"}),
            reply(200, {"results": [3], "has_more": False, "next_cursor": None}),
        )
        transport = make_transport(server)
        assert list(transport.paginate("/users")) == [1, 2, 3]
        first, second = server.requests
        assert first.url.params["page_size"] == "100"
        assert "start_cursor" not in first.url.params
        assert second.url.params["start_cursor"] == "c2"

    def test_post_pagination_uses_body(self):
        server = MockServer(
            reply(200, {"results": ["a"], "has_more": True, "next_cursor": "n"}),
            reply(200, {"results": ["b"], "has_more": False}),
        )
        transport = make_transport(server)
        items = list(transport.paginate("/search", method="POST", body={"query": "x"}))
        assert items == ["a", "b"]
        assert json.loads(server.requests[1].content) == {
            "query": "x", "page_size": 100, "start_cursor": "n",
        }

    def test_stops_when_cursor_missing(self):
        server = MockServer(reply(200, {"results": [1], "has_more": True, "next_cursor": None}))
        transport = make_transport(server)
        assert list(transport.paginate("/users")) == [1]
        assert server.attempts == 1


# ---------------------------------------------------------------------------
# Observability
# ---------------------------------------------------------------------------

class TestObservability:
    def test_metrics_emitted_for_retries(self):
        metrics = MagicMock()
        server = MockServer(reply(429, {}), reply(200, {}))
        transport = make_transport(server, metrics=metrics)
        transport.request("GET", "/x")

        metrics.increment.assert_any_call(
            "notionkit.rate_limited_total",
            tags={"method": "GET", "path": "/x"},
        )
        metrics.increment.assert_any_call(
            "notionkit.retries_total",
            tags={"method": "GET", "path": "/x", "reason": "rate_limited"},
        )
        assert metrics.timing.call_count == 2

    def test_retry_warnings_never_contain_token(self):
        stream = io.StringIO()
        handler = logging.StreamHandler(stream)
        logger = logging.getLogger("notionkit.transport")
        logger.addHandler(handler)
        try:
            server = MockServer(
                httpx.ConnectError(f"refused for Bearer {TEST_TOKEN}"),
                reply(500, {"message": f"bad {TEST_TOKEN}"}),
                reply(200, {}),
            )
            make_transport(server).request("GET", "/x")
        finally:
            logger.removeHandler(handler)

        output = stream.getvalue()
        assert "Retrying request" in output
        assert TEST_TOKEN not in output

    def test_debug_dump_written_when_enabled(self, capsys):
        server = MockServer(reply(200, {"id": "p1"}))
        transport = make_transport(server, debug_dump_payload=True)
        transport.request("PATCH", "/pages/p1", body={"archived": True})
        captured = capsys.readouterr()
        data = json.loads(captured.err)
        assert data["method"] == "PATCH"
        assert data["request_body"] == {"archived": True}
        assert TEST_TOKEN not in captured.err

    def test_no_debug_dump_when_disabled(self, capsys):
        server = MockServer(reply(200, {"id": "p1"}))
        make_transport(server).request("GET", "/pages/p1")
        assert capsys.readouterr().err == ""


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------

class TestLifecycle:
    def test_context_manager_closes_client(self):
        server = MockServer(reply(200, {}))
        with make_transport(server) as transport:
            transport.request("GET", "/x")
        assert transport._client.is_closed
