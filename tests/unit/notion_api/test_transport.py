"""Tests for mdnotion/notion_api/transport.py."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from mdnotion.config import MdNotionConfig
from mdnotion.errors import (
    MdNotionAuthError,
    MdNotionNetworkError,
    MdNotionNotFoundError,
    MdNotionPermissionError,
    MdNotionRateLimitError,
    MdNotionRetryExhaustedError,
    MdNotionValidationError,
)
from mdnotion.notion_api.transport import (
    AsyncNotionTransport,
    _parse_retry_after,
    _raise_for_status,
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
    resp.request = httpx.Request("POST", "https://api.notion.com/v1/test")
    return resp


def make_config(**overrides) -> MdNotionConfig:
    defaults = dict(
        token="test-token-1234",
        retry_base_delay=0.0,
        retry_max_delay=0.0,
        retry_jitter=False,
        rate_limit_rps=10_000.0,
    )
    defaults.update(overrides)
    return MdNotionConfig(**defaults)


class _MockAsyncBucket:
    def __init__(self, wait: float = 0.0):
        self._wait = wait

    async def acquire(self, tokens: int = 1) -> float:
        return self._wait


def _transport(**cfg_overrides) -> AsyncNotionTransport:
    t = AsyncNotionTransport(make_config(**cfg_overrides))
    t._bucket = _MockAsyncBucket()
    return t


# ---------------------------------------------------------------------------
# Helpers under test
# ---------------------------------------------------------------------------

class TestParseRetryAfter:
    def test_numeric(self):
        assert _parse_retry_after(make_response(headers={"retry-after": "2.5"})) == 2.5

    def test_invalid(self):
        assert _parse_retry_after(make_response(headers={"retry-after": "soon"})) is None

    def test_missing(self):
        assert _parse_retry_after(make_response()) is None


class TestRaiseForStatus:
    @pytest.mark.parametrize("status,error", [
        (400, MdNotionValidationError),
        (401, MdNotionAuthError),
        (403, MdNotionPermissionError),
        (404, MdNotionNotFoundError),
        (409, MdNotionValidationError),
        (422, MdNotionValidationError),
    ])
    def test_status_mapping(self, status, error):
        resp = make_response(status, body={"message": "nope", "code": "some_code"})
        with pytest.raises(error) as exc_info:
            _raise_for_status(resp, "POST", "/pages")
        assert exc_info.value.context["status_code"] == status
        assert exc_info.value.context["notion_code"] == "some_code"
        assert "nope" in exc_info.value.message

    def test_non_json_body(self):
        resp = httpx.Response(400, content=b"<html>bad</html>")
        resp.request = httpx.Request("POST", "https://api.notion.com/v1/pages")
        with pytest.raises(MdNotionValidationError, match="<html>bad</html>"):
            _raise_for_status(resp, "POST", "/pages")


# ---------------------------------------------------------------------------
# AsyncNotionTransport
# ---------------------------------------------------------------------------

class TestHeaders:
    async def test_auth_and_version_headers(self):
        transport = AsyncNotionTransport(make_config(notion_version="2022-06-28"))
        headers = transport._client.headers
        assert headers["authorization"] == "Bearer test-token-1234"
        assert headers["notion-version"] == "2022-06-28"
        assert headers["content-type"] == "application/json"
        await transport.close()


class TestRequest:
    async def test_200_returns_json(self):
        transport = _transport()
        resp = make_response(200, body={"id": "page-1"})
        with patch.object(transport._client, "request", new=AsyncMock(return_value=resp)) as req:
            result = await transport.request("POST", "/pages", json={"a": 1})
        assert result == {"id": "page-1"}
        req.assert_awaited_once_with("POST", "/pages", json={"a": 1})
        await transport.close()

    async def test_empty_success_returns_empty_dict(self):
        transport = _transport()
        with patch.object(transport._client, "request", new=AsyncMock(return_value=make_response(204))):
            assert await transport.request("PATCH", "/pages/x") == {}
        await transport.close()

    async def test_4xx_raised_without_retry(self):
        transport = _transport(retry_max_attempts=3)
        mock = AsyncMock(return_value=make_response(401, body={"message": "bad token"}))
        with patch.object(transport._client, "request", new=mock), pytest.raises(MdNotionAuthError):
            await transport.request("POST", "/pages")
        assert mock.await_count == 1
        await transport.close()

    async def test_default_single_attempt_on_5xx(self):
        transport = _transport()
        mock = AsyncMock(return_value=make_response(502, body={}))
        with (
            patch.object(transport._client, "request", new=mock),
            pytest.raises(MdNotionRetryExhaustedError) as exc_info,
        ):
            await transport.request("PATCH", "/blocks/b/children")
        assert mock.await_count == 1
        assert exc_info.value.context == {"attempts": 1, "last_status_code": 502}
        await transport.close()

    async def test_default_single_attempt_on_429(self):
        transport = _transport()
        mock = AsyncMock(return_value=make_response(429, headers={"retry-after": "3"}))
        with (
            patch.object(transport._client, "request", new=mock),
            pytest.raises(MdNotionRateLimitError) as exc_info,
        ):
            await transport.request("PATCH", "/blocks/b/children")
        assert mock.await_count == 1
        assert exc_info.value.context["retry_after_seconds"] == 3.0
        await transport.close()

    async def test_retry_then_success(self):
        transport = _transport(retry_max_attempts=3)
        mock = AsyncMock(side_effect=[
            make_response(503, body={}),
            make_response(429, body={}, headers={"retry-after": "0"}),
            make_response(200, body={"ok": True}),
        ])
        with (
            patch.object(transport._client, "request", new=mock),
            patch("mdnotion.notion_api.transport.asyncio.sleep", new=AsyncMock()) as sleep,
        ):
            assert await transport.request("GET", "/x") == {"ok": True}
        assert mock.await_count == 3
        assert sleep.await_count == 2
        await transport.close()

    async def test_retries_exhausted(self):
        transport = _transport(retry_max_attempts=2)
        mock = AsyncMock(return_value=make_response(500, body={}))
        with (
            patch.object(transport._client, "request", new=mock),
            patch("mdnotion.notion_api.transport.asyncio.sleep", new=AsyncMock()),
            pytest.raises(MdNotionRetryExhaustedError) as exc_info,
        ):
            await transport.request("GET", "/x")
        assert exc_info.value.context["attempts"] == 2
        assert mock.await_count == 2
        await transport.close()

    async def test_network_error_single_attempt(self):
        transport = _transport()
        mock = AsyncMock(side_effect=httpx.ConnectError("refused"))
        with (
            patch.object(transport._client, "request", new=mock),
            pytest.raises(MdNotionNetworkError) as exc_info,
        ):
            await transport.request("POST", "/pages")
        assert isinstance(exc_info.value.cause, httpx.ConnectError)
        await transport.close()

    async def test_protocol_error_is_network_error(self):
        transport = _transport(retry_max_attempts=3)
        await transport.close()

        def handler(request):
            raise httpx.RemoteProtocolError("peer closed connection", request=request)

        transport._client = httpx.AsyncClient(
            base_url="https://api.notion.com/v1", transport=httpx.MockTransport(handler)
        )
        with pytest.raises(MdNotionNetworkError) as exc_info:
            await transport.request("POST", "/pages")
        assert isinstance(exc_info.value.cause, httpx.RemoteProtocolError)
        assert exc_info.value.context["attempt"] == 1
        await transport.close()

    async def test_non_json_success_body(self):
        transport = _transport()
        await transport.close()
        transport._client = httpx.AsyncClient(
            base_url="https://api.notion.com/v1",
            transport=httpx.MockTransport(
                lambda request: httpx.Response(200, text="<html>gateway</html>")
            ),
        )
        with pytest.raises(MdNotionNetworkError) as exc_info:
            await transport.request("POST", "/pages")
        assert exc_info.value.context["status_code"] == 200
        assert "gateway" in exc_info.value.context["body"]
        await transport.close()

    async def test_non_object_success_body(self):
        transport = _transport()
        resp = httpx.Response(200, content=b"[1, 2]")
        resp.request = httpx.Request("POST", "https://api.notion.com/v1/pages")
        with (
            patch.object(transport._client, "request", new=AsyncMock(return_value=resp)),
            pytest.raises(MdNotionNetworkError, match="JSON object"),
        ):
            await transport.request("POST", "/pages")
        await transport.close()

    async def test_network_error_retried(self):
        transport = _transport(retry_max_attempts=2)
        mock = AsyncMock(side_effect=[httpx.ReadTimeout("slow"), make_response(200, body={"id": "p"})])
        with (
            patch.object(transport._client, "request", new=mock),
            patch("mdnotion.notion_api.transport.asyncio.sleep", new=AsyncMock()),
        ):
            assert await transport.request("POST", "/pages") == {"id": "p"}
        await transport.close()


class TestMetrics:
    async def test_request_metrics(self):
        metrics = MagicMock()
        transport = _transport(metrics=metrics)
        with patch.object(
            transport._client, "request", new=AsyncMock(return_value=make_response(200, body={}))
        ):
            await transport.request("POST", "/pages")
        metrics.increment.assert_any_call(
            "mdnotion.requests_total",
            tags={"method": "POST", "path": "/pages", "status": "200"},
        )
        names = [c.args[0] for c in metrics.timing.call_args_list]
        assert "mdnotion.request_duration_ms" in names
        await transport.close()

    async def test_rate_limited_metric(self):
        metrics = MagicMock()
        transport = _transport(metrics=metrics)
        with (
            patch.object(transport._client, "request", new=AsyncMock(return_value=make_response(429))),
            pytest.raises(MdNotionRateLimitError),
        ):
            await transport.request("GET", "/x")
        metrics.increment.assert_any_call(
            "mdnotion.rate_limited_total", tags={"method": "GET", "path": "/x"}
        )
        await transport.close()


class TestDebugDump:
    async def test_dump_is_redacted(self, capsys):
        transport = _transport(token="ntn_supersecret_abcd", debug_dump_payload=True)
        resp = make_response(200, body={"id": "p"})
        with patch.object(transport._client, "request", new=AsyncMock(return_value=resp)):
            await transport.request("POST", "/pages", json={"note": "ntn_supersecret_abcd"})
        err = capsys.readouterr().err
        dump = json.loads(err)
        assert dump["response_status"] == 200
        assert "ntn_supersecret_abcd" not in err
        await transport.close()


class TestLifecycle:
    async def test_context_manager_closes_client(self):
        async with AsyncNotionTransport(make_config()) as transport:
            pass
        assert transport._client.is_closed
