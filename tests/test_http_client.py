"""
Tests for the httpx-backed HTTP transport.
"""
import asyncio
import time

import httpx
import pytest

from shipping_rates.core.http_client import (
    HttpxTransport,
    TransportError,
    TransportTimeout,
)


def _transport(handler) -> HttpxTransport:
    return HttpxTransport(client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


class TestHttpxTransport:

    @pytest.mark.asyncio
    async def test_json_body_is_parsed(self):
        def handler(request):
            return httpx.Response(200, json={"ok": True}, headers={"X-Trace": "abc"})

        async with _transport(handler) as transport:
            response = await transport.request("GET", "https://api.example.com/ping")

        assert response.status == 200
        assert response.body == {"ok": True}
        assert response.headers["x-trace"] == "abc"

    @pytest.mark.asyncio
    async def test_non_json_body_is_text(self):
        def handler(request):
            return httpx.Response(502, text="Bad Gateway")

        async with _transport(handler) as transport:
            response = await transport.request("GET", "https://api.example.com/ping")

        assert response.status == 502
        assert response.body == "Bad Gateway"

    @pytest.mark.asyncio
    async def test_malformed_json_falls_back_to_text(self):
        def handler(request):
            return httpx.Response(
                200,
                content=b"{not valid",
                headers={"Content-Type": "application/json"},
            )

        async with _transport(handler) as transport:
            response = await transport.request("GET", "https://api.example.com/ping")

        assert response.body == "{not valid"

    @pytest.mark.asyncio
    async def test_sends_method_headers_and_body(self):
        seen = {}

        def handler(request):
            seen["method"] = request.method
            seen["auth"] = request.headers.get("Authorization")
            seen["body"] = request.content
            return httpx.Response(204)

        async with _transport(handler) as transport:
            await transport.request(
                "POST",
                "https://api.example.com/items",
                headers={"Authorization": "Bearer t"},
                body='{"a": 1}',
            )

        assert seen == {"method": "POST", "auth": "Bearer t", "body": b'{"a": 1}'}

    @pytest.mark.asyncio
    async def test_timeout_raises_transport_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("read timed out", request=request)

        async with _transport(handler) as transport:
            with pytest.raises(TransportTimeout) as exc_info:
                await transport.request("GET", "https://api.example.com/slow", timeout_ms=250)

        assert "250ms" in str(exc_info.value)
        assert exc_info.value.url == "https://api.example.com/slow"

    @pytest.mark.asyncio
    async def test_slow_body_hits_total_timeout(self):
        async def drip():
            for _ in range(8):
                await asyncio.sleep(0.1)
                yield b"x"

        def handler(request):
            return httpx.Response(200, content=drip())

        async with _transport(handler) as transport:
            started = time.monotonic()
            with pytest.raises(TransportTimeout):
                await transport.request("GET", "https://api.example.com/drip", timeout_ms=250)
            elapsed = time.monotonic() - started

        assert elapsed < 0.6

    @pytest.mark.asyncio
    async def test_slow_handler_hits_total_timeout(self):
        async def handler(request):
            await asyncio.sleep(1)
            return httpx.Response(200)

        async with _transport(handler) as transport:
            with pytest.raises(TransportTimeout) as exc_info:
                await transport.request("GET", "https://api.example.com/slow", timeout_ms=100)

        assert "100ms" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_connect_error_raises_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with _transport(handler) as transport:
            with pytest.raises(TransportError) as exc_info:
                await transport.request("GET", "https://api.example.com/down")

        assert not isinstance(exc_info.value, TransportTimeout)
        assert "connection refused" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_close_releases_client(self):
        transport = _transport(lambda request: httpx.Response(200))
        await transport.close()

        assert transport._client is None
