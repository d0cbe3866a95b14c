"""
HTTP Transport for Carrier API Calls

The carrier integration core never touches sockets directly. It issues
requests through the HttpTransport interface:

    await transport.request(method, url, headers=None, body=None, timeout_ms=None)
        -> HttpResponse(status, headers, body)

HttpxTransport is the production implementation on top of httpx.AsyncClient.
Tests inject a recording stub instead.

Failures are reported with two exception types so callers can tell them
apart without knowing which HTTP library sits underneath:
- TransportTimeout: the per-call timeout fired and the call was aborted
- TransportError: any other connection/protocol level failure
"""
import asyncio
import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)


class TransportError(Exception):
    """Network-level failure while executing a request."""

    def __init__(self, message: str, url: Optional[str] = None):
        self.message = message
        self.url = url
        super().__init__(message)


class TransportTimeout(TransportError):
    """The request exceeded its timeout budget and was aborted."""


@dataclass
class HttpResponse:
    """Response as seen by the core: status, lower-cased headers, decoded body."""
    status: int
    headers: Dict[str, str] = field(default_factory=dict)
    body: Any = None


class HttpTransport(ABC):
    """Abstract request executor."""

    @abstractmethod
    async def request(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        body: Optional[str] = None,
        timeout_ms: Optional[int] = None,
    ) -> HttpResponse:
        """
        Execute one HTTP request.

        Returns:
            HttpResponse whose body is parsed JSON for JSON responses,
            otherwise the response text.

        Raises:
            TransportTimeout: timeout_ms elapsed before the response arrived
            TransportError: any other transport failure
        """


def decode_body(response: httpx.Response) -> Any:
    """
    Decode a response body.

    JSON content types are parsed; a body that claims to be JSON but does not
    parse is returned as text so response validation can reject it.
    """
    content_type = response.headers.get("content-type", "")
    text = response.text
    if "application/json" in content_type:
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            logger.warning(f"[HTTP] Malformed JSON in response: {text[:200]}")
            return text
    return text


class HttpxTransport(HttpTransport):
    """
    HttpTransport backed by a single httpx.AsyncClient.

    Usage:
        async with HttpxTransport() as transport:
            response = await transport.request("GET", "https://api.example.com")
    """

    def __init__(
        self,
        default_timeout_ms: int = 30_000,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.default_timeout_ms = default_timeout_ms
        self._client: Optional[httpx.AsyncClient] = client

    async def __aenter__(self):
        await self.init()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def init(self):
        """Initialize client without context manager. Must call close() when done."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.default_timeout_ms / 1000)
        return self

    async def close(self):
        """Close the client. Use this when not using context manager."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def request(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        body: Optional[str] = None,
        timeout_ms: Optional[int] = None,
    ) -> HttpResponse:
        if not self._client:
            await self.init()

        timeout = (timeout_ms if timeout_ms is not None else self.default_timeout_ms) / 1000

        try:
            # httpx applies timeout per phase; wait_for bounds the whole call
            response = await asyncio.wait_for(
                self._client.request(
                    method,
                    url,
                    headers=headers or {},
                    content=body,
                    timeout=timeout,
                ),
                timeout,
            )
        except (httpx.TimeoutException, asyncio.TimeoutError) as e:
            logger.warning(f"[HTTP] {method} {url} timed out after {timeout:.1f}s")
            raise TransportTimeout(f"Request timed out after {int(timeout * 1000)}ms", url=url) from e
        except httpx.RequestError as e:
            logger.warning(f"[HTTP] {method} {url} failed: {e}")
            raise TransportError(f"Request failed: {e}", url=url) from e

        logger.debug(f"[HTTP] {method} {url} -> {response.status_code}")
        return HttpResponse(
            status=response.status_code,
            headers={k.lower(): v for k, v in response.headers.items()},
            body=decode_body(response),
        )
