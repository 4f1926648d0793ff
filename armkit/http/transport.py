"""Async HTTP transport with request history.

The transport executes exactly one request per :meth:`HttpTransport.send`
call. It does not retry, cache or rate-limit; the request pipeline above it
decides what to send and how to interpret the response.

Example:
    >>> transport = HttpTransport(timeout=30.0)
    >>> request = httpx.Request("GET", "https://management.azure.com/subscriptions")
    >>> response = await transport.send(request)
    >>> transport.last_request().response_status
    200
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import httpx

from armkit.errors import ErrorContext, TransportError, TransportTimeoutError

logger = logging.getLogger(__name__)

_REDACTED_HEADERS = frozenset({"authorization", "proxy-authorization", "cookie"})


@dataclass
class RequestRecord:
    """Record of an HTTP request/response."""

    method: str
    url: str
    request_body: Any | None
    response_status: int
    response_body: Any | None
    headers: dict[str, str]
    duration_ms: float
    timestamp: datetime = field(default_factory=datetime.now)
    error: str | None = None


def sanitize_headers(headers: httpx.Headers | dict[str, str]) -> dict[str, str]:
    """Copy headers with credential values redacted."""
    return {
        k: ("***REDACTED***" if k.lower() in _REDACTED_HEADERS else v) for k, v in headers.items()
    }


def _decode_body(content: bytes) -> Any:
    if not content:
        return None
    try:
        return json.loads(content)
    except ValueError:
        return content.decode("utf-8", errors="replace")


class HttpTransport:
    """Sends requests through an ``httpx.AsyncClient``.

    An ``httpx.AsyncClient`` is bound to the event loop it first runs in, so
    the transport keeps one client per loop. The client of a loop that has
    been closed is released the next time the transport is used, and
    :meth:`aclose` releases the client of the running loop as well.

    Args:
        timeout: Per-request timeout in seconds.
        transport: Optional ``httpx.AsyncBaseTransport`` (e.g.
            ``httpx.MockTransport``) used instead of the network.
        default_headers: Headers sent with every request.
        max_history: Maximum number of RequestRecords kept; 0 disables history.
        connect_timeout: Timeout for establishing a connection; defaults to
            ``timeout``.
        proxy: Proxy URL every request is sent through.
    """

    def __init__(
        self,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
        default_headers: dict[str, str] | None = None,
        max_history: int = 1000,
        connect_timeout: float | None = None,
        proxy: str | None = None,
    ) -> None:
        self.timeout = timeout
        self.connect_timeout = connect_timeout
        self.proxy = proxy
        self.default_headers = default_headers or {}
        self.max_history = max_history
        self.history: list[RequestRecord] = []
        self._transport = transport
        self._clients: dict[asyncio.AbstractEventLoop, httpx.AsyncClient] = {}

    def _new_client(self) -> httpx.AsyncClient:
        kwargs: dict[str, Any] = {}
        if self.proxy:
            kwargs["proxy"] = self.proxy
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout, connect=self.connect_timeout or self.timeout),
            headers=self.default_headers,
            transport=self._transport,
            **kwargs,
        )

    async def _client_for_running_loop(self) -> httpx.AsyncClient:
        loop = asyncio.get_running_loop()
        await self._release(lambda client_loop: client_loop.is_closed())
        client = self._clients.get(loop)
        if client is None:
            if self._clients:
                logger.debug("New event loop, creating another HTTP client")
            client = self._new_client()
            self._clients[loop] = client
        return client

    async def _release(self, should_close: Callable[[asyncio.AbstractEventLoop], bool]) -> None:
        for client_loop in [loop for loop in self._clients if should_close(loop)]:
            client = self._clients.pop(client_loop)
            try:
                await client.aclose()
            except RuntimeError as e:
                # connections opened on a loop that no longer exists
                logger.warning(f"HTTP client of a closed event loop did not shut down cleanly: {e}")

    async def aclose(self) -> None:
        """Close the client of the running loop and those of closed loops.

        Clients bound to other loops that are still open stay usable; close
        them from their own loop.
        """
        loop = asyncio.get_running_loop()
        await self._release(lambda client_loop: client_loop is loop or client_loop.is_closed())

    async def send(self, request: httpx.Request) -> httpx.Response:
        """Execute one request and return the fully read response.

        Raises:
            TransportTimeoutError: The request timed out at the transport layer.
            TransportError: No response could be obtained.
        """
        client = await self._client_for_running_loop()
        method = request.method
        url = str(request.url)
        context = ErrorContext(request={"method": method, "url": url})

        logger.debug(f"{method} {url}")
        start_time = time.perf_counter()
        try:
            response = await client.send(request)
        except httpx.TimeoutException as e:
            self._record(request, None, start_time, error=str(e) or type(e).__name__)
            logger.warning(f"{method} {url} timed out")
            raise TransportTimeoutError(f"Request timed out: {method} {url}", context=context, cause=e) from e
        except httpx.RequestError as e:
            self._record(request, None, start_time, error=str(e) or type(e).__name__)
            logger.error(f"{method} {url} failed: {e}")
            raise TransportError(f"Request failed: {method} {url}: {e}", context=context, cause=e) from e

        duration_ms = self._record(request, response, start_time)
        logger.debug(f"{method} {url} -> {response.status_code} ({duration_ms:.1f} ms)")
        return response

    def _record(
        self,
        request: httpx.Request,
        response: httpx.Response | None,
        start_time: float,
        error: str | None = None,
    ) -> float:
        duration_ms = (time.perf_counter() - start_time) * 1000
        if self.max_history <= 0:
            return duration_ms

        record = RequestRecord(
            method=request.method,
            url=str(request.url),
            request_body=_decode_body(request.content),
            response_status=response.status_code if response is not None else 0,
            response_body=_decode_body(response.content) if response is not None else None,
            headers=sanitize_headers(request.headers),
            duration_ms=duration_ms,
            error=error,
        )
        self.history.append(record)
        if len(self.history) > self.max_history:
            del self.history[: len(self.history) - self.max_history]
        return duration_ms

    def get_history(self) -> list[RequestRecord]:
        """Get all request history."""
        return self.history.copy()

    def clear_history(self) -> None:
        """Clear request history."""
        self.history.clear()

    def last_request(self) -> RequestRecord | None:
        """Get the most recent request record."""
        return self.history[-1] if self.history else None
