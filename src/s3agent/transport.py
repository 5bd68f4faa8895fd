"""HTTP transport protocol and the default httpx implementation.

The agent only ever talks to a :class:`Transport`. Tests substitute a double;
production code uses :class:`HttpxTransport`. Timeouts and cancellation are
the transport's business, never the agent's.
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Mapping
from dataclasses import dataclass, field
from typing import Protocol

import httpx

from s3agent.errors import TransportError
from s3agent.request import PostData

logger = logging.getLogger(__name__)

# Streaming chunk size: 64 KB
_CHUNK_SIZE = 64 * 1024


@dataclass
class RequestOptions:
    """Headers and body handed to the transport alongside the URL."""

    headers: list[tuple[str, str]] = field(default_factory=list)
    body: PostData | None = None


@dataclass
class TransportResponse:
    """A raw HTTP response as seen by the agent.

    Attributes:
        status_code: HTTP status code.
        status_message: HTTP reason phrase.
        headers: Response headers. Lookups through :meth:`header` ignore case.
        body: Response body, or None when the response carried none.
    """

    status_code: int
    status_message: str = ""
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes | None = None

    @property
    def is_successful(self) -> bool:
        return 200 <= self.status_code < 300

    def header(self, name: str) -> str | None:
        """Return a header value, matching the name case-insensitively."""
        value = self.headers.get(name)
        if value is not None:
            return value
        lower = name.lower()
        for header_name, header_value in self.headers.items():
            if header_name.lower() == lower:
                return header_value
        return None

    def body_text(self) -> str:
        if self.body is None:
            return ""
        return self.body.decode("utf-8", errors="replace")


class Transport(Protocol):
    """Protocol for the HTTP collaborator the agent sends requests through.

    A "successful" response is one in the 2xx range. Network failures are
    raised as :class:`~s3agent.errors.TransportError`.
    """

    async def get(self, url: str, options: RequestOptions) -> TransportResponse:
        ...

    async def put(self, url: str, options: RequestOptions) -> TransportResponse:
        ...

    async def head(self, url: str, options: RequestOptions) -> TransportResponse:
        ...

    async def delete(self, url: str, options: RequestOptions) -> TransportResponse:
        ...


async def _iter_body(body: PostData) -> AsyncIterator[bytes]:
    """Yield a request body in fixed-size chunks.

    Stream reads run in a worker thread so a slow file does not block the
    event loop.
    """
    content = body.content
    if isinstance(content, (bytes, bytearray)):
        for start in range(0, len(content), _CHUNK_SIZE):
            yield bytes(content[start : start + _CHUNK_SIZE])
        return
    while True:
        chunk = await asyncio.to_thread(content.read, _CHUNK_SIZE)
        if not chunk:
            break
        yield chunk


class HttpxTransport:
    """Transport backed by ``httpx.AsyncClient``.

    Request headers are sent exactly as given, in order. Request bodies are
    streamed, so the caller's declared Content-Length is what goes on the
    wire.

    Attributes:
        timeout: Per-request timeout in seconds.
        verify_tls: Whether to verify server certificates.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        verify_tls: bool = True,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            timeout: Per-request timeout in seconds.
            verify_tls: Whether to verify server certificates.
            client: An existing client to use instead of creating one. A
                supplied client is not closed by :meth:`close`.
        """
        self.timeout = timeout
        self.verify_tls = verify_tls
        self._owns_client = client is None
        if client is None:
            client = httpx.AsyncClient(timeout=timeout, verify=verify_tls)
        self._client = client

    async def close(self) -> None:
        """Close the underlying client if this transport created it."""
        if self._owns_client:
            await self._client.aclose()

    async def get(self, url: str, options: RequestOptions) -> TransportResponse:
        return await self._send("GET", url, options)

    async def put(self, url: str, options: RequestOptions) -> TransportResponse:
        return await self._send("PUT", url, options)

    async def head(self, url: str, options: RequestOptions) -> TransportResponse:
        return await self._send("HEAD", url, options)

    async def delete(self, url: str, options: RequestOptions) -> TransportResponse:
        return await self._send("DELETE", url, options)

    async def _send(self, method: str, url: str, options: RequestOptions) -> TransportResponse:
        """Issue one request and read the whole response body.

        Raises:
            TransportError: If httpx fails to complete the exchange.
        """
        content = _iter_body(options.body) if options.body is not None else None
        try:
            response = await self._client.request(
                method, url, headers=options.headers, content=content
            )
        except httpx.HTTPError as e:
            logger.debug("%s %s failed: %s", method, url, e)
            raise TransportError(f"{method} {url} failed: {e}") from e

        return TransportResponse(
            status_code=response.status_code,
            status_message=response.reason_phrase,
            headers=dict(response.headers),
            body=response.content or None,
        )
