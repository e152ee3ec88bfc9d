"""
Transport capability.

The client only needs two things from HTTP: send a request and get back
status, headers and body; and open a long-lived connection whose body is an
event stream. ``Transport`` is that contract. ``AiohttpTransport`` implements
it on top of an ``aiohttp.ClientSession``; tests substitute scripted
transports.

Connection, DNS, TLS and timeout failures surface as ``TransportError``.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncContextManager, Optional

import aiohttp

from .errors import TransportError
from .sse import Frame, SseParser

logger = logging.getLogger(__name__)


@dataclass
class TransportResponse:
    """Raw HTTP response."""
    status: int
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""


class StreamConnection(ABC):
    """An open event-stream connection."""

    status: int
    headers: dict[str, str]

    @abstractmethod
    async def read_body(self) -> bytes:
        """Read the full body; used when the open failed with an error status."""
        pass

    @abstractmethod
    def frames(self) -> AsyncIterator[Frame]:
        """Iterate over frames until the service closes the connection."""
        pass


class Transport(ABC):
    """HTTP capability consumed by the client."""

    @abstractmethod
    async def send(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: Optional[bytes] = None,
    ) -> TransportResponse:
        """
        Send one request.

        Raises:
            TransportError: If no response was received
        """
        pass

    @abstractmethod
    def open_stream(self, url: str, headers: dict[str, str]) -> AsyncContextManager[StreamConnection]:
        """
        Open an event-stream connection.

        The returned context manager closes the connection on exit.

        Raises:
            TransportError: If the connection could not be opened
        """
        pass

    async def close(self) -> None:
        """Release pooled connections."""
        pass


class AiohttpStreamConnection(StreamConnection):
    """Event stream carried by an aiohttp response."""

    def __init__(self, response: aiohttp.ClientResponse):
        self._response = response
        self.status = response.status
        self.headers = dict(response.headers)

    async def read_body(self) -> bytes:
        try:
            return await self._response.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(f"Failed to read error body: {e}") from e

    async def frames(self) -> AsyncIterator[Frame]:
        parser = SseParser()
        try:
            async for chunk in self._response.content.iter_any():
                for frame in parser.feed(chunk):
                    yield frame
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(f"Stream connection lost: {e!r}") from e


class AiohttpTransport(Transport):
    """
    Transport backed by ``aiohttp``.

    Args:
        connect_timeout: Seconds to wait for a connection
        read_timeout: Seconds to wait between two reads of the socket
        session: Optional externally managed session; when given, ``close``
            leaves it open
    """

    def __init__(
        self,
        connect_timeout: float = 60.0,
        read_timeout: float = 60.0,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self._timeout = aiohttp.ClientTimeout(
            total=None,
            sock_connect=connect_timeout,
            sock_read=read_timeout,
        )
        self._session = session
        self._owns_session = session is None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
            self._owns_session = True
        return self._session

    async def send(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: Optional[bytes] = None,
    ) -> TransportResponse:
        session = self._get_session()
        try:
            async with session.request(method, url, headers=headers, data=body) as response:
                payload = await response.read()
                return TransportResponse(
                    status=response.status,
                    headers=dict(response.headers),
                    body=payload,
                )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(f"{method} {url} failed: {e!r}") from e

    @asynccontextmanager
    async def open_stream(self, url: str, headers: dict[str, str]) -> AsyncIterator[StreamConnection]:
        session = self._get_session()
        try:
            response = await session.get(url, headers=headers)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(f"GET {url} failed: {e!r}") from e

        try:
            yield AiohttpStreamConnection(response)
        finally:
            # close(), not release(): an unfinished stream must not go back to the pool
            response.close()

    async def close(self) -> None:
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None
