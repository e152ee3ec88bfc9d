"""
Reconnecting event-stream engine.

An ``EventStream`` turns a Horizon collection into an endless async sequence
of resources pushed over Server-Sent Events. It is an explicit state machine:

    CONNECTING -> STREAMING -> BACKOFF -> CONNECTING -> ...
                                    \\-> TERMINATED (consumer closed the stream)

- CONNECTING opens the connection, sending the last seen paging token in the
  resume header so Horizon continues right after it.
- STREAMING decodes ``message`` frames, remembers each resource's paging
  token and yields the resource. Keep-alive frames are ignored. A frame that
  cannot be decoded is skipped and reported, never fatal.
- BACKOFF waits ``initial_delay * 2**n`` (capped) before reconnecting. Any
  error, including 429 and 5xx, ends up here. Delivering an event resets n.
- TERMINATED is entered when the consumer calls ``aclose()`` (from any task),
  leaves the ``async with`` block, or cancels the task iterating the stream.
  It is never left: a pending connect, frame read or backoff wait is
  cancelled and no reconnection follows.

State is owned by one EventStream instance and never shared.
"""

import asyncio
import json
import logging
import random
import re
from collections.abc import AsyncGenerator
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generic, Optional, TypeVar
from urllib.parse import urlsplit

from .clock import SystemTimeProvider, TimeProvider
from .config import BackoffConfig, ClientConfig
from .decoder import body_prefix, decode_record, raise_for_status
from .errors import DecodeError, ServiceError, TransportError
from .request import Request
from .resource import cursor_of
from .sse import Frame
from .telemetry import TelemetryAction, TelemetryRecorder, create_event, relevant_headers
from .transport import Transport

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StreamPhase(Enum):
    """Event stream states."""
    CONNECTING = "connecting"
    STREAMING = "streaming"
    BACKOFF = "backoff"
    TERMINATED = "terminated"


@dataclass
class StreamState:
    """
    Mutable state of one running stream.

    Attributes:
        last_cursor: Paging token of the last delivered resource
        retry_count: Consecutive connections that ended without delivering
        backoff_until: Time at which the current backoff ends
        phase: Current state machine phase
        connection_attempts: Connections opened or attempted so far
        server_retry_ms: Last ``retry:`` hint sent by the service
    """
    last_cursor: Optional[str] = None
    retry_count: int = 0
    backoff_until: float = 0.0
    phase: StreamPhase = StreamPhase.CONNECTING
    connection_attempts: int = 0
    server_retry_ms: Optional[int] = None


@dataclass(frozen=True)
class StreamWarning:
    """A frame that was skipped because it could not be decoded."""
    error: DecodeError
    frame: Frame
    last_cursor: Optional[str]


WarningHandler = Callable[[StreamWarning], None]


def backoff_delay(
    attempt: int,
    config: BackoffConfig,
    rng: Callable[[], float] = random.random,
) -> float:
    """
    Calculate exponential backoff with optional jitter.

    Args:
        attempt: Retry attempt number (0-based)
        config: Backoff policy
        rng: Source of uniform [0, 1) values for the jitter

    Returns:
        Seconds to wait
    """
    backoff = min(config.initial_delay * (2 ** attempt), config.max_delay)

    if config.jitter:
        # Add +/-25% jitter
        backoff *= 0.75 + rng() * 0.5

    return backoff


_ORDERED_CURSOR = re.compile(r"^([0-9]+)(?:-([0-9]+))?$")


def cursor_key(cursor: str) -> Optional[tuple[int, ...]]:
    """
    Sort key for a Horizon paging token.

    Paging tokens are decimal integers; order book frames use ``<int>-<int>``.
    Returns None for anything else, which can then only be compared for
    equality.
    """
    match = _ORDERED_CURSOR.match(cursor)
    if match is None:
        return None
    return tuple(int(part) for part in match.groups() if part is not None)


def is_replay(cursor: str, last_cursor: Optional[str]) -> bool:
    """
    True when ``cursor`` was already delivered given ``last_cursor``.

    Ordered tokens of the same shape are replays when not greater than the
    last one. Other tokens are replays only when equal to it.
    """
    if last_cursor is None:
        return False
    if cursor == last_cursor:
        return True
    key, last_key = cursor_key(cursor), cursor_key(last_cursor)
    if key is None or last_key is None or len(key) != len(last_key):
        return False
    return key <= last_key


class EventStream(Generic[T]):
    """
    Async iterator over resources pushed by Horizon.

    Use it as ``async for resource in stream`` and close it with
    ``await stream.aclose()``, or wrap it in ``async with``.

    Args:
        transport: Transport used to open connections
        request: Streamable request
        config: Client configuration (base URL, header names, backoff)
        headers: Default headers sent on every connection
        time_provider: Clock used for backoff waits
        recorder: Telemetry sink
        on_warning: Called with a StreamWarning for every skipped frame
    """

    def __init__(
        self,
        transport: Transport,
        request: Request,
        config: ClientConfig,
        headers: Optional[dict[str, str]] = None,
        time_provider: Optional[TimeProvider] = None,
        recorder: Optional[TelemetryRecorder] = None,
        on_warning: Optional[WarningHandler] = None,
    ):
        self._transport = transport
        self._request = request
        self._config = config
        self._headers = dict(headers or {})
        self._time = time_provider or SystemTimeProvider()
        self._recorder = recorder or TelemetryRecorder()
        self._on_warning = on_warning
        self._iterator: Optional[AsyncGenerator[T, None]] = None
        self._step: Optional["asyncio.Future[T]"] = None
        self._closed = asyncio.Event()
        self._host = urlsplit(config.base_url).netloc
        self.state = StreamState()

    @property
    def request(self) -> Request:
        return self._request

    @property
    def phase(self) -> StreamPhase:
        return self.state.phase

    @property
    def last_cursor(self) -> Optional[str]:
        return self.state.last_cursor

    def __aiter__(self) -> "EventStream[T]":
        return self

    async def __anext__(self) -> T:
        if self.state.phase is StreamPhase.TERMINATED:
            raise StopAsyncIteration
        if self._iterator is None:
            self._iterator = self._run()

        # Each step runs as its own task so aclose() from another task can
        # interrupt a pending connect, frame read or backoff wait.
        step = asyncio.ensure_future(self._next_item())
        self._step = step
        closed = asyncio.ensure_future(self._closed.wait())
        try:
            await asyncio.wait({step, closed}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            self._terminate()
            await self._cancel_step()
            raise
        finally:
            closed.cancel()

        if not step.done():
            await self._cancel_step()
        if step.cancelled():
            raise StopAsyncIteration
        return step.result()

    async def _next_item(self) -> T:
        return await self._iterator.__anext__()

    async def _cancel_step(self) -> None:
        step = self._step
        if step is not None and not step.done():
            step.cancel()
            await asyncio.wait({step})

    def _terminate(self) -> bool:
        """Enter TERMINATED. Returns False if the stream was already closed."""
        if self._closed.is_set():
            return False
        self.state.phase = StreamPhase.TERMINATED
        self._closed.set()
        self._record(TelemetryAction.STREAM_CLOSED)
        logger.debug(f"Stream of {self._request.kind.value} closed at cursor {self.state.last_cursor}")
        return True

    async def aclose(self) -> None:
        """
        Close the connection and stop reconnecting.

        Safe to call from any task, including while another task is waiting
        on the stream; that task's iteration then ends.
        """
        if not self._terminate():
            return
        if self._step is not None and not self._step.done():
            await self._cancel_step()
        elif self._iterator is not None:
            await self._iterator.aclose()

    async def __aenter__(self) -> "EventStream[T]":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    def _connection_headers(self) -> dict[str, str]:
        headers = dict(self._headers)
        headers["Accept"] = "text/event-stream"
        headers["Cache-Control"] = "no-cache"
        if self.state.last_cursor is not None:
            headers[self._config.headers.resume] = self.state.last_cursor
        return headers

    async def _run(self) -> AsyncGenerator[T, None]:
        state = self.state
        url = self._request.url(self._config.base_url)
        try:
            while not self._closed.is_set():
                state.phase = StreamPhase.CONNECTING
                state.connection_attempts += 1
                error: Optional[ServiceError] = None
                try:
                    async with self._transport.open_stream(url, self._connection_headers()) as connection:
                        if not 200 <= connection.status < 300:
                            body = await connection.read_body()
                            raise_for_status(connection.status, connection.headers, body, self._config.headers)
                        if self._closed.is_set():
                            return

                        state.phase = StreamPhase.STREAMING
                        self._record(
                            TelemetryAction.STREAM_CONNECT,
                            status=connection.status,
                            headers_seen=self._quota_headers(connection.headers),
                        )
                        logger.info(
                            f"Streaming {self._request.kind.value} from {url} "
                            f"(resume={state.last_cursor}, attempt={state.connection_attempts})"
                        )
                        async for frame in connection.frames():
                            if self._closed.is_set():
                                return
                            resource = self._handle_frame(frame)
                            if resource is not None:
                                yield resource
                except ServiceError as e:
                    error = e

                if self._closed.is_set():
                    return
                await self._backoff(error)
        finally:
            state.phase = StreamPhase.TERMINATED

    async def _backoff(self, error: Optional[ServiceError]) -> None:
        state = self.state
        state.phase = StreamPhase.BACKOFF
        backoff = self._config.backoff

        if backoff.max_reconnects is not None and state.retry_count >= backoff.max_reconnects:
            logger.error(
                f"Giving up on {self._request.kind.value} stream after "
                f"{state.retry_count} failed reconnects"
            )
            if error is None:
                error = TransportError("Stream closed by the service")
            raise error

        delay = backoff_delay(state.retry_count, backoff)
        state.retry_count += 1
        state.backoff_until = self._time.now() + delay

        if error is None:
            logger.info(f"Stream closed by the service, reconnecting in {delay:.2f}s")
        else:
            logger.warning(f"Stream failed ({error.kind.value}: {error}), reconnecting in {delay:.2f}s")

        self._record(
            TelemetryAction.STREAM_BACKOFF,
            status=error.status if error is not None else None,
            sleep_s=delay,
            attempt=state.retry_count,
            detail=str(error) if error is not None else "closed by service",
        )
        await self._time.sleep(delay)

    def _handle_frame(self, frame: Frame) -> Optional[T]:
        """Decode one frame. Returns None for frames that deliver nothing."""
        state = self.state
        if frame.retry is not None:
            state.server_retry_ms = frame.retry
            logger.debug(f"Service retry hint: {frame.retry}ms")

        if frame.event != "message" or not frame.data.strip():
            return None

        try:
            data = json.loads(frame.data)
        except ValueError as e:
            self._skip(frame, DecodeError(f"Invalid JSON frame: {e}", body=body_prefix(frame.data.encode())))
            return None

        # Horizon's "hello" / "byebye" pings
        if isinstance(data, str):
            return None

        try:
            resource = decode_record(data, self._request.resource)
        except DecodeError as e:
            self._skip(frame, e)
            return None

        cursor = cursor_of(resource) or frame.id
        if cursor is not None and is_replay(cursor, state.last_cursor):
            logger.debug(f"Dropping replayed event {cursor} (last delivered {state.last_cursor})")
            return None

        if cursor is not None:
            state.last_cursor = cursor
        state.retry_count = 0
        return resource

    def _skip(self, frame: Frame, error: DecodeError) -> None:
        logger.warning(f"Skipping malformed {self._request.kind.value} frame (id={frame.id}): {error}")
        self._record(TelemetryAction.FRAME_SKIPPED, detail=str(error))
        if self._on_warning is not None:
            self._on_warning(StreamWarning(error=error, frame=frame, last_cursor=self.state.last_cursor))

    def _quota_headers(self, headers: dict[str, str]) -> dict[str, str]:
        names = self._config.headers
        return relevant_headers(headers, [names.limit, names.remaining, names.reset])

    def _record(self, action: TelemetryAction, **fields: Any) -> None:
        event = create_event(
            host=self._host,
            endpoint=urlsplit(self._request.url(self._config.base_url)).path,
            action=action,
            cursor=self.state.last_cursor,
            **fields,
        )
        self._recorder.record(event)
