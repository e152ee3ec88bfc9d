"""
Scripted transport for unit tests.

Each ``send`` pops the next queued TransportResponse (or raises it when it is
an exception). Each ``open_stream`` pops the next ScriptedStream, which is a
status plus a list of frames or exceptions to produce. Every call is
recorded so tests can assert URLs and headers.
"""
import asyncio
import json
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from stellar_horizon.core.clock import FakeTimeProvider
from stellar_horizon.core.sse import Frame
from stellar_horizon.core.transport import StreamConnection, Transport, TransportResponse

QUOTA = {
    "X-Ratelimit-Limit": "100",
    "X-Ratelimit-Remaining": "99",
    "X-Ratelimit-Reset": "1700000000",
}


def record(token: Union[int, str], **fields: Any) -> Dict[str, Any]:
    data = {"id": str(token), "paging_token": str(token)}
    data.update(fields)
    return data


def message(data: Any, event_id: Optional[str] = None) -> Frame:
    """A ``message`` frame carrying ``data`` JSON encoded (strings verbatim)."""
    payload = data if isinstance(data, str) else json.dumps(data)
    return Frame(data=payload, id=event_id)


def page(records: List[Dict[str, Any]], next_href: Optional[str] = None, prev_href: Optional[str] = None,
         status: int = 200, headers: Optional[Dict[str, str]] = None) -> TransportResponse:
    links: Dict[str, Any] = {"self": {"href": "https://horizon.example/self"}}
    if next_href is not None:
        links["next"] = {"href": next_href}
    if prev_href is not None:
        links["prev"] = {"href": prev_href}
    body = json.dumps({"_links": links, "_embedded": {"records": records}}).encode()
    return TransportResponse(status=status, headers=dict(QUOTA if headers is None else headers), body=body)


class Gate:
    """A point in a scripted stream where the frame sequence blocks until released."""

    def __init__(self):
        self.reached = asyncio.Event()
        self.released = asyncio.Event()


class BlockingClock(FakeTimeProvider):
    """FakeTimeProvider whose sleep blocks until the waiting task is cancelled."""

    def __init__(self):
        super().__init__()
        self.sleeping = asyncio.Event()

    async def sleep(self, seconds: float) -> None:
        self.sleep_history.append(seconds)
        self.sleeping.set()
        await asyncio.Event().wait()


@dataclass
class ScriptedStream:
    status: int = 200
    items: List[Union[Frame, Exception, Gate]] = field(default_factory=list)
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""


class _Connection(StreamConnection):
    def __init__(self, script: ScriptedStream):
        self._script = script
        self.status = script.status
        self.headers = script.headers

    async def read_body(self) -> bytes:
        return self._script.body

    async def frames(self):
        for item in self._script.items:
            if isinstance(item, Exception):
                raise item
            if isinstance(item, Gate):
                item.reached.set()
                await item.released.wait()
                continue
            yield item


class ScriptedTransport(Transport):
    def __init__(self, responses=None, streams=None):
        self.responses: List[Union[TransportResponse, Exception]] = list(responses or [])
        self.streams: List[Union[ScriptedStream, Exception]] = list(streams or [])
        self.sent: List[Dict[str, Any]] = []
        self.opened: List[Dict[str, Any]] = []
        self.closed_streams = 0
        self.closed = False

    async def send(self, method, url, headers, body=None):
        self.sent.append({"method": method, "url": url, "headers": dict(headers), "body": body})
        if not self.responses:
            raise AssertionError(f"Unexpected request {method} {url}")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    @asynccontextmanager
    async def open_stream(self, url, headers):
        self.opened.append({"url": url, "headers": dict(headers)})
        if not self.streams:
            raise AssertionError(f"Unexpected stream connection to {url}")
        script = self.streams.pop(0)
        if isinstance(script, Exception):
            raise script
        try:
            yield _Connection(script)
        finally:
            self.closed_streams += 1

    async def close(self):
        self.closed = True
