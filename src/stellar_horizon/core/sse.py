"""
Server-Sent Events framing.

Incremental parser for ``text/event-stream`` bodies. Chunks can split lines
(and multi-byte characters) anywhere; the parser buffers until a blank line
completes a frame.
"""

import codecs
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Frame:
    """
    One dispatched event.

    Attributes:
        event: Event name ("message" when the frame sets none)
        data: Data lines joined with newlines
        id: Value of the ``id`` field of this frame, if any
        retry: Reconnection time hint in milliseconds, if any
    """
    event: str = "message"
    data: str = ""
    id: Optional[str] = None
    retry: Optional[int] = None


class SseParser:
    """Feed bytes in, get complete frames out."""

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""
        self._pending_cr = False
        self._reset()

    def _reset(self) -> None:
        self._event: Optional[str] = None
        self._data: list[str] = []
        self._id: Optional[str] = None
        self._retry: Optional[int] = None

    def feed(self, chunk: bytes) -> list[Frame]:
        """Consume a chunk and return the frames it completed."""
        self._buffer += self._decoder.decode(chunk)
        frames = []
        while True:
            line, found = self._next_line()
            if not found:
                break
            frame = self._process_line(line)
            if frame is not None:
                frames.append(frame)
        return frames

    def _next_line(self) -> tuple[str, bool]:
        buffer = self._buffer
        if self._pending_cr and buffer:
            # Second half of a "\r\n" split across chunks
            if buffer[0] == "\n":
                buffer = buffer[1:]
            self._pending_cr = False
            self._buffer = buffer

        lf = buffer.find("\n")
        cr = buffer.find("\r", 0, lf if lf != -1 else len(buffer))
        if cr == -1:
            if lf == -1:
                return "", False
            self._buffer = buffer[lf + 1:]
            return buffer[:lf], True

        if cr + 1 == len(buffer):
            self._pending_cr = True
            self._buffer = ""
        else:
            skip = 2 if buffer[cr + 1] == "\n" else 1
            self._buffer = buffer[cr + skip:]
        return buffer[:cr], True

    def _process_line(self, line: str) -> Optional[Frame]:
        if not line:
            return self._dispatch()

        if line.startswith(":"):
            return None

        name, sep, value = line.partition(":")
        if sep and value.startswith(" "):
            value = value[1:]

        if name == "event":
            self._event = value
        elif name == "data":
            self._data.append(value)
        elif name == "id":
            if "\0" not in value:
                self._id = value
        elif name == "retry":
            if value.isdigit():
                self._retry = int(value)
        return None

    def _dispatch(self) -> Optional[Frame]:
        if not self._data and self._retry is None:
            self._reset()
            return None
        frame = Frame(
            event=self._event or "message",
            data="\n".join(self._data),
            id=self._id,
            retry=self._retry,
        )
        self._reset()
        return frame
