"""Unit tests for the Server-Sent Events parser."""
from stellar_horizon.core.sse import Frame, SseParser


def feed_all(chunks):
    parser = SseParser()
    frames = []
    for chunk in chunks:
        frames.extend(parser.feed(chunk))
    return frames


class TestSseParser:
    def test_single_frame(self):
        frames = feed_all([b'id: 101\ndata: {"a": 1}\n\n'])

        assert frames == [Frame(event="message", data='{"a": 1}', id="101")]

    def test_named_event(self):
        frames = feed_all([b'event: open\ndata: "hello"\n\n'])

        assert frames[0].event == "open"
        assert frames[0].data == '"hello"'

    def test_multiline_data(self):
        frames = feed_all([b"data: a\ndata: b\n\n"])

        assert frames[0].data == "a\nb"

    def test_chunks_split_anywhere(self):
        body = b'id: 7\r\ndata: {"k": "caf\xc3\xa9"}\r\n\r\n'
        chunks = [body[i:i + 1] for i in range(len(body))]

        frames = feed_all(chunks)

        assert frames == [Frame(data='{"k": "café"}', id="7")]

    def test_cr_line_endings(self):
        frames = feed_all([b"data: x\r\rdata: y\r\r"])

        assert [f.data for f in frames] == ["x", "y"]

    def test_comments_ignored(self):
        frames = feed_all([b": keep-alive\n\n", b"data: z\n\n"])

        assert [f.data for f in frames] == ["z"]

    def test_retry_only_frame(self):
        frames = feed_all([b"retry: 1000\n\n"])

        assert frames == [Frame(data="", retry=1000)]

    def test_invalid_retry_ignored(self):
        frames = feed_all([b"retry: soon\ndata: x\n\n"])

        assert frames[0].retry is None

    def test_id_does_not_leak_to_next_frame(self):
        frames = feed_all([b"id: 1\ndata: a\n\ndata: b\n\n"])

        assert frames[0].id == "1"
        assert frames[1].id is None

    def test_field_without_space(self):
        frames = feed_all([b"data:tight\n\n"])

        assert frames[0].data == "tight"

    def test_incomplete_frame_waits(self):
        parser = SseParser()

        assert parser.feed(b"data: partial\n") == []
        assert parser.feed(b"\n") == [Frame(data="partial")]
