"""
Unit tests for the pagination engine.

Tests verify:
- Laziness: nothing is fetched before the first page is requested
- Next links are followed; an empty page does not end the sequence
- A paginator callback or breaking out stops fetching
- A failed fetch is raised and ends the sequence
- Previous links lead back to the same records
"""
import pytest

from stellar_horizon import api
from stellar_horizon.core.decoder import decode
from stellar_horizon.core.errors import ServerError
from stellar_horizon.core.pagination import next_request, paginate

from .scripted import page, record

BASE = "https://horizon.example"


class FakeHorizon:
    """Decodes queued responses and remembers the requests it served."""

    def __init__(self, responses):
        self.responses = list(responses)
        self.requests = []

    async def fetch(self, request):
        self.requests.append(request)
        raw = self.responses.pop(0)
        if isinstance(raw, Exception):
            raise raw
        return decode(raw.status, raw.headers, raw.body, request)


def next_href(cursor, limit=2):
    return f"{BASE}/ledgers?cursor={cursor}&limit={limit}&order=asc"


class TestPaginate:
    async def test_lazy_until_first_page(self):
        horizon = FakeHorizon([page([record(1)])])

        pages = paginate(horizon.fetch, api.ledgers.all())

        assert horizon.requests == []
        first = await pages.__anext__()
        assert [r.id for r in first] == ["1"]
        assert len(horizon.requests) == 1
        await pages.aclose()

    async def test_follows_next_links(self):
        horizon = FakeHorizon([
            page([record(1), record(2)], next_href=next_href(2)),
            page([record(3), record(4)], next_href=next_href(4)),
        ])

        seen = []
        async for current in paginate(horizon.fetch, api.ledgers.all().with_limit(2)):
            seen.extend(r.id for r in current)
            if len(seen) == 4:
                break

        assert seen == ["1", "2", "3", "4"]
        assert [r.cursor for r in horizon.requests] == [None, "2"]
        assert horizon.requests[1].limit == 2

    async def test_empty_page_does_not_terminate(self):
        horizon = FakeHorizon([
            page([record(1)], next_href=next_href(1)),
            page([], next_href=next_href(1)),
            page([record(2)], next_href=next_href(2)),
        ])

        sizes = []
        async for current in paginate(horizon.fetch, api.ledgers.all()):
            sizes.append(len(current))
            if len(sizes) == 3:
                break

        assert sizes == [1, 0, 1]
        assert [r.cursor for r in horizon.requests] == [None, "1", "1"]

    async def test_paginator_stops(self):
        horizon = FakeHorizon([
            page([record(1), record(2)], next_href=next_href(2)),
            page([record(3), record(4)], next_href=next_href(4)),
            page([record(5)], next_href=next_href(5)),
        ])
        calls = []

        def stop_after_three(current, total):
            calls.append(total)
            return total < 3

        pages = [p async for p in paginate(horizon.fetch, api.ledgers.all(), stop_after_three)]

        assert len(pages) == 2
        assert calls == [2, 4]
        assert len(horizon.requests) == 2

    async def test_error_terminates(self):
        horizon = FakeHorizon([
            page([record(1)], next_href=next_href(1)),
            ServerError("boom", status=503),
        ])
        pages = paginate(horizon.fetch, api.ledgers.all())

        first = await pages.__anext__()
        assert first.records[0].id == "1"

        with pytest.raises(ServerError):
            await pages.__anext__()
        with pytest.raises(StopAsyncIteration):
            await pages.__anext__()

    async def test_failed_first_fetch(self):
        horizon = FakeHorizon([ServerError("down", status=500)])

        with pytest.raises(ServerError):
            async for _ in paginate(horizon.fetch, api.ledgers.all()):
                pass

    def test_rejects_single_resource(self):
        with pytest.raises(ValueError):
            paginate(FakeHorizon([]).fetch, api.ledgers.single(1))

    def test_rejects_unpaged_collection(self):
        request = api.aggregations.paths_strict_send("native", "1", destination_account="GABC")
        with pytest.raises(ValueError):
            paginate(FakeHorizon([]).fetch, request)

    async def test_prev_link_round_trip(self):
        horizon = FakeHorizon([
            page([record(1), record(2)], next_href=next_href(2)),
            page(
                [record(3), record(4)],
                next_href=next_href(4),
                prev_href=f"{BASE}/ledgers?cursor=3&limit=2&order=desc",
            ),
            page([record(2), record(1)]),
        ])
        pages = paginate(horizon.fetch, api.ledgers.all().with_limit(2))

        first = await pages.__anext__()
        second = await pages.__anext__()
        await pages.aclose()
        back = (await horizon.fetch(second.previous_request())).value

        assert sorted(r.id for r in back) == sorted(r.id for r in first)
        assert horizon.requests[-1].cursor == "3"
        assert horizon.requests[-1].order.value == "desc"


class TestNextRequest:
    async def test_falls_back_to_last_cursor(self):
        horizon = FakeHorizon([page([record(7), record(8)])])
        response = await horizon.fetch(api.ledgers.all())

        assert next_request(response.value).cursor == "8"

    async def test_empty_page_without_link_repeats(self):
        request = api.ledgers.all().with_cursor("5")
        horizon = FakeHorizon([page([])])
        response = await horizon.fetch(request)

        assert next_request(response.value) == request
