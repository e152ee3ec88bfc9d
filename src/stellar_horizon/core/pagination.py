"""
Pagination engine.

``paginate`` walks a collection forward by following each page's ``next``
link. The sequence is lazy (nothing is fetched until the first ``__anext__``)
and has no natural end: Horizon collections keep growing, so an empty page
only means "nothing new yet". The consumer decides when to stop, either by
breaking out of the loop or through a ``Paginator`` callback.
"""

import logging
from collections.abc import AsyncIterator, Awaitable
from typing import Callable, Optional

from .decoder import Response
from .page import Page
from .request import Request
from .resource import cursor_of

logger = logging.getLogger(__name__)

# Type alias for paginator callback
# Takes (current_page, total_fetched) and returns whether to continue
Paginator = Callable[[Page, int], bool]

Fetch = Callable[[Request], Awaitable[Response]]


def next_request(page: Page) -> Request:
    """
    Request for the page following ``page``.

    Uses the ``next`` link; if the service sent none, continues after the
    last record's paging token, or repeats the same request for an empty
    page.
    """
    request = page.next_request()
    if request is not None:
        return request
    if page.records:
        cursor = cursor_of(page.records[-1])
        if cursor is not None:
            return page.request.with_cursor(cursor)
    return page.request


def paginate(
    fetch: Fetch,
    initial: Request,
    paginator: Optional[Paginator] = None,
) -> AsyncIterator[Page]:
    """
    Iterate through pages of a collection.

    Args:
        fetch: Coroutine that performs and decodes one request
        initial: Request for the first page
        paginator: Optional callback to control pagination.
                   Called with (current_page, total_records_fetched).
                   Return False to stop pagination.
                   If None, the sequence never ends on its own.

    Returns:
        Async iterator of Page objects. A fetch failure is raised from the
        iterator and ends it; pages already yielded are unaffected.

    Raises:
        ValueError: If the request is not a paged collection
    """
    if not initial.pageable:
        raise ValueError(f"{initial.kind.value} is not a paged collection")
    return _pages(fetch, initial, paginator)


async def _pages(
    fetch: Fetch,
    request: Request,
    paginator: Optional[Paginator],
) -> AsyncIterator[Page]:
    total = 0
    while True:
        response = await fetch(request)
        page = response.value
        total += len(page.records)
        logger.debug(
            f"Fetched page of {len(page.records)} {request.kind.value} records "
            f"(cursor={request.cursor}, total={total})"
        )
        yield page

        if paginator is not None and not paginator(page, total):
            return

        request = next_request(page)
