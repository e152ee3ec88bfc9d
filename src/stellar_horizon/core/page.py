"""
Page envelope.

Horizon collections answer with a HAL document::

    {"_links": {"self": {...}, "next": {...}, "prev": {...}},
     "_embedded": {"records": [...]}}

``Page`` keeps the decoded records together with the three navigation links.
Links stay valid on empty pages, so an empty page is an ordinary position in
the collection, not its end.
"""

from dataclasses import dataclass, field
from typing import Any, Generic, Optional, TypeVar

from .rate_limit import RateLimit
from .request import Request

T = TypeVar("T")


@dataclass(frozen=True)
class Link:
    """Navigation link."""
    href: str
    templated: bool = False

    @classmethod
    def from_dict(cls, data: Any) -> Optional["Link"]:
        if not isinstance(data, dict) or "href" not in data:
            return None
        return cls(href=str(data["href"]), templated=bool(data.get("templated", False)))


@dataclass(frozen=True)
class PageLinks:
    self_: Optional[Link] = None
    next: Optional[Link] = None
    prev: Optional[Link] = None


@dataclass
class Page(Generic[T]):
    """
    A single page of records.

    Attributes:
        records: Decoded records, in service order
        links: Navigation links
        request: Request that produced this page
        rate_limit: Quota snapshot of the response that carried the page
    """
    records: list[T]
    links: PageLinks
    request: Request
    rate_limit: RateLimit = field(default=RateLimit.UNKNOWN)

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self):
        return iter(self.records)

    @property
    def is_empty(self) -> bool:
        return not self.records

    def next_request(self) -> Optional[Request]:
        """Request for the page after this one, None if the service sent no link."""
        if self.links.next is None:
            return None
        return self.request.follow(self.links.next.href)

    def previous_request(self) -> Optional[Request]:
        """Request for the page before this one, None if the service sent no link."""
        if self.links.prev is None:
            return None
        return self.request.follow(self.links.prev.href)

    def self_request(self) -> Optional[Request]:
        """Request that reproduces this page, None if the service sent no link."""
        if self.links.self_ is None:
            return None
        return self.request.follow(self.links.self_.href)
