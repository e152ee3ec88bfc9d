"""
Response envelope decoder.

Turns a transport response (status, headers, body) into either a decoded
resource/page or a ``ServiceError``. The quota snapshot is read from the
headers first so that it is attached uniformly, on success and on every
error path.
"""

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Generic, Optional, TypeVar

from .config import HeaderConfig
from .errors import (
    BadRequestError,
    DecodeError,
    NotFoundError,
    RateLimitedError,
    ServerError,
    ServiceError,
)
from .page import Link, Page, PageLinks
from .rate_limit import RateLimit, parse_retry_after, read_rate_limit
from .request import Request, Shape

logger = logging.getLogger(__name__)

T = TypeVar("T")

BODY_PREFIX_LENGTH = 256


@dataclass
class Response(Generic[T]):
    """
    A decoded successful response.

    Attributes:
        value: The resource or Page
        status: HTTP status code
        headers: Response headers
        rate_limit: Quota snapshot
    """
    value: T
    status: int = 200
    headers: dict[str, str] = field(default_factory=dict)
    rate_limit: RateLimit = field(default=RateLimit.UNKNOWN)


@dataclass(frozen=True)
class Problem:
    """RFC 7807 problem document as returned by Horizon."""
    type: Optional[str] = None
    title: Optional[str] = None
    status: Optional[int] = None
    detail: Optional[str] = None
    extras: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def parse(cls, body: bytes) -> Optional["Problem"]:
        """Parse a problem body, None if it is not one."""
        try:
            data = json.loads(body)
        except (ValueError, UnicodeDecodeError):
            return None
        if not isinstance(data, dict) or not ("title" in data or "type" in data):
            return None
        extras = data.get("extras")
        status = data.get("status")
        return cls(
            type=data.get("type"),
            title=data.get("title"),
            status=status if isinstance(status, int) else None,
            detail=data.get("detail"),
            extras=extras if isinstance(extras, dict) else {},
        )


def body_prefix(body: bytes) -> str:
    return body[:BODY_PREFIX_LENGTH].decode("utf-8", errors="replace")


def decode_record(data: Any, resource: Any) -> Any:
    """Build one record with ``resource.from_dict``."""
    try:
        return resource.from_dict(data)
    except (TypeError, ValueError, KeyError) as e:
        raise DecodeError(
            f"Cannot decode {getattr(resource, '__name__', resource)}: {e}",
            body=json.dumps(data, default=str)[:BODY_PREFIX_LENGTH],
        ) from e


def decode_json(body: bytes) -> Any:
    try:
        return json.loads(body)
    except (ValueError, UnicodeDecodeError) as e:
        raise DecodeError(f"Invalid JSON body: {e}", body=body_prefix(body)) from e


def _decode_page(data: Any, request: Request, rate_limit: RateLimit) -> Page:
    if not isinstance(data, dict):
        raise DecodeError("Page envelope must be a JSON object")
    embedded = data.get("_embedded")
    if not isinstance(embedded, dict) or not isinstance(embedded.get("records"), list):
        raise DecodeError("Page envelope has no _embedded.records list")

    links_data = data.get("_links") or {}
    if not isinstance(links_data, dict):
        raise DecodeError("Page envelope _links must be an object")
    links = PageLinks(
        self_=Link.from_dict(links_data.get("self")),
        next=Link.from_dict(links_data.get("next")),
        prev=Link.from_dict(links_data.get("prev")),
    )
    records = [decode_record(record, request.resource) for record in embedded["records"]]
    return Page(records=records, links=links, request=request, rate_limit=rate_limit)


def raise_for_status(
    status: int,
    headers: Mapping[str, str],
    body: bytes,
    names: Optional[HeaderConfig] = None,
) -> RateLimit:
    """
    Raise the ServiceError matching a non-2xx response.

    Returns:
        The quota snapshot when the status is a success
    """
    names = names or HeaderConfig()
    rate_limit = read_rate_limit(headers, names)
    if 200 <= status < 300:
        return rate_limit

    problem = Problem.parse(body)
    details: dict[str, Any] = {
        "status": status,
        "rate_limit": rate_limit,
        "body": body_prefix(body),
    }
    if problem is not None:
        details.update(
            problem_type=problem.type,
            title=problem.title,
            detail=problem.detail,
            extras=problem.extras,
        )
    title = problem.title if problem and problem.title else f"HTTP {status}"

    if status == 404:
        raise NotFoundError(f"Resource not found: {title}", **details)

    if status == 429:
        retry_after = parse_retry_after(headers, names.retry_after)
        logger.warning(
            f"Rate limited by Horizon (remaining={rate_limit.remaining}, "
            f"reset={rate_limit.reset}, retry_after={retry_after})"
        )
        raise RateLimitedError(f"Rate limited: {title}", retry_after=retry_after, **details)

    if status >= 500:
        raise ServerError(f"Horizon server error: {title}", **details)

    if status in (400, 422):
        raise BadRequestError(f"Bad request: {title}", **details)

    # 401/403/405/406/410 and friends: the caller has to change something too
    raise ServiceError(f"Unexpected status {status}: {title}", kind=BadRequestError.kind, **details)


def decode(
    status: int,
    headers: Mapping[str, str],
    body: bytes,
    request: Request,
    names: Optional[HeaderConfig] = None,
) -> Response:
    """
    Decode a transport response for ``request``.

    Args:
        status: HTTP status code
        headers: Response headers
        body: Raw response body
        request: The request; its shape selects single-resource or page decoding
        names: Rate-limit header names

    Returns:
        Response wrapping the resource or Page

    Raises:
        ServiceError: Matching subclass for the failure
    """
    rate_limit = raise_for_status(status, headers, body, names)

    try:
        data = decode_json(body)
        if request.shape is Shape.PAGE:
            value = _decode_page(data, request, rate_limit)
        else:
            value = decode_record(data, request.resource)
    except DecodeError as e:
        e.status = status
        e.rate_limit = rate_limit
        if not e.body:
            e.body = body_prefix(body)
        raise

    return Response(value=value, status=status, headers=dict(headers), rate_limit=rate_limit)
