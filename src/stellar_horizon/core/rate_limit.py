"""
Rate-limit header reader.

Horizon reports its request quota on every response through three headers.
This module turns them into a small immutable snapshot. Nothing here keeps
state between calls: what a caller does with a snapshot is up to the caller.
"""

import time
from collections.abc import Mapping
from dataclasses import dataclass
from email.utils import parsedate_to_datetime
from typing import ClassVar, Optional

from .config import HeaderConfig


@dataclass(frozen=True)
class RateLimit:
    """
    Quota snapshot attached to a single response.

    Attributes:
        limit: Requests allowed in the current window
        remaining: Requests left in the current window
        reset: Reset value as sent by the service (seconds)

    ``RateLimit.UNKNOWN`` (all fields None) means the response carried no
    usable quota headers, which is different from an exhausted quota.
    """

    limit: Optional[int] = None
    remaining: Optional[int] = None
    reset: Optional[int] = None

    UNKNOWN: ClassVar["RateLimit"]

    @property
    def known(self) -> bool:
        return self.limit is not None

    @property
    def exhausted(self) -> bool:
        return self.known and self.remaining == 0


RateLimit.UNKNOWN = RateLimit()


def _header(headers: Mapping[str, str], name: str) -> Optional[str]:
    value = headers.get(name)
    if value is not None:
        return value
    lowered = name.lower()
    for key, candidate in headers.items():
        if key.lower() == lowered:
            return candidate
    return None


def _parse_int(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


def read_rate_limit(
    headers: Mapping[str, str],
    names: Optional[HeaderConfig] = None,
) -> RateLimit:
    """
    Extract the quota snapshot from response headers.

    The lookup is case-insensitive. If any of the three headers is missing
    or not an integer the whole snapshot is ``RateLimit.UNKNOWN``; a
    partially populated snapshot is never returned.

    Args:
        headers: Response headers
        names: Header names to read (defaults to Horizon's)

    Returns:
        RateLimit snapshot
    """
    names = names or HeaderConfig()

    limit = _parse_int(_header(headers, names.limit))
    remaining = _parse_int(_header(headers, names.remaining))
    reset = _parse_int(_header(headers, names.reset))

    if limit is None or remaining is None or reset is None:
        return RateLimit.UNKNOWN

    return RateLimit(limit=limit, remaining=remaining, reset=reset)


def parse_retry_after(
    headers: Mapping[str, str],
    name: str = "Retry-After",
    now: Optional[float] = None,
) -> Optional[float]:
    """
    Parse a Retry-After header value.

    Args:
        headers: Response headers
        name: Header name
        now: Current epoch time, used for HTTP-date values

    Returns:
        Seconds to wait, or None if absent or unparseable
    """
    retry_after = _header(headers, name)
    if retry_after is None:
        return None

    # Try parsing as integer seconds
    try:
        return max(0.0, float(retry_after))
    except ValueError:
        pass

    # Try parsing as HTTP-date
    try:
        retry_date = parsedate_to_datetime(retry_after)
    except (ValueError, TypeError):
        return None
    if now is None:
        now = time.time()
    return max(0.0, retry_date.timestamp() - now)
