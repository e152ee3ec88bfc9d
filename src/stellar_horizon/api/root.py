"""Horizon root document."""

from stellar_horizon.core.request import Request, RequestKind


def root() -> Request:
    """Creates a request to retrieve the Horizon root (versions, latest ledgers)."""
    return Request(RequestKind.ROOT)
