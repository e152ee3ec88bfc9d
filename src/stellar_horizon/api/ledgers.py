"""Ledger requests."""

from stellar_horizon.core.request import Request, RequestKind

API_PATH = "ledgers"


def single(sequence: int) -> Request:
    """Creates a request to retrieve a single ledger."""
    return Request(RequestKind.LEDGER, (API_PATH, str(sequence)))


def all() -> Request:
    """Creates a request to retrieve all ledgers. Streamable."""
    return Request(RequestKind.LEDGERS, (API_PATH,))
