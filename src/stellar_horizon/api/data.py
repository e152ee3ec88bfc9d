"""Account data entry requests."""

from stellar_horizon.core.request import Request, RequestKind

from . import accounts


def for_account(account_id: str, key: str) -> Request:
    """Creates a request to retrieve one data entry of an account."""
    return Request(RequestKind.ACCOUNT_DATA, (accounts.API_PATH, account_id, "data", key))
