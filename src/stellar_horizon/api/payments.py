"""Payment requests. Streamable: ``all`` and ``for_account``."""

from typing import Optional

from stellar_horizon.core.request import Request, RequestKind

from . import accounts, ledgers
from .params import Join, with_operation_filters

API_PATH = "payments"


def all(include_failed: Optional[bool] = None, join: Optional[Join] = None) -> Request:
    """Creates a request to retrieve all payments."""
    request = Request(RequestKind.PAYMENTS, (API_PATH,))
    return with_operation_filters(request, include_failed, join)


def for_account(
    account_id: str,
    include_failed: Optional[bool] = None,
    join: Optional[Join] = None,
) -> Request:
    """Creates a request to retrieve an account's payments."""
    request = Request(RequestKind.PAYMENTS_FOR_ACCOUNT, (accounts.API_PATH, account_id, API_PATH))
    return with_operation_filters(request, include_failed, join)


def for_ledger(
    sequence: int,
    include_failed: Optional[bool] = None,
    join: Optional[Join] = None,
) -> Request:
    """Creates a request to retrieve a ledger's payments."""
    request = Request(RequestKind.PAYMENTS_FOR_LEDGER, (ledgers.API_PATH, str(sequence), API_PATH))
    return with_operation_filters(request, include_failed, join)


def for_transaction(
    tx_hash: str,
    include_failed: Optional[bool] = None,
    join: Optional[Join] = None,
) -> Request:
    """Creates a request to retrieve a transaction's payments."""
    request = Request(RequestKind.PAYMENTS_FOR_TRANSACTION, ("transactions", tx_hash, API_PATH))
    return with_operation_filters(request, include_failed, join)
