"""
Operation requests.

Every collection accepts ``include_failed`` and ``join``. Streamable:
``all``, ``for_account``, ``for_ledger``, ``for_claimable_balance`` and
``for_liquidity_pool``.
"""

from typing import Optional

from stellar_horizon.core.request import Request, RequestKind

from . import accounts, claimable_balances, ledgers, liquidity_pools
from .params import Join, with_operation_filters

API_PATH = "operations"


def single(operation_id: str, join: Optional[Join] = None) -> Request:
    """Creates a request to retrieve a single operation."""
    request = Request(RequestKind.OPERATION, (API_PATH, str(operation_id)))
    return with_operation_filters(request, join=join)


def all(include_failed: Optional[bool] = None, join: Optional[Join] = None) -> Request:
    """Creates a request to retrieve all operations."""
    request = Request(RequestKind.OPERATIONS, (API_PATH,))
    return with_operation_filters(request, include_failed, join)


def for_account(
    account_id: str,
    include_failed: Optional[bool] = None,
    join: Optional[Join] = None,
) -> Request:
    """Creates a request to retrieve the account's operations."""
    request = Request(RequestKind.OPERATIONS_FOR_ACCOUNT, (accounts.API_PATH, account_id, API_PATH))
    return with_operation_filters(request, include_failed, join)


def for_ledger(
    sequence: int,
    include_failed: Optional[bool] = None,
    join: Optional[Join] = None,
) -> Request:
    """Creates a request to retrieve a ledger's operations."""
    request = Request(RequestKind.OPERATIONS_FOR_LEDGER, (ledgers.API_PATH, str(sequence), API_PATH))
    return with_operation_filters(request, include_failed, join)


def for_transaction(
    tx_hash: str,
    include_failed: Optional[bool] = None,
    join: Optional[Join] = None,
) -> Request:
    """Creates a request to retrieve a transaction's operations."""
    request = Request(RequestKind.OPERATIONS_FOR_TRANSACTION, ("transactions", tx_hash, API_PATH))
    return with_operation_filters(request, include_failed, join)


def for_claimable_balance(
    balance_id: str,
    include_failed: Optional[bool] = None,
    join: Optional[Join] = None,
) -> Request:
    """Creates a request to retrieve the operations related to a claimable balance."""
    request = Request(
        RequestKind.OPERATIONS_FOR_CLAIMABLE_BALANCE,
        (claimable_balances.API_PATH, balance_id, API_PATH),
    )
    return with_operation_filters(request, include_failed, join)


def for_liquidity_pool(
    pool_id: str,
    include_failed: Optional[bool] = None,
    join: Optional[Join] = None,
) -> Request:
    """Creates a request to retrieve the operations related to a liquidity pool."""
    request = Request(
        RequestKind.OPERATIONS_FOR_LIQUIDITY_POOL,
        (liquidity_pools.API_PATH, pool_id, API_PATH),
    )
    return with_operation_filters(request, include_failed, join)
