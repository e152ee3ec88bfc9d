"""
Transaction requests.

Only ``all`` is streamable. Submission is not a Request: use
``HorizonClient.submit`` with the signed envelope.
"""

from typing import Optional

from stellar_horizon.core.request import Request, RequestKind

from . import accounts, claimable_balances, ledgers, liquidity_pools

API_PATH = "transactions"


def _with_include_failed(request: Request, include_failed: Optional[bool]) -> Request:
    if include_failed is None:
        return request
    return request.with_param("include_failed", include_failed)


def single(tx_hash: str) -> Request:
    """Creates a request to retrieve a single transaction."""
    return Request(RequestKind.TRANSACTION, (API_PATH, tx_hash))


def all(include_failed: Optional[bool] = None) -> Request:
    """Creates a request to retrieve all transactions."""
    return _with_include_failed(Request(RequestKind.TRANSACTIONS, (API_PATH,)), include_failed)


def for_account(account_id: str, include_failed: Optional[bool] = None) -> Request:
    """Creates a request to retrieve an account's transactions."""
    request = Request(RequestKind.TRANSACTIONS_FOR_ACCOUNT, (accounts.API_PATH, account_id, API_PATH))
    return _with_include_failed(request, include_failed)


def for_ledger(sequence: int, include_failed: Optional[bool] = None) -> Request:
    """Creates a request to retrieve a ledger's transactions."""
    request = Request(RequestKind.TRANSACTIONS_FOR_LEDGER, (ledgers.API_PATH, str(sequence), API_PATH))
    return _with_include_failed(request, include_failed)


def for_claimable_balance(balance_id: str, include_failed: Optional[bool] = None) -> Request:
    """Creates a request to retrieve the transactions related to a claimable balance."""
    request = Request(
        RequestKind.TRANSACTIONS_FOR_CLAIMABLE_BALANCE,
        (claimable_balances.API_PATH, balance_id, API_PATH),
    )
    return _with_include_failed(request, include_failed)


def for_liquidity_pool(pool_id: str, include_failed: Optional[bool] = None) -> Request:
    """Creates a request to retrieve the transactions related to a liquidity pool."""
    request = Request(
        RequestKind.TRANSACTIONS_FOR_LIQUIDITY_POOL,
        (liquidity_pools.API_PATH, pool_id, API_PATH),
    )
    return _with_include_failed(request, include_failed)
