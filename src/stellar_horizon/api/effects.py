"""
Effect requests.

Streamable: ``all``, ``for_account``, ``for_ledger``, ``for_liquidity_pool``.
"""

from stellar_horizon.core.request import Request, RequestKind

from . import accounts, ledgers, liquidity_pools

API_PATH = "effects"


def all() -> Request:
    """Creates a request to retrieve all effects."""
    return Request(RequestKind.EFFECTS, (API_PATH,))


def for_account(account_id: str) -> Request:
    """Creates a request to retrieve an account's effects."""
    return Request(RequestKind.EFFECTS_FOR_ACCOUNT, (accounts.API_PATH, account_id, API_PATH))


def for_ledger(sequence: int) -> Request:
    """Creates a request to retrieve a ledger's effects."""
    return Request(RequestKind.EFFECTS_FOR_LEDGER, (ledgers.API_PATH, str(sequence), API_PATH))


def for_transaction(tx_hash: str) -> Request:
    """Creates a request to retrieve a transaction's effects."""
    return Request(RequestKind.EFFECTS_FOR_TRANSACTION, ("transactions", tx_hash, API_PATH))


def for_operation(operation_id: str) -> Request:
    """Creates a request to retrieve an operation's effects."""
    return Request(RequestKind.EFFECTS_FOR_OPERATION, ("operations", str(operation_id), API_PATH))


def for_liquidity_pool(pool_id: str) -> Request:
    """Creates a request to retrieve a liquidity pool's effects."""
    return Request(
        RequestKind.EFFECTS_FOR_LIQUIDITY_POOL,
        (liquidity_pools.API_PATH, pool_id, API_PATH),
    )
