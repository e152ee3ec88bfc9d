"""
Request builders, one module per Horizon collection.

Example:
    from stellar_horizon import api

    request = api.payments.for_account(account_id).with_limit(200)
"""

from . import (
    accounts,
    aggregations,
    assets,
    claimable_balances,
    data,
    effects,
    ledgers,
    liquidity_pools,
    offers,
    operations,
    payments,
    root,
    trades,
    transactions,
)
from .params import Asset, Join

__all__ = [
    "Asset",
    "Join",
    "accounts",
    "aggregations",
    "assets",
    "claimable_balances",
    "data",
    "effects",
    "ledgers",
    "liquidity_pools",
    "offers",
    "operations",
    "payments",
    "root",
    "trades",
    "transactions",
]
