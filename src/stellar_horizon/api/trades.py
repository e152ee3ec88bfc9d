"""Trade requests. Streamable: ``all``, ``for_account``, ``for_liquidity_pool``."""

from typing import Optional

from stellar_horizon.core.request import Request, RequestKind

from . import accounts, liquidity_pools, offers
from .params import AssetLike, with_asset

API_PATH = "trades"


def all(
    base: Optional[AssetLike] = None,
    counter: Optional[AssetLike] = None,
    offer_id: Optional[int] = None,
    trade_type: Optional[str] = None,
) -> Request:
    """
    Creates a request to retrieve trades.

    Args:
        base: Base asset of the trading pair
        counter: Counter asset of the trading pair
        offer_id: Trades involving this offer
        trade_type: "orderbook", "liquidity_pool" or "all"
    """
    request = Request(RequestKind.TRADES, (API_PATH,))
    if offer_id is not None:
        request = request.with_param("offer_id", offer_id)
    if base is not None:
        request = with_asset(request, base, "base")
    if counter is not None:
        request = with_asset(request, counter, "counter")
    if trade_type is not None:
        request = request.with_param("trade_type", trade_type)
    return request


def for_account(account_id: str) -> Request:
    """Creates a request to retrieve an account's trades."""
    return Request(RequestKind.TRADES_FOR_ACCOUNT, (accounts.API_PATH, account_id, API_PATH))


def for_offer(offer_id: int) -> Request:
    """Creates a request to retrieve an offer's trades."""
    return Request(RequestKind.TRADES_FOR_OFFER, (offers.API_PATH, str(offer_id), API_PATH))


def for_liquidity_pool(pool_id: str) -> Request:
    """Creates a request to retrieve a liquidity pool's trades."""
    return Request(
        RequestKind.TRADES_FOR_LIQUIDITY_POOL,
        (liquidity_pools.API_PATH, pool_id, API_PATH),
    )
