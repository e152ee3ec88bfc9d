"""Liquidity pool requests."""

from typing import Optional

from stellar_horizon.core.request import Request, RequestKind

from .params import AssetLike, with_asset_list

API_PATH = "liquidity_pools"


def single(pool_id: str) -> Request:
    """Creates a request to retrieve a single liquidity pool."""
    return Request(RequestKind.LIQUIDITY_POOL, (API_PATH, pool_id))


def all(
    reserves: Optional[list[AssetLike]] = None,
    account: Optional[str] = None,
) -> Request:
    """Creates a request to retrieve liquidity pools, by reserves or participating account."""
    request = Request(RequestKind.LIQUIDITY_POOLS, (API_PATH,))
    if reserves:
        request = with_asset_list(request, "reserves", reserves)
    if account is not None:
        request = request.with_param("account", account)
    return request
