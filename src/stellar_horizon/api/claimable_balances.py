"""Claimable balance requests."""

from typing import Optional

from stellar_horizon.core.request import Request, RequestKind

from .params import AssetLike, as_asset

API_PATH = "claimable_balances"


def single(balance_id: str) -> Request:
    """Creates a request to retrieve a single claimable balance."""
    return Request(RequestKind.CLAIMABLE_BALANCE, (API_PATH, balance_id))


def all(
    asset: Optional[AssetLike] = None,
    claimant: Optional[str] = None,
    sponsor: Optional[str] = None,
) -> Request:
    """Creates a request to retrieve claimable balances by asset, claimant or sponsor."""
    request = Request(RequestKind.CLAIMABLE_BALANCES, (API_PATH,))
    if asset is not None:
        request = request.with_param("asset", as_asset(asset).canonical())
    if claimant is not None:
        request = request.with_param("claimant", claimant)
    if sponsor is not None:
        request = request.with_param("sponsor", sponsor)
    return request
