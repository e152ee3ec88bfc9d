"""Account requests."""

from typing import Optional

from stellar_horizon.core.request import Request, RequestKind

from .params import AssetLike, as_asset

API_PATH = "accounts"


def single(account_id: str) -> Request:
    """Creates a request to retrieve a single account."""
    return Request(RequestKind.ACCOUNT, (API_PATH, account_id))


def all(
    signer: Optional[str] = None,
    asset: Optional[AssetLike] = None,
    sponsor: Optional[str] = None,
    liquidity_pool: Optional[str] = None,
) -> Request:
    """
    Creates a request to retrieve accounts.

    Horizon requires exactly one of the filters.

    Args:
        signer: Accounts that have this signer
        asset: Accounts that trust this credit asset
        sponsor: Accounts sponsored by this account
        liquidity_pool: Accounts participating in this pool
    """
    filters = [f for f in (signer, asset, sponsor, liquidity_pool) if f is not None]
    if len(filters) != 1:
        raise ValueError("Exactly one of signer, asset, sponsor or liquidity_pool is required")

    request = Request(RequestKind.ACCOUNTS, (API_PATH,))
    if signer is not None:
        request = request.with_param("signer", signer)
    if asset is not None:
        asset = as_asset(asset)
        if asset.is_native:
            raise ValueError("Accounts can only be filtered by a credit asset")
        request = request.with_param("asset", asset.canonical())
    if sponsor is not None:
        request = request.with_param("sponsor", sponsor)
    if liquidity_pool is not None:
        request = request.with_param("liquidity_pool", liquidity_pool)
    return request
