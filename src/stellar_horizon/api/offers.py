"""Offer requests."""

from typing import Optional

from stellar_horizon.core.request import Request, RequestKind

from . import accounts
from .params import AssetLike, as_asset

API_PATH = "offers"


def single(offer_id: int) -> Request:
    """Creates a request to retrieve a single offer."""
    return Request(RequestKind.OFFER, (API_PATH, str(offer_id)))


def all(
    seller: Optional[str] = None,
    selling: Optional[AssetLike] = None,
    buying: Optional[AssetLike] = None,
    sponsor: Optional[str] = None,
) -> Request:
    """Creates a request to retrieve offers."""
    request = Request(RequestKind.OFFERS, (API_PATH,))
    if seller is not None:
        request = request.with_param("seller", seller)
    if selling is not None:
        request = request.with_param("selling", as_asset(selling).canonical())
    if buying is not None:
        request = request.with_param("buying", as_asset(buying).canonical())
    if sponsor is not None:
        request = request.with_param("sponsor", sponsor)
    return request


def for_account(account_id: str) -> Request:
    """Creates a request to retrieve an account's offers."""
    return Request(RequestKind.OFFERS_FOR_ACCOUNT, (accounts.API_PATH, account_id, API_PATH))
