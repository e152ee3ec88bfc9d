"""Asset statistics requests."""

from typing import Optional

from stellar_horizon.core.request import Request, RequestKind

API_PATH = "assets"


def all(asset_code: Optional[str] = None, asset_issuer: Optional[str] = None) -> Request:
    """Creates a request to retrieve assets, optionally filtered by code and issuer."""
    request = Request(RequestKind.ASSETS, (API_PATH,))
    if asset_code is not None:
        request = request.with_param("asset_code", asset_code)
    if asset_issuer is not None:
        request = request.with_param("asset_issuer", asset_issuer)
    return request
