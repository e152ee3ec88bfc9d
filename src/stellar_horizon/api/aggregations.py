"""
Aggregated views: order book, trade aggregations, fee stats and paths.

``order_book`` is a single resource that can also be streamed. Path finding
returns the whole result set in one page and cannot be paginated.
"""

from typing import Optional, Sequence

from stellar_horizon.core.request import Request, RequestKind

from .params import AssetLike, with_asset, with_asset_list

# Allowed trade aggregation resolutions, in milliseconds
RESOLUTIONS = frozenset({
    60_000,        # 1 minute
    300_000,       # 5 minutes
    900_000,       # 15 minutes
    3_600_000,     # 1 hour
    86_400_000,    # 1 day
    604_800_000,   # 1 week
})


def order_book(selling: AssetLike, buying: AssetLike, limit: Optional[int] = None) -> Request:
    """
    Creates a request to retrieve the order book of a trading pair.

    Args:
        selling: Asset being sold
        buying: Asset being bought
        limit: Maximum number of bids and asks
    """
    request = Request(RequestKind.ORDER_BOOK, ("order_book",))
    request = with_asset(request, selling, "selling")
    request = with_asset(request, buying, "buying")
    if limit is not None:
        request = request.with_limit(limit)
    return request


def trade_aggregations(
    base: AssetLike,
    counter: AssetLike,
    start_time: int,
    end_time: int,
    resolution: int,
    offset: Optional[int] = None,
) -> Request:
    """
    Creates a request to retrieve trade statistics bucketed by time.

    Args:
        base: Base asset of the pair
        counter: Counter asset of the pair
        start_time: Lower bound, milliseconds since epoch
        end_time: Upper bound, milliseconds since epoch
        resolution: Bucket size in milliseconds (see RESOLUTIONS)
        offset: Bucket offset in milliseconds, less than a day and a
            multiple of one hour

    Raises:
        ValueError: If the time window, resolution or offset is invalid
    """
    if resolution not in RESOLUTIONS:
        raise ValueError(f"Unsupported resolution: {resolution}")
    if end_time < start_time:
        raise ValueError("end_time must not be before start_time")
    if offset is not None:
        if offset % 3_600_000 or offset > 86_400_000 or offset > resolution:
            raise ValueError(f"Invalid offset: {offset}")

    request = Request(RequestKind.TRADE_AGGREGATIONS, ("trade_aggregations",))
    request = with_asset(request, base, "base")
    request = with_asset(request, counter, "counter")
    request = request.with_param("start_time", start_time)
    request = request.with_param("end_time", end_time)
    request = request.with_param("resolution", resolution)
    if offset is not None:
        request = request.with_param("offset", offset)
    return request


def fee_stats() -> Request:
    """Creates a request to retrieve fee statistics of recent ledgers."""
    return Request(RequestKind.FEE_STATS, ("fee_stats",))


def paths_strict_receive(
    destination_asset: AssetLike,
    destination_amount: str,
    source_account: Optional[str] = None,
    source_assets: Optional[Sequence[AssetLike]] = None,
) -> Request:
    """
    Creates a request to find payment paths that deliver an exact amount.

    Exactly one of ``source_account`` or ``source_assets`` must be given.
    """
    if (source_account is None) == (source_assets is None):
        raise ValueError("Give exactly one of source_account or source_assets")

    request = Request(RequestKind.PATHS_STRICT_RECEIVE, ("paths", "strict-receive"))
    request = with_asset(request, destination_asset, "destination")
    request = request.with_param("destination_amount", destination_amount)
    if source_account is not None:
        request = request.with_param("source_account", source_account)
    else:
        request = with_asset_list(request, "source_assets", list(source_assets))
    return request


def paths_strict_send(
    source_asset: AssetLike,
    source_amount: str,
    destination_account: Optional[str] = None,
    destination_assets: Optional[Sequence[AssetLike]] = None,
) -> Request:
    """
    Creates a request to find payment paths that send an exact amount.

    Exactly one of ``destination_account`` or ``destination_assets`` must be
    given.
    """
    if (destination_account is None) == (destination_assets is None):
        raise ValueError("Give exactly one of destination_account or destination_assets")

    request = Request(RequestKind.PATHS_STRICT_SEND, ("paths", "strict-send"))
    request = with_asset(request, source_asset, "source")
    request = request.with_param("source_amount", source_amount)
    if destination_account is not None:
        request = request.with_param("destination_account", destination_account)
    else:
        request = with_asset_list(request, "destination_assets", list(destination_assets))
    return request
