"""
Request model.

A ``Request`` is an immutable description of one Horizon collection or
resource: a ``RequestKind`` tag, the URL path segments, the filter parameters
and the pagination parameters. The set of kinds is closed; the shape of the
response and whether a server-push feed exists are properties of the kind.

Rendering a Request against a base URL is pure, so the same Request can be
fetched, paginated or streamed by the same engines.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Optional
from urllib.parse import parse_qsl, quote, urlencode, urlsplit, urlunsplit

from .resource import Resource


class Order(Enum):
    """Records order."""
    ASC = "asc"
    DESC = "desc"


class Shape(Enum):
    """Expected response shape."""
    SINGLE = "single"
    PAGE = "page"


class RequestKind(Enum):
    """One tag per Horizon collection (and scope within it)."""
    ROOT = "root"
    ACCOUNT = "account"
    ACCOUNTS = "accounts"
    ACCOUNT_DATA = "account_data"
    ASSETS = "assets"
    CLAIMABLE_BALANCE = "claimable_balance"
    CLAIMABLE_BALANCES = "claimable_balances"
    EFFECTS = "effects"
    EFFECTS_FOR_ACCOUNT = "effects_for_account"
    EFFECTS_FOR_LEDGER = "effects_for_ledger"
    EFFECTS_FOR_TRANSACTION = "effects_for_transaction"
    EFFECTS_FOR_OPERATION = "effects_for_operation"
    EFFECTS_FOR_LIQUIDITY_POOL = "effects_for_liquidity_pool"
    LEDGER = "ledger"
    LEDGERS = "ledgers"
    LIQUIDITY_POOL = "liquidity_pool"
    LIQUIDITY_POOLS = "liquidity_pools"
    OFFER = "offer"
    OFFERS = "offers"
    OFFERS_FOR_ACCOUNT = "offers_for_account"
    OPERATION = "operation"
    OPERATIONS = "operations"
    OPERATIONS_FOR_ACCOUNT = "operations_for_account"
    OPERATIONS_FOR_LEDGER = "operations_for_ledger"
    OPERATIONS_FOR_TRANSACTION = "operations_for_transaction"
    OPERATIONS_FOR_CLAIMABLE_BALANCE = "operations_for_claimable_balance"
    OPERATIONS_FOR_LIQUIDITY_POOL = "operations_for_liquidity_pool"
    PAYMENTS = "payments"
    PAYMENTS_FOR_ACCOUNT = "payments_for_account"
    PAYMENTS_FOR_LEDGER = "payments_for_ledger"
    PAYMENTS_FOR_TRANSACTION = "payments_for_transaction"
    TRADES = "trades"
    TRADES_FOR_ACCOUNT = "trades_for_account"
    TRADES_FOR_OFFER = "trades_for_offer"
    TRADES_FOR_LIQUIDITY_POOL = "trades_for_liquidity_pool"
    TRANSACTION = "transaction"
    TRANSACTIONS = "transactions"
    TRANSACTIONS_FOR_ACCOUNT = "transactions_for_account"
    TRANSACTIONS_FOR_LEDGER = "transactions_for_ledger"
    TRANSACTIONS_FOR_CLAIMABLE_BALANCE = "transactions_for_claimable_balance"
    TRANSACTIONS_FOR_LIQUIDITY_POOL = "transactions_for_liquidity_pool"
    ORDER_BOOK = "order_book"
    TRADE_AGGREGATIONS = "trade_aggregations"
    FEE_STATS = "fee_stats"
    PATHS_STRICT_RECEIVE = "paths_strict_receive"
    PATHS_STRICT_SEND = "paths_strict_send"


SINGLE_KINDS = frozenset({
    RequestKind.ROOT,
    RequestKind.ACCOUNT,
    RequestKind.ACCOUNT_DATA,
    RequestKind.CLAIMABLE_BALANCE,
    RequestKind.LEDGER,
    RequestKind.LIQUIDITY_POOL,
    RequestKind.OFFER,
    RequestKind.OPERATION,
    RequestKind.TRANSACTION,
    RequestKind.ORDER_BOOK,
    RequestKind.FEE_STATS,
})

# Page-shaped, but Horizon returns the whole result set at once
UNPAGED_KINDS = frozenset({
    RequestKind.PATHS_STRICT_RECEIVE,
    RequestKind.PATHS_STRICT_SEND,
})

STREAMABLE_KINDS = frozenset({
    RequestKind.EFFECTS,
    RequestKind.EFFECTS_FOR_ACCOUNT,
    RequestKind.EFFECTS_FOR_LEDGER,
    RequestKind.EFFECTS_FOR_LIQUIDITY_POOL,
    RequestKind.LEDGERS,
    RequestKind.OPERATIONS,
    RequestKind.OPERATIONS_FOR_ACCOUNT,
    RequestKind.OPERATIONS_FOR_LEDGER,
    RequestKind.OPERATIONS_FOR_CLAIMABLE_BALANCE,
    RequestKind.OPERATIONS_FOR_LIQUIDITY_POOL,
    RequestKind.PAYMENTS,
    RequestKind.PAYMENTS_FOR_ACCOUNT,
    RequestKind.TRADES,
    RequestKind.TRADES_FOR_ACCOUNT,
    RequestKind.TRADES_FOR_LIQUIDITY_POOL,
    RequestKind.TRANSACTIONS,
    RequestKind.ORDER_BOOK,
})

PAGINATION_KEYS = ("cursor", "limit", "order")


@dataclass
class RequestSpec:
    """
    Specification for an HTTP request.

    Attributes:
        url: Full URL to request, query string included
        method: HTTP method (GET, POST, etc.)
        headers: HTTP headers as key-value pairs
        body: Optional form-encoded request body for POST requests
    """
    url: str
    method: str = "GET"
    headers: dict[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None


@dataclass(frozen=True)
class Request:
    """
    Immutable description of a Horizon request.

    Attributes:
        kind: Collection tag
        segments: URL path segments below the base URL
        params: Filter query parameters, in rendering order
        cursor: Paging token to start after
        limit: Maximum records per page
        order: Records order
        resource: Type used to decode records (needs ``from_dict``)
    """
    kind: RequestKind
    segments: tuple[str, ...] = ()
    params: tuple[tuple[str, str], ...] = ()
    cursor: Optional[str] = None
    limit: Optional[int] = None
    order: Optional[Order] = None
    resource: Any = field(default=Resource, compare=False)

    @property
    def shape(self) -> Shape:
        return Shape.SINGLE if self.kind in SINGLE_KINDS else Shape.PAGE

    @property
    def streamable(self) -> bool:
        return self.kind in STREAMABLE_KINDS

    @property
    def pageable(self) -> bool:
        return self.shape is Shape.PAGE and self.kind not in UNPAGED_KINDS

    def _require_pageable(self, what: str) -> None:
        if not self.pageable:
            raise ValueError(f"{self.kind.value} requests do not accept a {what}")

    def with_cursor(self, cursor: str) -> "Request":
        """Return a copy starting after ``cursor`` ("now" for live streams)."""
        self._require_pageable("cursor")
        return replace(self, cursor=str(cursor))

    def with_limit(self, limit: int) -> "Request":
        if self.kind is not RequestKind.ORDER_BOOK:
            self._require_pageable("limit")
        if limit <= 0:
            raise ValueError("limit must be positive")
        return replace(self, limit=limit)

    def with_order(self, order: Order) -> "Request":
        self._require_pageable("order")
        return replace(self, order=Order(order))

    def with_param(self, key: str, value: Any) -> "Request":
        """Return a copy with one more filter parameter."""
        if key in PAGINATION_KEYS:
            raise ValueError(f"Use with_{key}() to set {key!r}")
        return replace(self, params=self.params + ((key, _query_value(value)),))

    def with_resource(self, resource: Any) -> "Request":
        """Return a copy decoding records with ``resource.from_dict``."""
        return replace(self, resource=resource)

    def query(self) -> list[tuple[str, str]]:
        """Query pairs: filters first, then pagination."""
        pairs = list(self.params)
        if self.cursor is not None:
            pairs.append(("cursor", self.cursor))
        if self.limit is not None:
            pairs.append(("limit", str(self.limit)))
        if self.order is not None:
            pairs.append(("order", self.order.value))
        return pairs

    def url(self, base_url: str) -> str:
        """
        Render the request against ``base_url``.

        Segments are appended to the base URL path, so a base URL such as
        ``https://example.com/horizon`` keeps its ``/horizon`` prefix.
        """
        return join_url(base_url, self.segments, self.query())

    def follow(self, href: str) -> "Request":
        """
        Build the request a navigation link points at.

        The link keeps this request's kind, path and resource type; its
        query string replaces the filter and pagination parameters.
        """
        # Drop an RFC 6570 template suffix such as "{?cursor,limit,order}"
        href = href.split("{", 1)[0]
        cursor = None
        limit = None
        order = None
        params = []
        for key, value in parse_qsl(urlsplit(href).query, keep_blank_values=True):
            if key == "cursor":
                cursor = value
            elif key == "limit":
                limit = int(value) if value.isdigit() else None
            elif key == "order":
                order = Order(value) if value in ("asc", "desc") else None
            else:
                params.append((key, value))
        return replace(
            self,
            params=tuple(params),
            cursor=cursor,
            limit=limit,
            order=order,
        )


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def join_url(base_url: str, segments: tuple[str, ...], query: list[tuple[str, str]] = ()) -> str:
    """Append quoted path segments and a query string to ``base_url``."""
    base = urlsplit(base_url)
    path = base.path.rstrip("/")
    if segments:
        path += "/" + "/".join(quote(segment, safe="") for segment in segments)
    elif not path:
        path = "/"
    return urlunsplit((base.scheme, base.netloc, path, urlencode(list(query)), ""))
