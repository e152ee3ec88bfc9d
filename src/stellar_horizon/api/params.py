"""Query parameter helpers shared by the request builders."""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from stellar_horizon.core.request import Request

_ASSET_CODE = re.compile(r"^[A-Za-z0-9]{1,12}$")


class Join(Enum):
    """Optionally join data with the operations response."""
    TRANSACTIONS = "transactions"


@dataclass(frozen=True)
class Asset:
    """
    An asset as Horizon identifies it in query strings.

    Use ``Asset.native()`` for lumens and ``Asset.credit(code, issuer)``
    otherwise. ``Asset.parse`` accepts the canonical ``native`` /
    ``CODE:ISSUER`` form.
    """
    code: Optional[str] = None
    issuer: Optional[str] = None

    def __post_init__(self) -> None:
        if self.code is None and self.issuer is None:
            return
        if not self.code or not _ASSET_CODE.match(self.code):
            raise ValueError(f"Invalid asset code: {self.code!r}")
        if not self.issuer:
            raise ValueError(f"Asset {self.code} needs an issuer")

    @classmethod
    def native(cls) -> "Asset":
        return cls()

    @classmethod
    def credit(cls, code: str, issuer: str) -> "Asset":
        return cls(code=code, issuer=issuer)

    @classmethod
    def parse(cls, value: str) -> "Asset":
        if value == "native":
            return cls.native()
        code, sep, issuer = value.partition(":")
        if not sep:
            raise ValueError(f"Expected 'native' or 'CODE:ISSUER', got {value!r}")
        return cls.credit(code, issuer)

    @property
    def is_native(self) -> bool:
        return self.code is None

    @property
    def asset_type(self) -> str:
        if self.code is None:
            return "native"
        return "credit_alphanum4" if len(self.code) <= 4 else "credit_alphanum12"

    def canonical(self) -> str:
        if self.code is None:
            return "native"
        return f"{self.code}:{self.issuer}"

    def __str__(self) -> str:
        return self.canonical()


AssetLike = Union[Asset, str]


def as_asset(value: AssetLike) -> Asset:
    return value if isinstance(value, Asset) else Asset.parse(value)


def with_asset(request: Request, asset: AssetLike, prefix: Optional[str] = None) -> Request:
    """Append ``{prefix}_asset_type``, ``_asset_code`` and ``_asset_issuer``."""
    asset = as_asset(asset)
    key = f"{prefix}_asset" if prefix else "asset"
    request = request.with_param(f"{key}_type", asset.asset_type)
    if not asset.is_native:
        request = request.with_param(f"{key}_code", asset.code)
        request = request.with_param(f"{key}_issuer", asset.issuer)
    return request


def with_asset_list(request: Request, key: str, assets: list[AssetLike]) -> Request:
    """Append a comma separated list of canonical assets."""
    return request.with_param(key, ",".join(as_asset(asset).canonical() for asset in assets))


def with_operation_filters(
    request: Request,
    include_failed: Optional[bool] = None,
    join: Optional[Join] = None,
) -> Request:
    if include_failed is not None:
        request = request.with_param("include_failed", include_failed)
    if join is not None:
        request = request.with_param("join", Join(join))
    return request
