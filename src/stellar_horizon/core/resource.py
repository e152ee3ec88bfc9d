"""
Generic resource shape.

The client does not interpret resource fields. Records are kept as the JSON
objects Horizon returned, behind a read-only mapping that exposes the few
keys the engines need: ``id``, ``paging_token`` and ``_links``.

Callers who want typed records can pass any class with a
``from_dict(data) -> instance`` classmethod as a request's ``resource``.
"""

from collections.abc import Iterator, Mapping
from typing import Any, Optional, Protocol, TypeVar

T = TypeVar("T")


class ResourceType(Protocol[T]):
    """Anything that can be built from a decoded JSON object."""

    def from_dict(self, data: dict[str, Any]) -> T: ...


class Resource(Mapping[str, Any]):
    """Read-only view over a decoded Horizon record."""

    __slots__ = ("_data",)

    def __init__(self, data: dict[str, Any]):
        self._data = data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Resource":
        if not isinstance(data, dict):
            raise TypeError(f"Expected a JSON object, got {type(data).__name__}")
        return cls(data)

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Resource):
            return self._data == other._data
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Resource(id={self.id!r}, paging_token={self.paging_token!r})"

    @property
    def id(self) -> Optional[str]:
        value = self._data.get("id")
        return None if value is None else str(value)

    @property
    def paging_token(self) -> Optional[str]:
        value = self._data.get("paging_token")
        return None if value is None else str(value)

    @property
    def links(self) -> dict[str, Any]:
        return self._data.get("_links", {})

    def to_dict(self) -> dict[str, Any]:
        """Return the underlying JSON object."""
        return self._data


def cursor_of(resource: Any) -> Optional[str]:
    """Return the ordering token of a decoded resource, if it has one."""
    token = getattr(resource, "paging_token", None)
    if token is None and isinstance(resource, Mapping):
        token = resource.get("paging_token")
    return None if token is None else str(token)
