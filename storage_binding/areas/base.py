"""
Abstract storage area interface.

A storage area is one isolated namespace of the backing store (``sync``,
``local`` or ``managed``). All implementations must follow the same query
semantics so bindings behave identically against any of them.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from collections.abc import Mapping
from enum import Enum
from typing import Any

from ..exceptions import BackingStoreError

# Query accepted by ``get`` and ``get_bytes_in_use``:
#   None          -> the whole namespace
#   str           -> a single key
#   list of str   -> several keys
#   mapping       -> several keys, each with a default for when it is absent
Query = None | str | list[str] | tuple[str, ...] | Mapping[str, Any]


class AreaName(str, Enum):
    """Names of the three storage areas."""

    SYNC = "sync"
    LOCAL = "local"
    MANAGED = "managed"


# Quotas of the browser storage areas the binding was first written against.
SYNC_QUOTA_BYTES = 102_400
SYNC_QUOTA_BYTES_PER_ITEM = 8_192
LOCAL_QUOTA_BYTES = 5_242_880


class StorageArea(ABC):
    """Abstract interface for one namespace of a key-value store.

    Every method raises ``BackingStoreError`` when the store reports a
    failure; callers never see other exception types for store failures.
    """

    name: str = "local"

    @abstractmethod
    async def get(self, query: Query = None) -> dict[str, Any]:
        """Read items.

        Args:
            query: Keys to read (see ``Query``)

        Returns:
            Mapping of found keys to their values. Mapping queries also
            contain each absent key with its default.
        """
        ...

    @abstractmethod
    async def set(self, items: Mapping[str, Any]) -> None:
        """Store items, merging shallowly into the namespace.

        Keys not in ``items`` are left untouched; a key in ``items`` replaces
        its whole stored value.
        """
        ...

    @abstractmethod
    async def remove(self, keys: str | list[str]) -> None:
        """Remove one or more keys. Absent keys are ignored."""
        ...

    @abstractmethod
    async def clear(self) -> None:
        """Remove every item in the namespace."""
        ...

    @abstractmethod
    async def get_bytes_in_use(self, query: Query = None) -> int:
        """Return the bytes used by the queried keys (whole namespace for None)."""
        ...


def query_keys(query: Query, area: str | None = None) -> list[str] | None:
    """Return the keys named by ``query``, or None for the whole namespace."""
    if query is None:
        return None
    if isinstance(query, str):
        return [query]
    if isinstance(query, Mapping):
        return [str(k) for k in query]
    if isinstance(query, (list, tuple)) and all(isinstance(k, str) for k in query):
        return list(query)
    raise BackingStoreError(
        f"Invalid query of type {type(query).__name__}", area=area, operation="query"
    )


def select(data: Mapping[str, Any], query: Query, area: str | None = None) -> dict[str, Any]:
    """Apply ``query`` to a namespace snapshot.

    Returned values are independent copies of what is stored.
    """
    keys = query_keys(query, area)
    if keys is None:
        return json_copy(dict(data), area)

    result: dict[str, Any] = {}
    for key in keys:
        if key in data:
            result[key] = data[key]
        elif isinstance(query, Mapping):
            result[key] = query[key]
    return json_copy(result, area)


def json_copy(value: Any, area: str | None = None) -> Any:
    """Deep-copy ``value`` through JSON, rejecting unserializable values."""
    try:
        return json.loads(json.dumps(value))
    except (TypeError, ValueError) as e:
        raise BackingStoreError(
            f"Value is not JSON-serializable: {e}", area=area, operation="serialize", cause=e
        ) from e


def item_bytes(key: str, value: Any) -> int:
    """Bytes used by one stored item: key length plus its JSON length."""
    return len(key.encode("utf-8")) + len(json.dumps(value).encode("utf-8"))


def bytes_in_use(data: Mapping[str, Any], query: Query, area: str | None = None) -> int:
    keys = query_keys(query, area)
    if keys is None:
        keys = list(data)
    return sum(item_bytes(k, data[k]) for k in keys if k in data)
