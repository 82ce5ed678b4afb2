"""
In-memory storage area.

Keeps a namespace in a dict. Values are copied through JSON on every write
and read so the stored state can never be mutated from outside, and so only
JSON-serializable values are accepted, the same as a real backing store.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

from ..exceptions import BackingStoreError
from .base import Query, StorageArea, bytes_in_use, item_bytes, json_copy, select

logger = logging.getLogger(__name__)


class MemoryStorageArea(StorageArea):
    """Dict-backed storage area.

    Subclasses persist the namespace by overriding ``_load`` and ``_commit``;
    every mutation runs load → modify → quota check → commit under one lock.
    """

    def __init__(
        self,
        name: str = "local",
        initial: Mapping[str, Any] | None = None,
        quota_bytes: int | None = None,
        quota_bytes_per_item: int | None = None,
        read_only: bool = False,
    ) -> None:
        """Initialize the area.

        Args:
            name: Area name, used in error details and logs
            initial: Items to seed the namespace with
            quota_bytes: Maximum total bytes, or None for unlimited
            quota_bytes_per_item: Maximum bytes per item, or None for unlimited
            read_only: Reject every mutation (used for the managed area)
        """
        self.name = name
        self.quota_bytes = quota_bytes
        self.quota_bytes_per_item = quota_bytes_per_item
        self.read_only = read_only
        self._data: dict[str, Any] = json_copy(dict(initial or {}), name)
        self._lock = asyncio.Lock()

    async def _load(self) -> dict[str, Any]:
        return self._data

    async def _commit(self, data: dict[str, Any]) -> None:
        self._data = data

    async def get(self, query: Query = None) -> dict[str, Any]:
        data = await self._load()
        return select(data, query, self.name)

    async def set(self, items: Mapping[str, Any]) -> None:
        self._check_writable("set")
        if not isinstance(items, Mapping):
            raise BackingStoreError(
                f"Items must be a mapping, got {type(items).__name__}",
                area=self.name,
                operation="set",
            )
        incoming = json_copy(dict(items), self.name)

        async with self._lock:
            data = dict(await self._load())
            data.update(incoming)
            self._check_quota(data, incoming)
            await self._commit(data)
        logger.debug(f"[{self.name}] set keys={list(incoming)}")

    async def remove(self, keys: str | list[str]) -> None:
        self._check_writable("remove")
        key_list = [keys] if isinstance(keys, str) else list(keys)

        async with self._lock:
            data = dict(await self._load())
            for key in key_list:
                data.pop(key, None)
            await self._commit(data)
        logger.debug(f"[{self.name}] removed keys={key_list}")

    async def clear(self) -> None:
        self._check_writable("clear")
        async with self._lock:
            await self._commit({})
        logger.debug(f"[{self.name}] cleared")

    async def get_bytes_in_use(self, query: Query = None) -> int:
        data = await self._load()
        return bytes_in_use(data, query, self.name)

    def _check_writable(self, operation: str) -> None:
        if self.read_only:
            raise BackingStoreError(
                "This is a read-only store.", area=self.name, operation=operation
            )

    def _check_quota(self, data: Mapping[str, Any], incoming: Mapping[str, Any]) -> None:
        if self.quota_bytes_per_item is not None:
            for key, value in incoming.items():
                if item_bytes(key, value) > self.quota_bytes_per_item:
                    raise BackingStoreError(
                        "QUOTA_BYTES_PER_ITEM quota exceeded", area=self.name, operation="set"
                    )
        if self.quota_bytes is not None:
            if bytes_in_use(data, None, self.name) > self.quota_bytes:
                raise BackingStoreError(
                    "QUOTA_BYTES quota exceeded", area=self.name, operation="set"
                )
