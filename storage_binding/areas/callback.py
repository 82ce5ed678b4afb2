"""
Adapter for callback-style key-value stores.

Some stores expose completion callbacks instead of coroutines, and report
failures out of band: after a callback fires, a separate "last error" slot
holds the failure (cleared when read). ``CallbackStorageArea`` turns such a
store into a ``StorageArea``.

The wrapped object must provide::

    get(query, callback)                 # callback(items)
    set(items, callback)                 # callback()
    remove(keys, callback)               # callback()
    clear(callback)                      # callback()
    getBytesInUse(query, callback)       # callback(n)  (or get_bytes_in_use)

and ``last_error`` is a zero-argument callable returning the pending error
(or None) and clearing it.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping
from typing import Any

from ..exceptions import BackingStoreError
from .base import Query, StorageArea

logger = logging.getLogger(__name__)


def _error_message(error: Any) -> str:
    if isinstance(error, Mapping):
        return str(error.get("message", error))
    return str(getattr(error, "message", error))


class CallbackStorageArea(StorageArea):
    """Coroutine facade over a callback-style store."""

    def __init__(
        self,
        store: Any,
        last_error: Callable[[], Any],
        name: str = "local",
    ) -> None:
        """Initialize the adapter.

        Args:
            store: Object with callback-style storage methods
            last_error: Returns and clears the store's pending error
            name: Area name, used in error details
        """
        self.store = store
        self.last_error = last_error
        self.name = name

    async def _call(self, operation: str, method: Callable[..., Any], *args: Any) -> Any:
        loop = asyncio.get_running_loop()
        future: asyncio.Future[Any] = loop.create_future()

        def resolve(result: Any, error: Any) -> None:
            if future.done():
                return
            if error:
                future.set_exception(
                    BackingStoreError(_error_message(error), area=self.name, operation=operation)
                )
            else:
                future.set_result(result)

        def callback(result: Any = None) -> None:
            # The error slot must be read while the callback is running.
            error = self.last_error()
            loop.call_soon_threadsafe(resolve, result, error)

        try:
            method(*args, callback)
        except Exception as e:
            raise BackingStoreError(
                f"Store rejected {operation}: {e}", area=self.name, operation=operation, cause=e
            ) from e
        return await future

    async def get(self, query: Query = None) -> dict[str, Any]:
        result = await self._call("get", self.store.get, query)
        return dict(result or {})

    async def set(self, items: Mapping[str, Any]) -> None:
        await self._call("set", self.store.set, dict(items))

    async def remove(self, keys: str | list[str]) -> None:
        await self._call("remove", self.store.remove, keys)

    async def clear(self) -> None:
        await self._call("clear", self.store.clear)

    async def get_bytes_in_use(self, query: Query = None) -> int:
        method = getattr(self.store, "getBytesInUse", None) or self.store.get_bytes_in_use
        result = await self._call("get_bytes_in_use", method, query)
        return int(result or 0)
