"""Tests for the callback-style store adapter."""

from __future__ import annotations

import asyncio
import threading
from typing import Any

import pytest

from storage_binding.areas import CallbackStorageArea
from storage_binding.exceptions import BackingStoreError


class FakeCallbackStore:
    """Callback-style store with an out-of-band error slot.

    Callbacks fire synchronously unless ``threaded`` is set, in which case
    they fire from a worker thread, like a native host would.
    """

    def __init__(self, threaded: bool = False):
        self.items: dict[str, Any] = {}
        self.threaded = threaded
        self.fail_next: Any = None
        self._error: Any = None
        self.calls: list[str] = []

    def last_error(self) -> Any:
        error, self._error = self._error, None
        return error

    def _complete(self, callback, *args) -> None:
        def fire() -> None:
            if self.fail_next is not None:
                self._error, self.fail_next = self.fail_next, None
            callback(*args)

        if self.threaded:
            threading.Thread(target=fire).start()
        else:
            fire()

    def get(self, query, callback) -> None:
        self.calls.append("get")
        if query is None:
            result = dict(self.items)
        elif isinstance(query, dict):
            result = {k: self.items.get(k, v) for k, v in query.items()}
        else:
            keys = [query] if isinstance(query, str) else query
            result = {k: self.items[k] for k in keys if k in self.items}
        self._complete(callback, result)

    def set(self, items, callback) -> None:
        self.calls.append("set")
        if self.fail_next is None:
            self.items.update(items)
        self._complete(callback)

    def remove(self, keys, callback) -> None:
        self.calls.append("remove")
        for key in [keys] if isinstance(keys, str) else keys:
            self.items.pop(key, None)
        self._complete(callback)

    def clear(self, callback) -> None:
        self.calls.append("clear")
        self.items.clear()
        self._complete(callback)

    def getBytesInUse(self, query, callback) -> None:  # noqa: N802
        self.calls.append("getBytesInUse")
        self._complete(callback, 42)


class TestCallbackStorageArea:
    """Tests for CallbackStorageArea."""

    @pytest.fixture(params=[False, True], ids=["sync-callbacks", "threaded-callbacks"])
    def store(self, request) -> FakeCallbackStore:
        return FakeCallbackStore(threaded=request.param)

    @pytest.fixture
    def area(self, store: FakeCallbackStore) -> CallbackStorageArea:
        return CallbackStorageArea(store, store.last_error, name="sync")

    async def test_set_and_get(self, area: CallbackStorageArea) -> None:
        await area.set({"a": {"b": 1}})

        assert await area.get({"a": {}}) == {"a": {"b": 1}}
        assert await area.get({"missing": 0}) == {"missing": 0}

    async def test_remove_and_clear(self, area: CallbackStorageArea, store) -> None:
        await area.set({"a": 1, "b": 2})
        await area.remove("a")
        assert store.items == {"b": 2}

        await area.clear()
        assert store.items == {}

    async def test_bytes_in_use(self, area: CallbackStorageArea) -> None:
        assert await area.get_bytes_in_use(None) == 42

    async def test_last_error_becomes_backing_store_error(
        self, area: CallbackStorageArea, store: FakeCallbackStore
    ) -> None:
        store.fail_next = {"message": "Permission denied"}

        with pytest.raises(BackingStoreError) as exc_info:
            await area.set({"a": 1})

        assert exc_info.value.message == "Permission denied"
        assert exc_info.value.area == "sync"
        assert exc_info.value.operation == "set"
        assert store.items == {}

    async def test_error_is_cleared_after_reading(
        self, area: CallbackStorageArea, store: FakeCallbackStore
    ) -> None:
        store.fail_next = "boom"
        with pytest.raises(BackingStoreError):
            await area.get(None)

        assert await area.get(None) == {}

    async def test_store_raising_synchronously(self) -> None:
        class Broken:
            def get(self, query, callback):
                raise TypeError("bad query")

        area = CallbackStorageArea(Broken(), lambda: None)

        with pytest.raises(BackingStoreError, match="bad query"):
            await asyncio.wait_for(area.get(None), timeout=1)
