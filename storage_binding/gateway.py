"""
Storage gateway.

Translates a binding's logical name into concrete storage area calls and
every store failure into a failed ``OperationOutcome``. Nothing in this
module raises for a store failure.

A name is either:
- a path string (``"settings.theme"``), addressing a value nested under
  one top-level key, or
- a structural name (a list of keys, or a mapping of keys to defaults),
  addressing top-level keys directly.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from .areas.base import Query, StorageArea
from .areas.namespaces import StorageNamespaces
from .exceptions import (
    BackingStoreError,
    InvalidNameError,
    InvalidValueError,
    StorageBindingError,
)
from .outcome import OperationOutcome
from .paths import NOT_FOUND, build_nested, extract, to_segments

logger = logging.getLogger(__name__)

Name = str | list[str] | Mapping[str, Any]


def is_path_name(name: Any) -> bool:
    """True when ``name`` is addressed through path resolution."""
    return isinstance(name, str)


class StorageGateway:
    """Single point of contact between bindings and storage areas."""

    def __init__(self, namespaces: StorageNamespaces) -> None:
        self.namespaces = namespaces

    async def read(self, area: str, name: Name, default_value: Any = None) -> OperationOutcome:
        """Read the value addressed by ``name``.

        For a path string the store is queried for the root key with a
        nested default built from ``default_value``, and the result is
        narrowed to the full path. A path that does not resolve inside the
        stored value yields ``default_value``.
        """
        segments: list[str] = []
        if is_path_name(name):
            segments = to_segments(name)
            if not segments:
                return OperationOutcome.failure(InvalidNameError('"name" must not be empty.'))
            query: Query = build_nested(segments, default_value)
        else:
            query = name

        outcome = await self._run(area, "get", lambda store: store.get(query))
        if not outcome.ok or not segments:
            return outcome

        value = extract(outcome.value, segments)
        if value is NOT_FOUND:
            value = default_value
        return OperationOutcome.success(value)

    async def usage(self, area: str, query: Query = None) -> OperationOutcome:
        """Bytes used by ``query`` (the whole namespace for None)."""
        return await self._run(
            area, "get_bytes_in_use", lambda store: store.get_bytes_in_use(query)
        )

    async def write(self, area: str, name: Name, value: Any) -> OperationOutcome:
        """Write ``value`` under ``name``.

        Path strings are expanded into a nested mapping under the root key,
        which replaces everything stored under that key. Structural names
        write ``value`` itself, which must map keys to values.
        """
        if is_path_name(name):
            segments = to_segments(name)
            if not segments:
                return OperationOutcome.failure(InvalidNameError('"name" must not be empty.'))
            payload = build_nested(segments, value)
        elif isinstance(value, Mapping):
            payload = dict(value)
        else:
            return OperationOutcome.failure(
                InvalidValueError(
                    "value must be a mapping of keys to values when name is not a path",
                    type(value).__name__,
                )
            )

        return await self._run(area, "set", lambda store: store.set(payload))

    async def remove(self, area: str, name: Any) -> OperationOutcome:
        """Remove the key or keys named by ``name``.

        Only a string or a list of strings is accepted; any other name fails
        locally without contacting the store.
        """
        if isinstance(name, (list, tuple)) and all(isinstance(k, str) for k in name):
            keys: str | list[str] = list(name)
        elif isinstance(name, str):
            keys = name
        else:
            return OperationOutcome.failure(InvalidNameError())
        return await self._run(area, "remove", lambda store: store.remove(keys))

    async def clear(self, area: str) -> OperationOutcome:
        """Remove every item in ``area``."""
        return await self._run(area, "clear", lambda store: store.clear())

    async def _run(
        self,
        area: str,
        operation: str,
        call: Callable[[StorageArea], Awaitable[Any]],
    ) -> OperationOutcome:
        try:
            store = self.namespaces.area(area)
        except StorageBindingError as e:
            return OperationOutcome.failure(e)

        try:
            result = await call(store)
        except BackingStoreError as e:
            logger.warning(f"[{area}] {operation} failed: {e.message}")
            return OperationOutcome.failure(e)
        except Exception as e:
            logger.warning(f"[{area}] {operation} failed: {e}")
            return OperationOutcome.failure(
                BackingStoreError(str(e), area=area, operation=operation, cause=e)
            )

        logger.debug(f"[{area}] {operation} completed")
        return OperationOutcome.success(result)
