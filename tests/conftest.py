"""
Shared test configuration and fixtures.

Provides in-memory storage namespaces, a gateway over them, and an event
recorder for asserting which notifications a binding fired.
"""

import logging
from collections import defaultdict
from typing import Any
from unittest.mock import AsyncMock

import pytest

from storage_binding import (
    BackingStoreError,
    MemoryStorageArea,
    StorageArea,
    StorageGateway,
    StorageNamespaces,
)
from storage_binding.binding import EVENTS, Binding

logger = logging.getLogger(__name__)


class EventRecorder:
    """Collects every notification a binding fires, in order."""

    def __init__(self, binding: Binding):
        self.events: list[tuple[str, Any]] = []
        self.by_name: dict[str, list[Any]] = defaultdict(list)
        for event in EVENTS:
            binding.on(event, self._make_listener(event))

    def _make_listener(self, event: str):
        def listener(payload: Any) -> None:
            self.events.append((event, payload))
            self.by_name[event].append(payload)

        return listener

    def count(self, event: str) -> int:
        return len(self.by_name[event])

    def names(self, include_value_changed: bool = False) -> list[str]:
        return [
            name
            for name, _ in self.events
            if include_value_changed or name != "value-changed"
        ]


def make_failing_area(message: str = "Permission denied", name: str = "local") -> AsyncMock:
    """Create a storage area double whose every call raises ``BackingStoreError``."""
    area = AsyncMock(spec=StorageArea)
    error = BackingStoreError(message, area=name)
    area.get.side_effect = error
    area.set.side_effect = error
    area.remove.side_effect = error
    area.clear.side_effect = error
    area.get_bytes_in_use.side_effect = error
    return area


@pytest.fixture
def failing_area():
    """Factory for storage area doubles that fail every call."""
    return make_failing_area


@pytest.fixture
def namespaces() -> StorageNamespaces:
    """Fresh in-memory sync, local and managed areas."""
    return StorageNamespaces(
        {
            "sync": MemoryStorageArea(name="sync"),
            "local": MemoryStorageArea(name="local"),
            "managed": MemoryStorageArea(name="managed", initial={"policy": 1}, read_only=True),
        }
    )


@pytest.fixture
def gateway(namespaces: StorageNamespaces) -> StorageGateway:
    return StorageGateway(namespaces)


@pytest.fixture
def local_area(namespaces: StorageNamespaces) -> StorageArea:
    return namespaces.local
