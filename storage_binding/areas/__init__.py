"""
Storage area backends.

Provides in-memory, file-backed and callback-adapted storage areas with
the same query semantics.

Example:
    >>> from storage_binding.areas import FileStorageArea
    >>> area = FileStorageArea("~/.myapp/storage", name="local")
    >>> await area.set({"settings": {"theme": "dark"}})
    >>> await area.get({"settings": {}})
    {'settings': {'theme': 'dark'}}
"""

from .base import (
    LOCAL_QUOTA_BYTES,
    SYNC_QUOTA_BYTES,
    SYNC_QUOTA_BYTES_PER_ITEM,
    AreaName,
    Query,
    StorageArea,
)
from .callback import CallbackStorageArea
from .file import FileStorageArea
from .memory import MemoryStorageArea

__all__ = [
    "StorageArea",
    "AreaName",
    "Query",
    # Implementations
    "MemoryStorageArea",
    "FileStorageArea",
    "CallbackStorageArea",
    # Quotas
    "SYNC_QUOTA_BYTES",
    "SYNC_QUOTA_BYTES_PER_ITEM",
    "LOCAL_QUOTA_BYTES",
]
