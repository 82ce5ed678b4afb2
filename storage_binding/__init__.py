"""
Storage Binding

Declarative binding between application state and an asynchronous,
namespaced key-value store.

Provides:
- Bindings addressed by key, key list, or dotted path (``settings.theme``)
- Automatic read on name change and write on value change (``auto_sync``)
- Uniform error reporting through outcomes and ``error`` notifications
- Optional wrapping of read values into richer types
- Memory, file and callback-adapted storage areas (sync, local, managed)

Usage:

    >>> from storage_binding import Binding, StorageConfig, create_namespaces
    >>> namespaces = create_namespaces(StorageConfig.from_environment())
    >>> binding = Binding(namespaces, storage_area="sync", name="prefs.volume", default_value=5)
    >>> binding.on("error", lambda error: print("storage failed:", error.message))
    >>> outcome = await binding.read()
    >>> outcome.value
    5

Auto-sync:

    >>> binding = Binding(namespaces, name="draft", auto_sync=True)  # schedules a read
    >>> await binding.wait_pending()
    >>> binding.value = {"text": "hello"}  # schedules a write
    >>> await binding.wait_pending()
"""

from .areas import (
    AreaName,
    CallbackStorageArea,
    FileStorageArea,
    MemoryStorageArea,
    StorageArea,
)
from .areas.namespaces import StorageNamespaces, create_namespaces
from .binding import Binding, SyncController, SyncState
from .config import BackendType, StorageConfig
from .exceptions import (
    BackingStoreError,
    InvalidNameError,
    InvalidValueError,
    StorageAreaError,
    StorageBindingError,
    WrapConfigurationError,
)
from .gateway import StorageGateway
from .logging_utils import configure_structured_logging
from .outcome import OperationOutcome
from .paths import NOT_FOUND, build_nested, extract, to_segments
from .wrapping import ValueWrapper

__all__ = [
    # Binding
    "Binding",
    "SyncController",
    "SyncState",
    "StorageGateway",
    "OperationOutcome",
    # Storage areas
    "StorageArea",
    "AreaName",
    "MemoryStorageArea",
    "FileStorageArea",
    "CallbackStorageArea",
    "StorageNamespaces",
    "create_namespaces",
    # Configuration
    "StorageConfig",
    "BackendType",
    "configure_structured_logging",
    # Paths and wrapping
    "to_segments",
    "build_nested",
    "extract",
    "NOT_FOUND",
    "ValueWrapper",
    # Exceptions
    "StorageBindingError",
    "BackingStoreError",
    "InvalidNameError",
    "InvalidValueError",
    "StorageAreaError",
    "WrapConfigurationError",
]

__version__ = "0.1.0"
