"""
Storage configuration.

Configuration can be provided directly, via environment variables, or from
a YAML settings file:

Environment Variables:
    STORAGE_BINDING_BACKEND: Backend for all areas, ``memory`` or ``file`` (default: memory)
    STORAGE_BINDING_PATH: Directory for the file backend (default: ~/.storage_binding)
    STORAGE_BINDING_SYNC_QUOTA: Byte quota of the sync area
    STORAGE_BINDING_LOCAL_QUOTA: Byte quota of the local area

YAML (``settings.yaml``):

```yaml
storage:
  backend: file
  local_path: ~/.myapp/storage
  sync_quota_bytes: 102400
  managed:
    theme: dark
```
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from .areas.base import LOCAL_QUOTA_BYTES, SYNC_QUOTA_BYTES, SYNC_QUOTA_BYTES_PER_ITEM

logger = logging.getLogger(__name__)


class BackendType(Enum):
    """Where storage areas keep their data."""

    MEMORY = "memory"
    FILE = "file"


@dataclass
class StorageConfig:
    """Configuration for the three storage areas.

    Attributes:
        backend: Backend used for every area
        local_path: Directory for the file backend
        sync_quota_bytes: Total byte quota of the sync area (None = unlimited)
        sync_quota_bytes_per_item: Per-item byte quota of the sync area
        local_quota_bytes: Total byte quota of the local area (None = unlimited)
        managed: Policy values the read-only managed area is seeded with
    """

    backend: BackendType = BackendType.MEMORY
    local_path: str | None = None
    sync_quota_bytes: int | None = SYNC_QUOTA_BYTES
    sync_quota_bytes_per_item: int | None = SYNC_QUOTA_BYTES_PER_ITEM
    local_quota_bytes: int | None = LOCAL_QUOTA_BYTES
    managed: dict[str, Any] = field(default_factory=dict)

    @property
    def base_path(self) -> Path:
        """Directory used by the file backend."""
        if self.local_path:
            return Path(self.local_path).expanduser()
        return Path.home() / ".storage_binding"

    @classmethod
    def from_environment(cls) -> StorageConfig:
        """Create configuration from environment variables."""
        backend_str = os.environ.get("STORAGE_BINDING_BACKEND", "memory")
        try:
            backend = BackendType(backend_str.lower())
        except ValueError:
            logger.warning(f"Unknown storage backend {backend_str!r}, using memory")
            backend = BackendType.MEMORY

        return cls(
            backend=backend,
            local_path=os.environ.get("STORAGE_BINDING_PATH"),
            sync_quota_bytes=_int_env("STORAGE_BINDING_SYNC_QUOTA", SYNC_QUOTA_BYTES),
            local_quota_bytes=_int_env("STORAGE_BINDING_LOCAL_QUOTA", LOCAL_QUOTA_BYTES),
        )

    @classmethod
    def from_yaml(cls, path: str | Path) -> StorageConfig:
        """Create configuration from the ``storage`` section of a YAML file.

        A missing file, or a file without a ``storage`` section, yields the
        defaults.
        """
        config_path = Path(path).expanduser()
        if not config_path.exists():
            return cls()

        raw = yaml.safe_load(config_path.read_text()) or {}
        if not isinstance(raw, dict):
            logger.warning(f"Ignoring {config_path}: top level is not a mapping")
            return cls()

        section: dict[str, Any] = raw.get("storage") or {}
        if not isinstance(section, dict):
            logger.warning(f"Ignoring {config_path}: storage section is not a mapping")
            return cls()

        backend_str = str(section.get("backend", "memory")).lower()
        try:
            backend = BackendType(backend_str)
        except ValueError:
            logger.warning(
                f"Unknown storage backend {backend_str!r} in {config_path}, using memory"
            )
            backend = BackendType.MEMORY

        return cls(
            backend=backend,
            local_path=section.get("local_path"),
            sync_quota_bytes=section.get("sync_quota_bytes", SYNC_QUOTA_BYTES),
            sync_quota_bytes_per_item=section.get(
                "sync_quota_bytes_per_item", SYNC_QUOTA_BYTES_PER_ITEM
            ),
            local_quota_bytes=section.get("local_quota_bytes", LOCAL_QUOTA_BYTES),
            managed=dict(section.get("managed") or {}),
        )


def _int_env(name: str, default: int | None) -> int | None:
    value = os.environ.get(name)
    if value is None or value == "":
        return default
    if value.lower() in ("none", "unlimited"):
        return None
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Ignoring non-integer {name}={value!r}")
        return default
