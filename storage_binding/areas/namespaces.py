"""Selection of a storage area by name."""

from __future__ import annotations

from collections.abc import Mapping

from ..config import BackendType, StorageConfig
from ..exceptions import StorageAreaError
from .base import AreaName, StorageArea
from .file import FileStorageArea
from .memory import MemoryStorageArea


class StorageNamespaces:
    """The three isolated areas of one backing store."""

    def __init__(self, areas: Mapping[str, StorageArea]) -> None:
        self._areas = {str(AreaName(k).value): v for k, v in areas.items()}

    def area(self, name: str | AreaName) -> StorageArea:
        """Return the area called ``name``.

        Raises:
            StorageAreaError: If no such area exists
        """
        key = name.value if isinstance(name, AreaName) else name
        try:
            return self._areas[key]
        except KeyError:
            raise StorageAreaError(str(key)) from None

    def __contains__(self, name: object) -> bool:
        if isinstance(name, AreaName):
            name = name.value
        return name in self._areas

    @property
    def sync(self) -> StorageArea:
        return self.area(AreaName.SYNC)

    @property
    def local(self) -> StorageArea:
        return self.area(AreaName.LOCAL)

    @property
    def managed(self) -> StorageArea:
        return self.area(AreaName.MANAGED)


def create_namespaces(config: StorageConfig | None = None) -> StorageNamespaces:
    """Build the sync, local and managed areas described by ``config``."""
    config = config or StorageConfig()

    if config.backend == BackendType.FILE:
        base_path = config.base_path
        return StorageNamespaces(
            {
                AreaName.SYNC: FileStorageArea(
                    base_path,
                    name=AreaName.SYNC.value,
                    quota_bytes=config.sync_quota_bytes,
                    quota_bytes_per_item=config.sync_quota_bytes_per_item,
                ),
                AreaName.LOCAL: FileStorageArea(
                    base_path,
                    name=AreaName.LOCAL.value,
                    quota_bytes=config.local_quota_bytes,
                ),
                AreaName.MANAGED: FileStorageArea(
                    base_path,
                    name=AreaName.MANAGED.value,
                    initial=config.managed,
                    read_only=True,
                ),
            }
        )

    return StorageNamespaces(
        {
            AreaName.SYNC: MemoryStorageArea(
                name=AreaName.SYNC.value,
                quota_bytes=config.sync_quota_bytes,
                quota_bytes_per_item=config.sync_quota_bytes_per_item,
            ),
            AreaName.LOCAL: MemoryStorageArea(
                name=AreaName.LOCAL.value,
                quota_bytes=config.local_quota_bytes,
            ),
            AreaName.MANAGED: MemoryStorageArea(
                name=AreaName.MANAGED.value,
                initial=config.managed,
                read_only=True,
            ),
        }
    )
