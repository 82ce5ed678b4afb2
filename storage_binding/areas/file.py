"""
File-backed storage area.

Persists one namespace as a single JSON document on disk:
- Atomic writes using temp file + rename
- The document is re-read on every access, so several processes
  (or several areas pointing at the same file) observe each other's writes

Directory structure:
    {base_path}/
      sync.json
      local.json
      managed.json
"""

from __future__ import annotations

import json
import os
import tempfile
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import aiofiles
import aiofiles.os

from ..exceptions import BackingStoreError
from .memory import MemoryStorageArea


async def read_json(path: Path, area: str | None = None) -> dict[str, Any] | None:
    """Read a JSON document.

    Args:
        path: Path to JSON file
        area: Area name for error details

    Returns:
        Parsed JSON object or None if the file doesn't exist
    """
    try:
        if not await aiofiles.os.path.exists(path):
            return None
        async with aiofiles.open(path, encoding="utf-8") as f:
            content = await f.read()
    except OSError as e:
        raise BackingStoreError(f"Cannot read {path}", area=area, operation="read", cause=e) from e

    if not content.strip():
        return None
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise BackingStoreError(
            f"Corrupt storage file {path}", area=area, operation="read", cause=e
        ) from e
    if not isinstance(data, dict):
        raise BackingStoreError(
            f"Storage file {path} does not hold an object", area=area, operation="read"
        )
    return data


async def write_json_atomic(path: Path, data: dict[str, Any], area: str | None = None) -> None:
    """Write a JSON document atomically using temp file + rename.

    Args:
        path: Target path for JSON file
        data: Data to serialize as JSON
        area: Area name for error details
    """
    try:
        await aiofiles.os.makedirs(path.parent, exist_ok=True)
        fd, temp_path = tempfile.mkstemp(dir=path.parent, prefix=".tmp_", suffix=".json")
    except OSError as e:
        raise BackingStoreError(
            f"Cannot write {path}", area=area, operation="write", cause=e
        ) from e

    try:
        os.close(fd)
        async with aiofiles.open(temp_path, "w", encoding="utf-8") as f:
            await f.write(json.dumps(data, indent=2))
            await f.flush()
            os.fsync(f.fileno())

        # Atomic rename
        await aiofiles.os.rename(temp_path, path)
    except OSError as e:
        try:
            await aiofiles.os.remove(temp_path)
        except OSError:
            pass
        raise BackingStoreError(
            f"Cannot write {path}", area=area, operation="write", cause=e
        ) from e


class FileStorageArea(MemoryStorageArea):
    """Storage area persisted to ``{base_path}/{name}.json``."""

    def __init__(
        self,
        base_path: str | Path,
        name: str = "local",
        initial: Mapping[str, Any] | None = None,
        quota_bytes: int | None = None,
        quota_bytes_per_item: int | None = None,
        read_only: bool = False,
    ) -> None:
        """Initialize the area.

        Args:
            base_path: Directory holding one JSON file per area
            name: Area name, also the file stem
            initial: Items used when the file does not exist yet
            quota_bytes: Maximum total bytes, or None for unlimited
            quota_bytes_per_item: Maximum bytes per item, or None for unlimited
            read_only: Reject every mutation
        """
        super().__init__(
            name=name,
            initial=initial,
            quota_bytes=quota_bytes,
            quota_bytes_per_item=quota_bytes_per_item,
            read_only=read_only,
        )
        self.path = Path(base_path).expanduser() / f"{name}.json"

    async def _load(self) -> dict[str, Any]:
        data = await read_json(self.path, self.name)
        if data is None:
            return dict(self._data)
        return data

    async def _commit(self, data: dict[str, Any]) -> None:
        await write_json_atomic(self.path, data, self.name)
