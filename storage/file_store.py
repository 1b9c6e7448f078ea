"""
Lectio - File-Backed Store

One JSON file per key under a directory. File names are the URL-quoted key,
so listing the directory recovers the key set. Writes go to a temporary file
that is atomically renamed over the target; concurrent writers of the same
key converge on whichever rename lands last.

Blocking file I/O runs in the default executor via asyncio.to_thread.
"""
from __future__ import annotations

import asyncio
import json
import os
import tempfile
from pathlib import Path
from typing import Any, List, Optional
from urllib.parse import quote, unquote

from core.errors import StoreError
from storage.base import KeyValueStore

_SUFFIX = ".json"


class FileKeyValueStore(KeyValueStore):
    """Persistent store rooted at a directory."""

    backend_name = "file"

    def __init__(self, root: Path):
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self.root / f"{quote(key, safe='')}{_SUFFIX}"

    def _read(self, key: str) -> Optional[Any]:
        path = self._path(key)
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError:
            return None
        except json.JSONDecodeError as e:
            raise StoreError(f"Corrupt store entry: {path.name}", key=key, backend=self.backend_name, cause=e) from e
        except OSError as e:
            raise StoreError(f"Failed to read store entry: {path.name}", key=key, backend=self.backend_name, cause=e) from e

    def _write(self, key: str, value: Any) -> None:
        path = self._path(key)
        fd, tmp_name = tempfile.mkstemp(dir=self.root, prefix=".tmp-", suffix=_SUFFIX)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(value, f, ensure_ascii=False)
            os.replace(tmp_name, path)
        except OSError as e:
            Path(tmp_name).unlink(missing_ok=True)
            raise StoreError(f"Failed to write store entry: {path.name}", key=key, backend=self.backend_name, cause=e) from e

    def _delete(self, key: str) -> bool:
        try:
            self._path(key).unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StoreError(f"Failed to delete store entry: {key}", key=key, backend=self.backend_name, cause=e) from e

    def _keys(self, prefix: str) -> List[str]:
        keys = []
        for path in self.root.glob(f"*{_SUFFIX}"):
            if path.name.startswith(".tmp-"):
                continue
            key = unquote(path.name[: -len(_SUFFIX)])
            if key.startswith(prefix):
                keys.append(key)
        return sorted(keys)

    async def get(self, key: str) -> Optional[Any]:
        return await asyncio.to_thread(self._read, key)

    async def set(self, key: str, value: Any) -> None:
        await asyncio.to_thread(self._write, key, value)

    async def delete(self, key: str) -> bool:
        return await asyncio.to_thread(self._delete, key)

    async def keys(self, prefix: str = "") -> List[str]:
        return await asyncio.to_thread(self._keys, prefix)
