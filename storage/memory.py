"""
Lectio - In-Memory Store

Dict-backed store for tests and ephemeral runs. Values are round-tripped
through JSON so callers see the same types a persistent backend returns.
"""
from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from storage.base import KeyValueStore


class MemoryKeyValueStore(KeyValueStore):
    """Non-persistent store."""

    backend_name = "memory"

    def __init__(self) -> None:
        self._data: Dict[str, str] = {}

    async def get(self, key: str) -> Optional[Any]:
        raw = self._data.get(key)
        return None if raw is None else json.loads(raw)

    async def set(self, key: str, value: Any) -> None:
        self._data[key] = json.dumps(value)

    async def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    async def keys(self, prefix: str = "") -> List[str]:
        return [key for key in self._data if key.startswith(prefix)]

    def __len__(self) -> int:
        return len(self._data)
