"""
Lectio - Durable Key/Value Store Interface

A process-wide persistent namespace of string keys and JSON-serializable
values. Keys carry a category prefix (`content-cache:`, `catalog:`,
`preference:`) so callers can clear one category without touching another.

Writes are whole-value, last-write-wins. Implementations must not hold a
lock across an await.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, List, Optional


class KeyValueStore(ABC):
    """Abstract async key/value store."""

    backend_name: str = "abstract"

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """Return the decoded value, or None when absent."""

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        """Store value under key, replacing any previous value."""

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Remove key. Returns True if something was removed."""

    @abstractmethod
    async def keys(self, prefix: str = "") -> List[str]:
        """List keys starting with prefix."""

    async def delete_prefix(self, prefix: str) -> int:
        """Remove every key starting with prefix. Returns the count removed."""
        removed = 0
        for key in await self.keys(prefix):
            if await self.delete(key):
                removed += 1
        return removed

    async def close(self) -> None:
        """Release backend resources."""
