"""
Lectio - Hot Tier

In-process LRU cache in front of the durable store:
- O(1) get, put and eviction using OrderedDict
- Bounded entry count
- Tier TTL measured from when the value entered this process
- Thread-safe operations

The tier TTL is independent of each value's own ttl; the tiered cache checks
the value's ttl separately.
"""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import (
    Any,
    Callable,
    Dict,
    Generic,
    List,
    Optional,
    TypeVar,
)

T = TypeVar("T")


@dataclass
class _Slot(Generic[T]):
    value: T
    inserted_at: float


@dataclass
class CacheStats:
    """Statistics for cache monitoring."""

    hits: int = 0
    misses: int = 0
    evictions: int = 0
    entry_count: int = 0

    @property
    def hit_rate(self) -> float:
        """Calculate cache hit rate."""
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "hit_rate": self.hit_rate,
            "evictions": self.evictions,
            "entry_count": self.entry_count,
        }


class LRUCache(Generic[T]):
    """
    O(1) LRU cache with bounded size and TTL.

    Usage:
        cache = LRUCache[CacheEntry](max_size=256, ttl_seconds=3600)
        cache.put("key", entry)
        result = cache.get("key")
    """

    def __init__(
        self,
        max_size: int = 256,
        ttl_seconds: Optional[float] = 3600.0,
        clock: Callable[[], float] = time.time,
    ):
        self.max_size = max_size
        self.ttl_seconds = ttl_seconds
        self._clock = clock

        self._cache: OrderedDict[str, _Slot[T]] = OrderedDict()
        self._lock = threading.RLock()
        self._stats = CacheStats()

    def _is_expired(self, slot: _Slot[T]) -> bool:
        if self.ttl_seconds is None:
            return False
        return self._clock() - slot.inserted_at > self.ttl_seconds

    def _evict_oldest(self) -> None:
        """Evict the least recently used entry. Must be called with lock held."""
        if self._cache:
            self._cache.popitem(last=False)
            self._stats.evictions += 1

    def get(self, key: str) -> Optional[T]:
        """Get a value and mark it most recently used."""
        with self._lock:
            slot = self._cache.get(key)

            if slot is None:
                self._stats.misses += 1
                return None

            if self._is_expired(slot):
                self._cache.pop(key)
                self._stats.entry_count = len(self._cache)
                self._stats.misses += 1
                return None

            self._cache.move_to_end(key)
            self._stats.hits += 1
            return slot.value

    def put(self, key: str, value: T) -> None:
        """Insert or replace a value, evicting the LRU entry when full."""
        with self._lock:
            self._cache.pop(key, None)
            while len(self._cache) >= self.max_size:
                self._evict_oldest()
            self._cache[key] = _Slot(value=value, inserted_at=self._clock())
            self._stats.entry_count = len(self._cache)

    def delete(self, key: str) -> bool:
        """Remove a key from the cache."""
        with self._lock:
            removed = self._cache.pop(key, None) is not None
            self._stats.entry_count = len(self._cache)
            return removed

    def delete_prefix(self, prefix: str) -> int:
        """Remove every key starting with prefix."""
        with self._lock:
            doomed: List[str] = [key for key in self._cache if key.startswith(prefix)]
            for key in doomed:
                del self._cache[key]
            self._stats.entry_count = len(self._cache)
            return len(doomed)

    def clear(self) -> None:
        """Clear all entries from the cache."""
        with self._lock:
            self._cache.clear()
            self._stats = CacheStats()

    def __len__(self) -> int:
        return len(self._cache)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            slot = self._cache.get(key)
            return slot is not None and not self._is_expired(slot)

    def get_stats(self) -> CacheStats:
        """Get cache statistics."""
        with self._lock:
            return CacheStats(
                hits=self._stats.hits,
                misses=self._stats.misses,
                evictions=self._stats.evictions,
                entry_count=len(self._cache),
            )
