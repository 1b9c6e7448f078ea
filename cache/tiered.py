"""
Lectio - Two-Tier Cache

A namespaced cache with a hot in-process tier over the durable store.

Read path:  hot tier -> durable tier (promoted to hot on hit) -> miss.
Write path: write-through to both tiers, replacing any previous value.

Every stored value carries its own ttl. A value older than its ttl is a miss
and is deleted from both tiers. Store failures degrade to a miss on read and
to a hot-only write on write; they are logged and never raised from get/put.
"""

from __future__ import annotations

import time
from typing import Any, Callable, Optional, Union

from opentelemetry import trace

from cache.memory import LRUCache
from core.errors import StoreError
from core.types import CacheEntry, ChapterKey
from observability.logging import get_logger
from observability.metrics import LectioMetrics, get_metrics
from storage.base import KeyValueStore

tracer = trace.get_tracer(__name__)
logger = get_logger(__name__)

CacheKey = Union[str, ChapterKey]


class TieredCache:
    """Namespaced hot + durable cache of CacheEntry envelopes."""

    def __init__(
        self,
        namespace: str,
        store: KeyValueStore,
        hot_ttl: float,
        hot_max_entries: int = 256,
        clock: Callable[[], float] = time.time,
        metrics: Optional[LectioMetrics] = None,
    ):
        self.namespace = namespace
        self.store = store
        self._clock = clock
        self._hot: LRUCache[CacheEntry[Any]] = LRUCache(
            max_size=hot_max_entries,
            ttl_seconds=hot_ttl,
            clock=clock,
        )
        self._metrics = metrics or get_metrics()

    @property
    def hot(self) -> LRUCache[CacheEntry[Any]]:
        return self._hot

    def full_key(self, key: CacheKey) -> str:
        return f"{self.namespace}:{key}"

    async def get(self, key: CacheKey) -> Optional[CacheEntry[Any]]:
        """Return a live entry, or None when absent or expired."""
        full_key = self.full_key(key)
        now = self._clock()

        with tracer.start_as_current_span("cache.get") as span:
            span.set_attribute("cache.namespace", self.namespace)

            entry = self._hot.get(full_key)
            if entry is not None:
                if not entry.is_expired(now):
                    span.set_attribute("cache.tier", "hot")
                    self._metrics.record_cache_hit(self.namespace, "hot")
                    return entry
                await self._evict(full_key)
                span.set_attribute("cache.tier", "expired")
                self._metrics.record_cache_miss(self.namespace)
                return None

            entry = await self._read_durable(full_key)
            if entry is None:
                span.set_attribute("cache.tier", "miss")
                self._metrics.record_cache_miss(self.namespace)
                return None

            if entry.is_expired(now):
                logger.debug("Expired cache entry dropped", key=full_key, age=entry.age(now), ttl=entry.ttl)
                await self._evict(full_key)
                span.set_attribute("cache.tier", "expired")
                self._metrics.record_cache_miss(self.namespace)
                return None

            self._hot.put(full_key, entry)
            span.set_attribute("cache.tier", "durable")
            self._metrics.record_cache_hit(self.namespace, "durable")
            return entry

    async def put(self, key: CacheKey, payload: Any, ttl: float) -> CacheEntry[Any]:
        """Write through to both tiers."""
        full_key = self.full_key(key)
        entry: CacheEntry[Any] = CacheEntry(payload=payload, written_at=self._clock(), ttl=ttl)

        self._hot.put(full_key, entry)
        try:
            await self.store.set(full_key, entry.to_envelope())
        except StoreError as e:
            logger.warning("Durable cache write failed", key=full_key, error=str(e))
        return entry

    async def delete(self, key: CacheKey) -> None:
        await self._evict(self.full_key(key))

    async def clear(self) -> int:
        """
        Remove this namespace from both tiers.

        Returns the number of durable entries removed. StoreError propagates.
        """
        prefix = f"{self.namespace}:"
        self._hot.delete_prefix(prefix)
        removed = await self.store.delete_prefix(prefix)
        logger.info("Cache namespace cleared", namespace=self.namespace, removed=removed)
        return removed

    async def _read_durable(self, full_key: str) -> Optional[CacheEntry[Any]]:
        try:
            envelope = await self.store.get(full_key)
        except StoreError as e:
            logger.warning("Durable cache read failed", key=full_key, error=str(e))
            return None
        if envelope is None:
            return None
        try:
            return CacheEntry.from_envelope(envelope)
        except (KeyError, TypeError, ValueError):
            logger.warning("Malformed cache envelope dropped", key=full_key)
            await self._evict(full_key)
            return None

    async def _evict(self, full_key: str) -> None:
        self._hot.delete(full_key)
        try:
            await self.store.delete(full_key)
        except StoreError as e:
            logger.warning("Durable cache delete failed", key=full_key, error=str(e))
