"""
Lectio - Redis-Backed Store

Shares the durable namespace across processes. Values are JSON strings;
prefix listing uses SCAN so large keyspaces are not blocked.
"""
from __future__ import annotations

import json
from typing import Any, List, Optional

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from core.errors import StoreError
from storage.base import KeyValueStore


class RedisKeyValueStore(KeyValueStore):
    """Persistent store on a Redis server."""

    backend_name = "redis"

    def __init__(
        self,
        url: str = "redis://localhost:6379/0",
        client: Optional[aioredis.Redis] = None,
    ):
        self.url = url
        self._redis = client or aioredis.from_url(url, decode_responses=True)

    async def get(self, key: str) -> Optional[Any]:
        try:
            raw = await self._redis.get(key)
        except RedisError as e:
            raise StoreError(f"Redis GET failed: {e}", key=key, backend=self.backend_name, cause=e) from e
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError as e:
            raise StoreError(f"Corrupt Redis value: {key}", key=key, backend=self.backend_name, cause=e) from e

    async def set(self, key: str, value: Any) -> None:
        try:
            await self._redis.set(key, json.dumps(value, ensure_ascii=False))
        except RedisError as e:
            raise StoreError(f"Redis SET failed: {e}", key=key, backend=self.backend_name, cause=e) from e

    async def delete(self, key: str) -> bool:
        try:
            return bool(await self._redis.delete(key))
        except RedisError as e:
            raise StoreError(f"Redis DEL failed: {e}", key=key, backend=self.backend_name, cause=e) from e

    async def keys(self, prefix: str = "") -> List[str]:
        try:
            return [key async for key in self._redis.scan_iter(match=f"{prefix}*")]
        except RedisError as e:
            raise StoreError(f"Redis SCAN failed: {e}", backend=self.backend_name, cause=e) from e

    async def close(self) -> None:
        await self._redis.aclose()
