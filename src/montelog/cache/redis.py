"""Redis cache store for Monte-Log.

Wraps the redis-py async client. Values are stored as UTF-8 strings.
Every backend error is caught here, logged and returned as a failed
CacheResult so that an unavailable Redis only degrades latency.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable
from typing import TYPE_CHECKING, cast

import redis.asyncio as redis
from redis.exceptions import RedisError

from montelog.cache.store import CacheResult, CacheStore
from montelog.observability.metrics import record_cache_error

if TYPE_CHECKING:
    from redis.asyncio import Redis

logger = logging.getLogger(__name__)

# Redis and socket level failures; anything else is a programming error
BACKEND_ERRORS = (RedisError, OSError)


def create_redis_client(url: str, password: str | None = None) -> Redis:
    """Create a Redis client with its own connection pool.

    The caller owns the client and must close it (see RedisCacheStore.close).
    """
    return redis.from_url(  # type: ignore[no-untyped-call]
        url,
        password=password,
        encoding="utf-8",
        decode_responses=True,
    )


class RedisCacheStore(CacheStore):
    """CacheStore backed by Redis."""

    name = "redis"

    def __init__(self, client: Redis, scan_batch_size: int = 100):
        self.client = client
        self.scan_batch_size = scan_batch_size

    def _failed(self, operation: str, key: str, exc: BaseException) -> CacheResult:
        logger.warning(f"Redis {operation} failed for {key}: {exc}")
        record_cache_error(operation, cache_type=self.name)
        return CacheResult.failure(exc)

    async def get(self, key: str) -> CacheResult[str]:
        try:
            value = await self.client.get(key)
        except BACKEND_ERRORS as e:
            return self._failed("get", key, e)
        return CacheResult.success(cast(str | None, value))

    async def set(self, key: str, value: str, ttl_seconds: int) -> CacheResult[None]:
        try:
            await self.client.set(key, value, ex=ttl_seconds)
        except BACKEND_ERRORS as e:
            return self._failed("set", key, e)
        return CacheResult.success()

    async def delete(self, *keys: str) -> CacheResult[int]:
        if not keys:
            return CacheResult.success(0)
        try:
            deleted = await self.client.delete(*keys)
        except BACKEND_ERRORS as e:
            return self._failed("delete", ",".join(keys), e)
        return CacheResult.success(int(deleted))

    async def exists(self, key: str) -> CacheResult[bool]:
        try:
            count = await self.client.exists(key)
        except BACKEND_ERRORS as e:
            return self._failed("exists", key, e)
        return CacheResult.success(bool(count))

    async def ttl(self, key: str) -> CacheResult[int]:
        try:
            remaining = await self.client.ttl(key)
        except BACKEND_ERRORS as e:
            return self._failed("ttl", key, e)
        # -2: no such key, -1: no expiry
        if remaining == -2:
            return CacheResult.success(None)
        return CacheResult.success(int(remaining))

    async def scan_prefix(self, pattern: str) -> CacheResult[list[str]]:
        keys: list[str] = []
        try:
            # SCAN walks the keyspace in batches instead of blocking like KEYS
            async for key in self.client.scan_iter(match=pattern, count=self.scan_batch_size):
                keys.append(key)
        except BACKEND_ERRORS as e:
            return self._failed("scan", pattern, e)
        return CacheResult.success(keys)

    async def ping(self) -> bool:
        try:
            await cast(Awaitable[bool], self.client.ping())
            return True
        except BACKEND_ERRORS:
            return False

    async def close(self) -> None:
        await self.client.aclose()
