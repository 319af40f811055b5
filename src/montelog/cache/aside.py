"""Cache-aside read path and write invalidation.

read_through() checks the cache before calling the loader and populates
the cache on a miss. invalidate() deletes keys after a write. Both treat the
cache as advisory: a failing cache degrades to the loader, and a failing
invalidation is logged and left to expire with its TTL.

Example:
    posts = await read_through(
        store,
        CacheKeys.posts_page(1),
        ttl=3600,
        loader=lambda: repo.list_page(1, 7),
        cache_name="posts_page",
    )
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import orjson

from montelog.cache.store import CacheResult, CacheStore
from montelog.observability.metrics import record_cache_hit, record_cache_miss

logger = logging.getLogger(__name__)

T = TypeVar("T")

Loader = Callable[[], Awaitable[T]]


def dumps(value: Any) -> str:
    """Serialize a value for storage."""
    return orjson.dumps(value).decode("utf-8")


def loads(raw: str) -> Any:
    """Deserialize a stored value."""
    return orjson.loads(raw)


async def read_through(
    store: CacheStore,
    key: str,
    ttl: int,
    loader: Loader[T],
    *,
    serialize: Callable[[T], str] = dumps,
    deserialize: Callable[[str], T] = loads,
    cache_name: str | None = None,
) -> T:
    """Return the cached value for key, or load, cache and return it.

    Loader errors propagate unchanged; cache errors never do.
    """
    label = cache_name or key
    cached = await store.get(key)

    if cached.hit:
        try:
            value = deserialize(cached.value)  # type: ignore[arg-type]
        except (orjson.JSONDecodeError, TypeError, ValueError) as e:
            logger.warning(f"Discarding undecodable cache entry {key}: {e}")
        else:
            record_cache_hit(label, cache_type=store.name)
            return value
    elif not cached.ok:
        logger.debug(f"Cache unavailable for {key}, reading from database")

    record_cache_miss(label, cache_type=store.name)
    value = await loader()
    await populate(store, key, value, ttl, serialize=serialize)
    return value


async def populate(
    store: CacheStore,
    key: str,
    value: T,
    ttl: int,
    *,
    serialize: Callable[[T], str] = dumps,
) -> CacheResult[None]:
    """Store a value unconditionally (best-effort)."""
    result = await store.set(key, serialize(value), ttl)
    if not result.ok:
        logger.warning(f"Could not populate cache entry {key}: {result.error}")
    return result


async def invalidate(store: CacheStore, *keys: str) -> CacheResult[int]:
    """Delete cache keys after a write (best-effort).

    The write has already succeeded when this runs; a failure here leaves a
    stale entry that expires with its TTL.
    """
    result = await store.delete(*keys)
    if result.ok:
        logger.debug(f"Invalidated {result.value} of {len(keys)} cache keys: {', '.join(keys)}")
    else:
        logger.warning(f"Cache invalidation failed for {', '.join(keys)}: {result.error}")
    return result
