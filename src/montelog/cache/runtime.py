"""Runtime wiring for the cache store."""

from __future__ import annotations

import logging

from montelog.cache.redis import RedisCacheStore, create_redis_client
from montelog.cache.store import CacheStore, MemoryCacheStore
from montelog.config import Settings

logger = logging.getLogger(__name__)

MEMORY_BACKENDS = frozenset({"memory", "inmemory", "in_memory"})


def is_memory_backend(settings: Settings) -> bool:
    """True if the configured cache lives only inside the current process."""
    return settings.cache_backend.lower() in MEMORY_BACKENDS


def create_cache_store(settings: Settings) -> CacheStore:
    """Create a cache store based on configuration."""
    if is_memory_backend(settings):
        return MemoryCacheStore(scan_batch_size=settings.cache_scan_batch_size)

    if settings.cache_backend.lower() == "redis":
        client = create_redis_client(settings.redis_url, settings.redis_password)
        return RedisCacheStore(client, scan_batch_size=settings.cache_scan_batch_size)

    raise ValueError("Unsupported cache_backend. Supported values: memory, redis.")
