"""Cache layer for Monte-Log.

Provides the cache-aside pattern in front of the database:
- CacheStore backends (Redis, in-memory) returning explicit CacheResult outcomes
- read_through() for cached reads, invalidate() after writes
- DeduplicationGate for once-per-day visit recording
"""

from montelog.cache.aside import invalidate, populate, read_through
from montelog.cache.gate import DeduplicationGate
from montelog.cache.keys import CacheKeys
from montelog.cache.redis import RedisCacheStore, create_redis_client
from montelog.cache.runtime import create_cache_store, is_memory_backend
from montelog.cache.store import CacheResult, CacheStore, MemoryCacheStore

__all__ = [
    # Stores
    "CacheResult",
    "CacheStore",
    "MemoryCacheStore",
    "RedisCacheStore",
    "create_cache_store",
    "create_redis_client",
    "is_memory_backend",
    # Patterns
    "CacheKeys",
    "DeduplicationGate",
    "invalidate",
    "populate",
    "read_through",
]
