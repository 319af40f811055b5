"""Cache store contract and outcome type.

Every cache operation is advisory: the application must keep working from the
database when the cache is down. Stores therefore never raise to callers;
each operation returns a CacheResult that the call site branches on.

- CacheStore: abstract interface shared by all backends
- MemoryCacheStore: in-process backend for development and tests
"""

from __future__ import annotations

import fnmatch
import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class CacheResult(Generic[T]):
    """Outcome of a single cache operation.

    ok=False means the backend failed; value is then always None.
    For reads, ok=True with value=None is a plain miss.
    """

    ok: bool
    value: T | None = None
    error: str | None = None

    @property
    def hit(self) -> bool:
        return self.ok and self.value is not None

    @classmethod
    def success(cls, value: T | None = None) -> CacheResult[T]:
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: BaseException | str) -> CacheResult[T]:
        return cls(ok=False, error=str(error))


class CacheStore(ABC):
    """Key/value store with per-key expiry."""

    #: Label used in logs and metrics
    name: str = "cache"

    @abstractmethod
    async def get(self, key: str) -> CacheResult[str]:
        """Get a value. Expired or missing keys are a successful miss."""

    @abstractmethod
    async def set(self, key: str, value: str, ttl_seconds: int) -> CacheResult[None]:
        """Store a value with a TTL in seconds."""

    @abstractmethod
    async def delete(self, *keys: str) -> CacheResult[int]:
        """Delete keys. Missing keys are not an error; value is the deleted count."""

    @abstractmethod
    async def exists(self, key: str) -> CacheResult[bool]:
        """Check presence of a key."""

    @abstractmethod
    async def ttl(self, key: str) -> CacheResult[int]:
        """Remaining TTL in seconds, None if the key is absent."""

    @abstractmethod
    async def scan_prefix(self, pattern: str) -> CacheResult[list[str]]:
        """Collect keys matching a glob pattern using incremental cursoring."""

    @abstractmethod
    async def ping(self) -> bool:
        """Check backend connectivity."""

    async def close(self) -> None:
        """Release backend resources."""


@dataclass
class _Entry:
    value: str
    expires_at: float


class MemoryCacheStore(CacheStore):
    """In-process cache store.

    Expiry is evaluated lazily on access: an entry read at or after its
    expiry timestamp is absent. The clock is injectable for tests.
    """

    name = "memory"

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        scan_batch_size: int = 100,
    ) -> None:
        self._clock = clock
        self._entries: dict[str, _Entry] = {}
        self.scan_batch_size = scan_batch_size

    def _live(self, key: str) -> _Entry | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() >= entry.expires_at:
            del self._entries[key]
            return None
        return entry

    async def get(self, key: str) -> CacheResult[str]:
        entry = self._live(key)
        return CacheResult.success(entry.value if entry else None)

    async def set(self, key: str, value: str, ttl_seconds: int) -> CacheResult[None]:
        if ttl_seconds <= 0:
            return CacheResult.failure(f"invalid TTL {ttl_seconds} for {key}")
        self._entries[key] = _Entry(value=value, expires_at=self._clock() + ttl_seconds)
        return CacheResult.success()

    async def delete(self, *keys: str) -> CacheResult[int]:
        deleted = 0
        for key in keys:
            if self._live(key) is not None:
                del self._entries[key]
                deleted += 1
        return CacheResult.success(deleted)

    async def exists(self, key: str) -> CacheResult[bool]:
        return CacheResult.success(self._live(key) is not None)

    async def ttl(self, key: str) -> CacheResult[int]:
        entry = self._live(key)
        if entry is None:
            return CacheResult.success(None)
        return CacheResult.success(int(entry.expires_at - self._clock()))

    async def scan_prefix(self, pattern: str) -> CacheResult[list[str]]:
        # Snapshot the key list so deletes during iteration are safe
        keys = list(self._entries)
        matched: list[str] = []
        for start in range(0, len(keys), self.scan_batch_size):
            for key in keys[start : start + self.scan_batch_size]:
                if fnmatch.fnmatchcase(key, pattern) and self._live(key) is not None:
                    matched.append(key)
        return CacheResult.success(matched)

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        self._entries.clear()
