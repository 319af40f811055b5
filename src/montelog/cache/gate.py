"""Once-per-interval deduplication gate.

The presence of a gate key (its value is irrelevant) means the event was
already recorded for the interval and the write can be skipped. The
check-then-act sequence is not atomic: two concurrent callers may both miss
the gate and both write. The underlying write must therefore be idempotent
on its own (a unique constraint whose conflict counts as success); the gate
only saves redundant round trips.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from montelog.cache.store import CacheStore

logger = logging.getLogger(__name__)

GATE_VALUE = "1"


class DeduplicationGate:
    """Cache-backed gate in front of an idempotent write."""

    def __init__(self, store: CacheStore, ttl: int):
        self.store = store
        self.ttl = ttl

    async def is_open(self, key: str) -> bool:
        """True if the write for key still has to happen.

        An unavailable cache counts as open so the write is attempted.
        """
        present = await self.store.exists(key)
        if not present.ok:
            logger.warning(f"Gate check failed for {key}, falling through: {present.error}")
            return True
        return not present.value

    async def run_once(self, key: str, write: Callable[[], Awaitable[None]]) -> bool:
        """Run write unless the gate for key is already closed.

        Returns True if the write ran. Errors from write propagate and leave
        the gate open.
        """
        if not await self.is_open(key):
            return False

        await write()

        closed = await self.store.set(key, GATE_VALUE, self.ttl)
        if not closed.ok:
            logger.warning(f"Could not close gate {key}: {closed.error}")
        return True
