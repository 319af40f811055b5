"""Visitor analytics.

A visit is recorded at most once per client key per UTC day. The
visitor:{user_key}:{date} gate skips the database for repeat visits within
the day; the (user_key, visited_date) unique constraint keeps the count
right when concurrent requests both get past the gate.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date, datetime, timezone

from montelog.cache import CacheKeys, CacheStore, DeduplicationGate
from montelog.config import Settings
from montelog.models import VisitorStats
from montelog.persistence import Database, VisitorRepository

logger = logging.getLogger(__name__)


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


class VisitorService:
    def __init__(
        self,
        database: Database,
        cache: CacheStore,
        settings: Settings,
        today: Callable[[], date] = utc_today,
    ):
        self.database = database
        self.cache = cache
        self.gate = DeduplicationGate(cache, settings.visitor_gate_ttl)
        self.delete_batch_size = settings.cache_scan_batch_size
        self.today = today

    async def record_visit(self, user_key: str, visited: date | None = None) -> bool:
        """Record a visit for today (or the given day).

        Returns False if the gate showed the visit was already recorded.
        """
        visited = visited or self.today()

        async def write() -> None:
            async with self.database.session() as session:
                inserted = await VisitorRepository(session).add_visit(user_key, visited)
            if not inserted:
                logger.debug(f"Visit for {user_key} on {visited} already stored")

        return await self.gate.run_once(CacheKeys.visitor_gate(user_key, visited), write)

    async def get_stats(self) -> VisitorStats:
        """Distinct visitors overall and for the current day."""
        async with self.database.session() as session:
            repo = VisitorRepository(session)
            total = await repo.count_total()
            today = await repo.count_on(self.today())
        return VisitorStats(total_visitors=total, today_visitors=today)

    async def clear_stale_gates(self) -> int:
        """Delete gates left over from previous days.

        Gates carry their own TTL; this keeps the keyspace small after a day
        rollover. Returns the number of keys deleted.
        """
        scanned = await self.cache.scan_prefix(CacheKeys.visitor_gate_pattern())
        if not scanned.ok:
            logger.warning(f"Could not scan visitor gates: {scanned.error}")
            return 0

        today = self.today()
        stale = []
        for key in scanned.value or []:
            parsed = CacheKeys.parse_visitor_gate(key)
            if parsed is not None and parsed[1] < today:
                stale.append(key)

        if not stale:
            return 0

        total = 0
        for start in range(0, len(stale), self.delete_batch_size):
            batch = stale[start : start + self.delete_batch_size]
            deleted = await self.cache.delete(*batch)
            if not deleted.ok:
                logger.warning(
                    f"Could not delete {len(stale) - start} stale visitor gates: {deleted.error}"
                )
                break
            total += deleted.value or 0
        return total
