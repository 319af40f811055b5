"""Tests for visitor counting and the daily visit gate."""

from __future__ import annotations

import asyncio
from datetime import date
from unittest.mock import patch

import pytest
from sqlalchemy import func, select

from montelog.cache import CacheKeys, CacheResult, MemoryCacheStore
from montelog.config import Settings
from montelog.persistence import Database, VisitorTable
from montelog.services import VisitorService

TODAY = date(2024, 5, 20)
USER_KEY = "203.0.113.7-Mozilla/5.0"


@pytest.fixture
def visitors(database: Database, cache: MemoryCacheStore, settings: Settings) -> VisitorService:
    return VisitorService(database, cache, settings, today=lambda: TODAY)


async def count_rows(database: Database) -> int:
    async with database.session() as session:
        result = await session.execute(select(func.count()).select_from(VisitorTable))
        return result.scalar_one()


class TestRecordVisit:
    @pytest.mark.asyncio
    async def test_first_visit_writes_row_and_gate(
        self, visitors: VisitorService, cache: MemoryCacheStore, database: Database
    ) -> None:
        recorded = await visitors.record_visit(USER_KEY)

        assert recorded is True
        assert await count_rows(database) == 1
        gate = CacheKeys.visitor_gate(USER_KEY, TODAY)
        assert (await cache.exists(gate)).value is True
        assert (await cache.ttl(gate)).value == 86400

    @pytest.mark.asyncio
    async def test_repeat_visit_is_gated(
        self, visitors: VisitorService, database: Database
    ) -> None:
        await visitors.record_visit(USER_KEY)

        assert await visitors.record_visit(USER_KEY) is False
        assert await count_rows(database) == 1

    @pytest.mark.asyncio
    async def test_concurrent_visits_store_one_row(
        self, visitors: VisitorService, cache: MemoryCacheStore, database: Database
    ) -> None:
        """Concurrent first visits may all pass the gate; the database keeps one row."""
        await asyncio.gather(*(visitors.record_visit(USER_KEY) for _ in range(10)))

        assert await count_rows(database) == 1
        stats = await visitors.get_stats()
        assert stats.today_visitors == 1
        assert stats.total_visitors == 1
        assert (await cache.ttl(CacheKeys.visitor_gate(USER_KEY, TODAY))).value == 86400

    @pytest.mark.asyncio
    async def test_gate_lost_still_deduplicates(
        self, visitors: VisitorService, cache: MemoryCacheStore, database: Database
    ) -> None:
        """Losing the gate (cache flush) does not double count."""
        await visitors.record_visit(USER_KEY)
        await cache.delete(CacheKeys.visitor_gate(USER_KEY, TODAY))

        await visitors.record_visit(USER_KEY)

        assert await count_rows(database) == 1

    @pytest.mark.asyncio
    async def test_next_day_counts_again(
        self, visitors: VisitorService, database: Database
    ) -> None:
        await visitors.record_visit(USER_KEY, date(2024, 5, 19))
        await visitors.record_visit(USER_KEY)

        assert await count_rows(database) == 2
        stats = await visitors.get_stats()
        assert stats.total_visitors == 1
        assert stats.today_visitors == 1


class TestVisitorStats:
    @pytest.mark.asyncio
    async def test_counts_distinct_keys(self, visitors: VisitorService) -> None:
        await visitors.record_visit("a-agent", date(2024, 5, 18))
        await visitors.record_visit("b-agent", date(2024, 5, 19))
        await visitors.record_visit("a-agent")
        await visitors.record_visit("c-agent")

        stats = await visitors.get_stats()

        assert stats.total_visitors == 3
        assert stats.today_visitors == 2

    @pytest.mark.asyncio
    async def test_empty(self, visitors: VisitorService) -> None:
        stats = await visitors.get_stats()

        assert stats.model_dump(by_alias=True) == {"totalVisitors": 0, "todayVisitors": 0}


class TestClearStaleGates:
    @pytest.mark.asyncio
    async def test_removes_only_past_days(
        self, visitors: VisitorService, cache: MemoryCacheStore
    ) -> None:
        await cache.set(CacheKeys.visitor_gate("a", date(2024, 5, 18)), "1", 86400)
        await cache.set(CacheKeys.visitor_gate("::1-b", date(2024, 5, 19)), "1", 86400)
        await cache.set(CacheKeys.visitor_gate("c", TODAY), "1", 86400)
        await cache.set("visitor:malformed", "1", 86400)
        await cache.set(CacheKeys.categories(), "[]", 86400)

        deleted = await visitors.clear_stale_gates()

        assert deleted == 2
        assert (await cache.exists(CacheKeys.visitor_gate("c", TODAY))).value is True
        assert (await cache.exists("visitor:malformed")).value is True
        assert (await cache.exists(CacheKeys.categories())).value is True

    @pytest.mark.asyncio
    async def test_nothing_to_clear(self, visitors: VisitorService) -> None:
        assert await visitors.clear_stale_gates() == 0

    @pytest.mark.asyncio
    async def test_deletes_in_batches(
        self, database: Database, cache: MemoryCacheStore, settings: Settings
    ) -> None:
        settings = settings.model_copy(update={"cache_scan_batch_size": 2})
        visitors = VisitorService(database, cache, settings, today=lambda: TODAY)
        for i in range(5):
            await cache.set(CacheKeys.visitor_gate(f"agent-{i}", date(2024, 5, 19)), "1", 86400)

        with patch.object(cache, "delete", wraps=cache.delete) as delete:
            deleted = await visitors.clear_stale_gates()

        assert deleted == 5
        assert [len(call.args) for call in delete.call_args_list] == [2, 2, 1]

    @pytest.mark.asyncio
    async def test_stops_when_delete_fails(
        self, database: Database, cache: MemoryCacheStore, settings: Settings
    ) -> None:
        settings = settings.model_copy(update={"cache_scan_batch_size": 2})
        visitors = VisitorService(database, cache, settings, today=lambda: TODAY)
        for i in range(5):
            await cache.set(CacheKeys.visitor_gate(f"agent-{i}", date(2024, 5, 19)), "1", 86400)

        results = [CacheResult.success(2), CacheResult.failure("connection reset")]
        with patch.object(cache, "delete", side_effect=results) as delete:
            deleted = await visitors.clear_stale_gates()

        assert deleted == 2
        assert delete.call_count == 2
