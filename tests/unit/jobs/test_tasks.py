"""Tests for the cache maintenance jobs."""

from __future__ import annotations

from datetime import date

import pytest

from montelog.cache import CacheKeys, MemoryCacheStore
from montelog.context import AppContext
from montelog.jobs import CLEAR_VISITOR_GATES, REFRESH_POST_CACHE


class TestDefaultJobs:
    def test_registered_with_configured_schedules(self, context: AppContext) -> None:
        refresh = context.scheduler.get_job(REFRESH_POST_CACHE)
        cleanup = context.scheduler.get_job(CLEAR_VISITOR_GATES)

        assert refresh.cron == "0 * * * *"
        assert cleanup.cron == "0 0 * * *"

    @pytest.mark.asyncio
    async def test_refresh_post_cache_job(
        self, context: AppContext, cache: MemoryCacheStore, seed_posts
    ) -> None:
        await seed_posts(3)

        assert await context.scheduler.run_now(REFRESH_POST_CACHE) is True

        assert (await cache.get(CacheKeys.posts_page(1))).hit

    @pytest.mark.asyncio
    async def test_clear_visitor_gates_job(
        self, context: AppContext, cache: MemoryCacheStore
    ) -> None:
        stale = CacheKeys.visitor_gate("a-agent", date(2000, 1, 1))
        await cache.set(stale, "1", 86400)

        assert await context.scheduler.run_now(CLEAR_VISITOR_GATES) is True

        assert (await cache.exists(stale)).value is False
