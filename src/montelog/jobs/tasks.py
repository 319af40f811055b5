"""Recurring cache maintenance jobs.

- refresh_post_cache: reload posts_page_1 so readers rarely hit a cold page
- clear_visitor_gates: drop visit gates left over from previous days

Example:
    scheduler = JobScheduler()
    register_default_jobs(scheduler, context.posts, context.visitors, settings)
    await scheduler.start()
"""

from __future__ import annotations

import logging

from montelog.config import Settings
from montelog.jobs.scheduler import JobFunc, JobScheduler
from montelog.services import PostService, VisitorService

logger = logging.getLogger(__name__)

REFRESH_POST_CACHE = "refresh_post_cache"
CLEAR_VISITOR_GATES = "clear_visitor_gates"


def refresh_post_cache_job(posts: PostService) -> JobFunc:
    async def refresh_post_cache() -> dict[str, int]:
        count = await posts.refresh_post_cache()
        logger.info(f"posts_page_1 refreshed with {count} posts")
        return {"cached_posts": count}

    return refresh_post_cache


def clear_visitor_gates_job(visitors: VisitorService) -> JobFunc:
    async def clear_visitor_gates() -> dict[str, int]:
        deleted = await visitors.clear_stale_gates()
        logger.info(f"Cleared {deleted} stale visitor gates")
        return {"deleted_gates": deleted}

    return clear_visitor_gates


def register_default_jobs(
    scheduler: JobScheduler,
    posts: PostService,
    visitors: VisitorService,
    settings: Settings,
) -> None:
    """Register the cache maintenance jobs with their configured schedules."""
    scheduler.add_job(
        REFRESH_POST_CACHE,
        refresh_post_cache_job(posts),
        cron=settings.post_cache_refresh_cron,
    )
    scheduler.add_job(
        CLEAR_VISITOR_GATES,
        clear_visitor_gates_job(visitors),
        cron=settings.visitor_gate_cleanup_cron,
    )
