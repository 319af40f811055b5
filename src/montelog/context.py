"""Application context: the single owner of client handles.

The database engine and cache client are constructed here, injected into
the services, and closed here. The HTTP app keeps the context on app.state;
CLI commands open one with app_context().
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator

from montelog.cache import CacheStore, create_cache_store
from montelog.config import Settings
from montelog.jobs import JobScheduler, register_default_jobs
from montelog.persistence import Database
from montelog.services import (
    AuthService,
    CategoryService,
    LikeService,
    PostService,
    VisitorService,
)

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    settings: Settings
    database: Database
    cache: CacheStore
    posts: PostService
    categories: CategoryService
    likes: LikeService
    visitors: VisitorService
    auth: AuthService
    scheduler: JobScheduler

    @classmethod
    def build(
        cls,
        settings: Settings,
        database: Database | None = None,
        cache: CacheStore | None = None,
    ) -> AppContext:
        """Wire services to the given (or newly created) client handles."""
        database = database or Database.from_settings(settings)
        cache = cache or create_cache_store(settings)

        posts = PostService(database, cache, settings)
        visitors = VisitorService(database, cache, settings)

        scheduler = JobScheduler(check_interval=settings.scheduler_check_interval)
        register_default_jobs(scheduler, posts, visitors, settings)

        return cls(
            settings=settings,
            database=database,
            cache=cache,
            posts=posts,
            categories=CategoryService(database, cache, settings),
            likes=LikeService(database),
            visitors=visitors,
            auth=AuthService(database, cache, settings),
            scheduler=scheduler,
        )

    async def start(self, create_tables: bool = False, run_scheduler: bool = False) -> None:
        if create_tables:
            await self.database.create_all()
        if not await self.cache.ping():
            logger.warning(f"Cache backend {self.cache.name} unreachable; serving from database")
        if run_scheduler:
            await self.scheduler.start()

    async def close(self) -> None:
        if self.scheduler.running:
            await self.scheduler.stop()
        await self.cache.close()
        await self.database.close()


@asynccontextmanager
async def app_context(
    settings: Settings, create_tables: bool = False
) -> AsyncIterator[AppContext]:
    """Build, start and close a context for one-off commands."""
    context = AppContext.build(settings)
    await context.start(create_tables=create_tables)
    try:
        yield context
    finally:
        await context.close()
