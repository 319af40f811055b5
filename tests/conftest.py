"""Global pytest fixtures.

Service and API tests run against a SQLite file database (aiosqlite) and the
in-process cache store, so no external services are needed.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from montelog.api.app import create_app
from montelog.cache import MemoryCacheStore
from montelog.config import Settings
from montelog.context import AppContext
from montelog.persistence import Database
from montelog.persistence.tables import CategoryTable, MemberTable, PostTable

ADMIN_EMAIL = "admin@example.com"


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        _env_file=None,
        env="test",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'montelog.db'}",
        cache_backend="memory",
        enable_scheduler=False,
        enable_metrics=True,
        admin_email=ADMIN_EMAIL,
    )


@pytest.fixture
def cache(clock: FakeClock) -> MemoryCacheStore:
    return MemoryCacheStore(clock=clock)


@pytest_asyncio.fixture
async def database(settings: Settings) -> AsyncIterator[Database]:
    database = Database.from_settings(settings)
    await database.create_all()
    yield database
    await database.close()


@pytest_asyncio.fixture
async def context(
    settings: Settings, database: Database, cache: MemoryCacheStore
) -> AsyncIterator[AppContext]:
    context = AppContext.build(settings, database=database, cache=cache)
    yield context
    if context.scheduler.running:
        await context.scheduler.stop()


@pytest_asyncio.fixture
async def api_client(context: AppContext) -> AsyncIterator[AsyncClient]:
    """HTTP client bound to an app that uses the test context."""
    app = create_app(context=context)
    async with AsyncClient(
        transport=ASGITransport(app=app, client=("203.0.113.7", 51000)),
        base_url="http://test",
        headers={"user-agent": "pytest-browser"},
    ) as client:
        yield client


@pytest_asyncio.fixture
async def admin_id(database: Database) -> int:
    async with database.session() as session:
        member = MemberTable(email=ADMIN_EMAIL, name="Admin")
        session.add(member)
        await session.flush()
        return member.member_id


@pytest.fixture
def seed_posts(database: Database):
    """Insert posts with increasing ids; the last one is the newest."""

    async def seed(count: int, category: str = "dev") -> list[int]:
        async with database.session() as session:
            category_row = CategoryTable(name=category)
            session.add(category_row)
            await session.flush()

            ids = []
            for i in range(count):
                post = PostTable(
                    title=f"Post {i + 1}",
                    content=f"Content {i + 1}",
                    category_id=category_row.category_id,
                )
                session.add(post)
                await session.flush()
                ids.append(post.post_id)
            return ids

    return seed
