"""Repository pattern for blog persistence.

Repositories wrap a session and expose the queries the services need:
filtered selects, inserts, updates and exact counts. Database failures are
re-raised as RepositoryError with the failing operation in the message;
"no row" is returned as None/False and left to the service to interpret.

Uniqueness conflicts on likes and visits are resolved with
INSERT ... ON CONFLICT DO NOTHING so a lost race is a normal result
instead of an aborted transaction.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date
from typing import Any

from sqlalchemy import Select, delete, func, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from montelog.errors import RepositoryError
from montelog.models import Category, PostDetail, PostSummary
from montelog.persistence.tables import (
    CategoryTable,
    MemberTable,
    PostLikeTable,
    PostTable,
    VisitorTable,
)


@contextmanager
def translate_errors(operation: str) -> Iterator[None]:
    """Re-raise SQLAlchemy failures as RepositoryError."""
    try:
        yield
    except SQLAlchemyError as e:
        raise RepositoryError(operation, e) from e


class BaseRepository:
    """Base repository holding the session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    def _insert_ignoring_conflicts(
        self, table: type[Any], values: dict[str, Any], conflict_columns: list[str]
    ) -> Any:
        """Build a dialect specific INSERT ... ON CONFLICT DO NOTHING."""
        dialect = self.session.bind.dialect.name if self.session.bind else ""
        if dialect == "postgresql":
            stmt = postgresql.insert(table)
        elif dialect == "sqlite":
            stmt = sqlite.insert(table)
        else:
            raise RepositoryError("insert", f"unsupported dialect {dialect!r}")
        return stmt.values(**values).on_conflict_do_nothing(index_elements=conflict_columns)


class CategoryRepository(BaseRepository):
    """Repository for categories."""

    async def list_all(self) -> list[Category]:
        stmt = select(CategoryTable).order_by(CategoryTable.category_id)
        with translate_errors("list categories"):
            result = await self.session.execute(stmt)
        return [Category.model_validate(row) for row in result.scalars()]

    async def get_id_by_name(self, name: str) -> int | None:
        stmt = select(CategoryTable.category_id).where(CategoryTable.name == name)
        with translate_errors(f"find category {name!r}"):
            result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_or_create(self, name: str) -> int:
        """Return the category id for name, creating the category if needed."""
        existing = await self.get_id_by_name(name)
        if existing is not None:
            return existing

        stmt = self._insert_ignoring_conflicts(CategoryTable, {"name": name}, ["name"])
        with translate_errors(f"create category {name!r}"):
            await self.session.execute(stmt)

        # Another writer may have created it between the lookup and the insert
        created = await self.get_id_by_name(name)
        if created is None:
            raise RepositoryError("create category", f"category {name!r} missing after insert")
        return created


class PostRepository(BaseRepository):
    """Repository for posts."""

    def _summary_select(self) -> Select[Any]:
        return select(
            PostTable.post_id,
            PostTable.title,
            PostTable.content,
            PostTable.category_id,
            CategoryTable.name.label("category_name"),
            PostTable.created_at,
        ).outerjoin(CategoryTable, PostTable.category_id == CategoryTable.category_id)

    async def list_page(self, page: int, limit: int) -> list[PostSummary]:
        """Posts for a 1-based page, newest first."""
        stmt = (
            self._summary_select()
            .order_by(PostTable.created_at.desc(), PostTable.post_id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        with translate_errors(f"list posts page {page}"):
            result = await self.session.execute(stmt)
        return [PostSummary.model_validate(dict(row._mapping)) for row in result]

    async def count(self) -> int:
        stmt = select(func.count()).select_from(PostTable)
        with translate_errors("count posts"):
            result = await self.session.execute(stmt)
        return int(result.scalar_one())

    async def get(self, post_id: int) -> PostDetail | None:
        """Post with its category name, or None."""
        stmt = self._summary_select().add_columns(
            PostTable.member_id, PostTable.updated_at
        ).where(PostTable.post_id == post_id)
        with translate_errors(f"fetch post {post_id}"):
            result = await self.session.execute(stmt)
        row = result.first()
        if row is None:
            return None
        return PostDetail.model_validate(dict(row._mapping))

    async def exists(self, post_id: int) -> bool:
        stmt = select(PostTable.post_id).where(PostTable.post_id == post_id)
        with translate_errors(f"check post {post_id}"):
            result = await self.session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def create(
        self, title: str, content: str, member_id: int | None, category_id: int
    ) -> PostDetail:
        row = PostTable(
            title=title,
            content=content,
            member_id=member_id,
            category_id=category_id,
        )
        self.session.add(row)
        with translate_errors("create post"):
            await self.session.flush()

        created = await self.get(row.post_id)
        if created is None:
            raise RepositoryError("create post", "post missing after insert")
        return created

    async def update(self, post_id: int, values: dict[str, Any]) -> PostDetail | None:
        """Update columns of a post. Returns None if the post does not exist."""
        if values:
            stmt = (
                update(PostTable)
                .where(PostTable.post_id == post_id)
                .values(**values, updated_at=func.now())
                .returning(PostTable.post_id)
            )
            with translate_errors(f"update post {post_id}"):
                result = await self.session.execute(stmt)
            if result.scalar_one_or_none() is None:
                return None
        return await self.get(post_id)


class LikeRepository(BaseRepository):
    """Repository for anonymous post likes."""

    async def has_liked(self, post_id: int, like_key: str) -> bool:
        stmt = select(PostLikeTable.like_id).where(
            PostLikeTable.post_id == post_id, PostLikeTable.like_key == like_key
        )
        with translate_errors(f"check like on post {post_id}"):
            result = await self.session.execute(stmt)
        return result.first() is not None

    async def add(self, post_id: int, like_key: str) -> bool:
        """Insert a like. Returns False if this key already liked the post."""
        stmt = self._insert_ignoring_conflicts(
            PostLikeTable,
            {"post_id": post_id, "like_key": like_key},
            ["post_id", "like_key"],
        ).returning(PostLikeTable.like_id)
        with translate_errors(f"like post {post_id}"):
            result = await self.session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def remove(self, post_id: int, like_key: str) -> bool:
        """Delete a like. Returns False if there was none."""
        stmt = (
            delete(PostLikeTable)
            .where(PostLikeTable.post_id == post_id, PostLikeTable.like_key == like_key)
            .returning(PostLikeTable.like_id)
        )
        with translate_errors(f"cancel like on post {post_id}"):
            result = await self.session.execute(stmt)
        return result.first() is not None

    async def count(self, post_id: int) -> int:
        stmt = select(func.count()).select_from(PostLikeTable).where(
            PostLikeTable.post_id == post_id
        )
        with translate_errors(f"count likes on post {post_id}"):
            result = await self.session.execute(stmt)
        return int(result.scalar_one())


class VisitorRepository(BaseRepository):
    """Repository for daily visit records."""

    async def add_visit(self, user_key: str, visited_date: date) -> bool:
        """Record a visit. A duplicate (user_key, date) is accepted silently.

        Returns True if a new row was written.
        """
        stmt = self._insert_ignoring_conflicts(
            VisitorTable,
            {"user_key": user_key, "visited_date": visited_date},
            ["user_key", "visited_date"],
        ).returning(VisitorTable.visitor_id)
        with translate_errors("add visit"):
            result = await self.session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def count_total(self) -> int:
        """Distinct user keys over all days."""
        stmt = select(func.count(func.distinct(VisitorTable.user_key)))
        with translate_errors("count total visitors"):
            result = await self.session.execute(stmt)
        return int(result.scalar_one())

    async def count_on(self, visited_date: date) -> int:
        """Distinct user keys on one day."""
        stmt = select(func.count(func.distinct(VisitorTable.user_key))).where(
            VisitorTable.visited_date == visited_date
        )
        with translate_errors("count daily visitors"):
            result = await self.session.execute(stmt)
        return int(result.scalar_one())


class MemberRepository(BaseRepository):
    """Repository for members (authors)."""

    async def get_by_email(self, email: str) -> MemberTable | None:
        stmt = select(MemberTable).where(MemberTable.email == email)
        with translate_errors("find member"):
            result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, email: str, name: str | None = None) -> MemberTable:
        row = MemberTable(email=email, name=name)
        self.session.add(row)
        with translate_errors("create member"):
            await self.session.flush()
        return row
