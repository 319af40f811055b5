"""SQLAlchemy ORM models for the blog.

Tables mirror the hosted schema: member, category, post, post_like and
visitor. Uniqueness that the application relies on is enforced here:

- category.name is unique (categories are created on demand by name)
- post_like (post_id, like_key) is unique: one like per client per post
- visitor (user_key, visited_date) is unique: one visit per client per day
"""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import (
    BigInteger,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# BIGINT identity on PostgreSQL; SQLite only autoincrements INTEGER PRIMARY KEY
Identifier = BigInteger().with_variant(Integer, "sqlite")


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class MemberTable(Base):
    """Blog author. Only members can sign in."""

    __tablename__ = "member"

    member_id: Mapped[int] = mapped_column(Identifier, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    name: Mapped[str | None] = mapped_column(String(200), nullable=True)


class CategoryTable(Base):
    __tablename__ = "category"

    category_id: Mapped[int] = mapped_column(Identifier, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)


class PostTable(Base):
    __tablename__ = "post"

    post_id: Mapped[int] = mapped_column(Identifier, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    member_id: Mapped[int | None] = mapped_column(
        ForeignKey("member.member_id", ondelete="SET NULL"), nullable=True
    )
    category_id: Mapped[int | None] = mapped_column(
        ForeignKey("category.category_id", ondelete="SET NULL"), nullable=True, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )


class PostLikeTable(Base):
    __tablename__ = "post_like"

    like_id: Mapped[int] = mapped_column(Identifier, primary_key=True, autoincrement=True)
    post_id: Mapped[int] = mapped_column(
        ForeignKey("post.post_id", ondelete="CASCADE"), nullable=False
    )
    like_key: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    __table_args__ = (UniqueConstraint("post_id", "like_key", name="uq_post_like_key"),)


class VisitorTable(Base):
    __tablename__ = "visitor"

    visitor_id: Mapped[int] = mapped_column(Identifier, primary_key=True, autoincrement=True)
    user_key: Mapped[str] = mapped_column(Text, nullable=False)
    visited_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)

    __table_args__ = (
        UniqueConstraint("user_key", "visited_date", name="uq_visitor_user_key_date"),
    )
