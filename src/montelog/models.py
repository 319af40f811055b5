"""Pydantic models for blog payloads.

These are the shapes returned by services and serialized into the cache,
so cached and freshly loaded values are indistinguishable to callers.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator


class PostSummary(BaseModel):
    """Post as shown in the listing."""

    model_config = ConfigDict(from_attributes=True)

    post_id: int
    title: str
    content: str
    category_id: int | None = None
    category_name: str | None = None
    created_at: datetime


class PostDetail(PostSummary):
    """Post with author and modification time."""

    member_id: int | None = None
    updated_at: datetime


class PostPage(BaseModel):
    """One page of the post listing."""

    model_config = ConfigDict(populate_by_name=True)

    posts: list[PostSummary]
    total_pages: int = Field(alias="totalPages")


class Category(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    category_id: int
    name: str


def _strip_non_blank(value: str) -> str:
    stripped = value.strip()
    if not stripped:
        raise ValueError("must not be blank")
    return stripped


class PostCreate(BaseModel):
    """Request body for creating a post. The category is created on demand."""

    model_config = ConfigDict(extra="forbid")

    title: str = Field(min_length=1, max_length=300)
    content: str = Field(min_length=1)
    category: str = Field(min_length=1, max_length=100)

    @field_validator("title", "category")
    @classmethod
    def _strip(cls, value: str) -> str:
        return _strip_non_blank(value)


class PostUpdate(BaseModel):
    """Partial update of a post. Omitted fields are left unchanged."""

    model_config = ConfigDict(extra="forbid")

    title: str | None = Field(default=None, min_length=1, max_length=300)
    content: str | None = Field(default=None, min_length=1)
    category: str | None = Field(default=None, min_length=1, max_length=100)

    @field_validator("title", "category")
    @classmethod
    def _strip(cls, value: str | None) -> str | None:
        return None if value is None else _strip_non_blank(value)

    def is_empty(self) -> bool:
        return not self.model_dump(exclude_none=True)


class SessionUser(BaseModel):
    """User stored in a login session."""

    member_id: int = Field(alias="memberId")
    email: str
    name: str | None = None

    model_config = ConfigDict(populate_by_name=True)


class VisitorStats(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_visitors: int = Field(alias="totalVisitors")
    today_visitors: int = Field(alias="todayVisitors")


PostSummaryList = TypeAdapter(list[PostSummary])
CategoryList = TypeAdapter(list[Category])
