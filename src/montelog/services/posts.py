"""Post listing, lookup and authoring.

Listing page 1 at the default page size is served through the cache
(posts_page_1), as is the total post count. Every other page is read from
the database. Writes invalidate the affected keys after the commit; the
category list is deliberately left alone and ages out with its TTL.
"""

from __future__ import annotations

import logging
import math

from montelog.cache import CacheKeys, CacheStore, invalidate, populate, read_through
from montelog.cache.aside import dumps
from montelog.config import Settings
from montelog.errors import NotFoundError
from montelog.models import (
    PostCreate,
    PostDetail,
    PostPage,
    PostSummary,
    PostSummaryList,
    PostUpdate,
)
from montelog.persistence import CategoryRepository, Database, PostRepository

logger = logging.getLogger(__name__)


def serialize_posts(posts: list[PostSummary]) -> str:
    return dumps([post.model_dump(mode="json") for post in posts])


def deserialize_posts(raw: str) -> list[PostSummary]:
    return PostSummaryList.validate_json(raw)


class PostService:
    """Post operations backed by the database and the cache."""

    def __init__(self, database: Database, cache: CacheStore, settings: Settings):
        self.database = database
        self.cache = cache
        self.page_size = settings.post_page_size
        self.page_ttl = settings.post_page_ttl

    def is_cached_page(self, page: int, limit: int) -> bool:
        """Only the first page at the default size has a cache entry."""
        return page == 1 and limit == self.page_size

    async def _load_page(self, page: int, limit: int) -> list[PostSummary]:
        async with self.database.session() as session:
            return await PostRepository(session).list_page(page, limit)

    async def _load_count(self) -> int:
        async with self.database.session() as session:
            return await PostRepository(session).count()

    async def get_posts(self, page: int = 1, limit: int | None = None) -> PostPage:
        """Return one page of posts (newest first) and the total page count."""
        limit = limit or self.page_size

        if self.is_cached_page(page, limit):
            posts = await read_through(
                self.cache,
                CacheKeys.posts_page(1),
                self.page_ttl,
                lambda: self._load_page(1, limit),
                serialize=serialize_posts,
                deserialize=deserialize_posts,
                cache_name="posts_page",
            )
        else:
            posts = await self._load_page(page, limit)

        total = await read_through(
            self.cache,
            CacheKeys.total_post_count(),
            self.page_ttl,
            self._load_count,
            deserialize=int,
            cache_name="total_post_count",
        )

        return PostPage(posts=posts, total_pages=math.ceil(total / limit))

    async def refresh_post_cache(self) -> int:
        """Reload page 1 from the database and overwrite its cache entry.

        Returns the number of posts cached.
        """
        posts = await self._load_page(1, self.page_size)
        await populate(
            self.cache,
            CacheKeys.posts_page(1),
            posts,
            self.page_ttl,
            serialize=serialize_posts,
        )
        return len(posts)

    async def get_post(self, post_id: int) -> PostDetail:
        async with self.database.session() as session:
            post = await PostRepository(session).get(post_id)
        if post is None:
            raise NotFoundError("Post", post_id)
        return post

    async def create_post(self, data: PostCreate, member_id: int | None) -> PostDetail:
        """Create a post, creating its category by name if needed."""
        async with self.database.session() as session:
            category_id = await CategoryRepository(session).get_or_create(data.category)
            post = await PostRepository(session).create(
                title=data.title,
                content=data.content,
                member_id=member_id,
                category_id=category_id,
            )

        logger.info(f"Created post {post.post_id} in category {data.category!r}")
        await invalidate(self.cache, CacheKeys.posts_page(1), CacheKeys.total_post_count())
        return post

    async def update_post(self, post_id: int, data: PostUpdate) -> PostDetail:
        """Apply a partial update to a post."""
        async with self.database.session() as session:
            values: dict[str, object] = data.model_dump(exclude_none=True, exclude={"category"})
            if data.category is not None:
                values["category_id"] = await CategoryRepository(session).get_or_create(
                    data.category
                )
            post = await PostRepository(session).update(post_id, values)
            if post is None:
                raise NotFoundError("Post", post_id)

        logger.info(f"Updated post {post_id}")
        await invalidate(self.cache, CacheKeys.posts_page(1))
        return post
