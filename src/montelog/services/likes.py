"""Anonymous post likes.

A like is keyed by the client key (IP + user agent). The database unique
constraint on (post_id, like_key) decides whether a like is new, so double
likes are rejected even under concurrent requests.
"""

from __future__ import annotations

from montelog.errors import DuplicateActionError, NotFoundError, RejectedActionError
from montelog.persistence import Database, LikeRepository, PostRepository


class LikeService:
    def __init__(self, database: Database):
        self.database = database

    async def _require_post(self, repo: PostRepository, post_id: int) -> None:
        if not await repo.exists(post_id):
            raise NotFoundError("Post", post_id)

    async def has_liked(self, post_id: int, like_key: str) -> bool:
        async with self.database.session() as session:
            await self._require_post(PostRepository(session), post_id)
            return await LikeRepository(session).has_liked(post_id, like_key)

    async def like_post(self, post_id: int, like_key: str) -> None:
        async with self.database.session() as session:
            await self._require_post(PostRepository(session), post_id)
            if not await LikeRepository(session).add(post_id, like_key):
                raise DuplicateActionError("You have already liked this post")

    async def cancel_like(self, post_id: int, like_key: str) -> None:
        async with self.database.session() as session:
            await self._require_post(PostRepository(session), post_id)
            if not await LikeRepository(session).remove(post_id, like_key):
                raise RejectedActionError("You have not liked this post")

    async def get_like_count(self, post_id: int) -> int:
        async with self.database.session() as session:
            await self._require_post(PostRepository(session), post_id)
            return await LikeRepository(session).count(post_id)
