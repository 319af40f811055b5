"""Post endpoints: listing, detail, authoring and likes.

Likes are keyed by the anonymous client key ("<ip>-<user agent>"), so a
browser can like each post once without signing in.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from montelog.api.deps import (
    ClientKey,
    CurrentUser,
    PostIdPath,
    get_context,
    get_like_service,
    get_post_service,
)
from montelog.api.errors import BadRequestError
from montelog.context import AppContext
from montelog.models import PostCreate, PostDetail, PostPage, PostUpdate
from montelog.services import LikeService, PostService

router = APIRouter(prefix="/posts", tags=["posts"])


def page_limit(
    context: AppContext = Depends(get_context),
    limit: Annotated[int | None, Query(ge=1, description="Posts per page")] = None,
) -> int:
    """Resolve the page size, defaulting to the configured listing size."""
    if limit is None:
        return context.settings.post_page_size
    if limit > context.settings.post_max_page_size:
        raise BadRequestError(
            f"limit must not exceed {context.settings.post_max_page_size}"
        )
    return limit


@router.get("", response_model=PostPage, response_model_by_alias=True)
async def list_posts(
    page: Annotated[int, Query(ge=1, description="1-based page number")] = 1,
    limit: int = Depends(page_limit),
    posts: PostService = Depends(get_post_service),
) -> PostPage:
    """List posts newest first. Page 1 at the default size is served from cache."""
    return await posts.get_posts(page, limit)


@router.post("", response_model=PostDetail, status_code=status.HTTP_201_CREATED)
async def create_post(
    body: PostCreate,
    user: CurrentUser,
    posts: PostService = Depends(get_post_service),
) -> PostDetail:
    return await posts.create_post(body, member_id=user.member_id)


@router.get("/{post_id}", response_model=PostDetail)
async def get_post(
    post_id: PostIdPath,
    posts: PostService = Depends(get_post_service),
) -> PostDetail:
    return await posts.get_post(post_id)


@router.patch("/{post_id}", response_model=PostDetail)
async def update_post(
    post_id: PostIdPath,
    body: PostUpdate,
    user: CurrentUser,
    posts: PostService = Depends(get_post_service),
) -> PostDetail:
    if body.is_empty():
        raise BadRequestError("At least one of title, content or category is required")
    return await posts.update_post(post_id, body)


@router.get("/{post_id}/like-status")
async def like_status(
    post_id: PostIdPath,
    like_key: ClientKey,
    likes: LikeService = Depends(get_like_service),
) -> dict[str, bool]:
    return {"hasLiked": await likes.has_liked(post_id, like_key)}


@router.post("/{post_id}/like", status_code=status.HTTP_204_NO_CONTENT)
async def like_post(
    post_id: PostIdPath,
    like_key: ClientKey,
    likes: LikeService = Depends(get_like_service),
) -> None:
    await likes.like_post(post_id, like_key)


@router.post("/{post_id}/cancel-like", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_like(
    post_id: PostIdPath,
    like_key: ClientKey,
    likes: LikeService = Depends(get_like_service),
) -> None:
    await likes.cancel_like(post_id, like_key)


@router.get("/{post_id}/like-count")
async def like_count(
    post_id: PostIdPath,
    likes: LikeService = Depends(get_like_service),
) -> dict[str, int]:
    return {"likeCounts": await likes.get_like_count(post_id)}
