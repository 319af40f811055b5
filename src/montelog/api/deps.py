"""Shared FastAPI dependencies for Monte-Log routers.

- Service lookup from the application context on app.state
- Client key derivation for likes and visits
- Session guard for author-only endpoints
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Path, Request

from montelog.context import AppContext
from montelog.errors import UnauthorizedError
from montelog.models import SessionUser
from montelog.services import (
    AuthService,
    CategoryService,
    LikeService,
    PostService,
    VisitorService,
)

# =============================================================================
# Services
# =============================================================================


def get_context(request: Request) -> AppContext:
    return request.app.state.context


def get_post_service(context: AppContext = Depends(get_context)) -> PostService:
    return context.posts


def get_category_service(context: AppContext = Depends(get_context)) -> CategoryService:
    return context.categories


def get_like_service(context: AppContext = Depends(get_context)) -> LikeService:
    return context.likes


def get_visitor_service(context: AppContext = Depends(get_context)) -> VisitorService:
    return context.visitors


def get_auth_service(context: AppContext = Depends(get_context)) -> AuthService:
    return context.auth


# =============================================================================
# Client identity
# =============================================================================


def client_key(request: Request) -> str:
    """Anonymous client key: "<ip>-<user agent>".

    The IP is the first X-Forwarded-For hop when behind a proxy, otherwise
    the socket peer address.
    """
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        ip_address = forwarded.split(",")[0].strip()
    else:
        ip_address = request.client.host if request.client else "unknown"
    user_agent = request.headers.get("user-agent") or "unknown"
    return f"{ip_address}-{user_agent}"


# =============================================================================
# Sessions
# =============================================================================


def session_id_from(request: Request) -> str | None:
    context = get_context(request)
    return request.cookies.get(context.settings.session_cookie_name)


async def require_session(
    request: Request,
    auth: AuthService = Depends(get_auth_service),
) -> SessionUser:
    """Resolve the signed-in user from the session cookie or fail with 401."""
    session_id = session_id_from(request)
    if not session_id:
        raise UnauthorizedError("Login required")

    user = await auth.get_session(session_id)
    if user is None:
        raise UnauthorizedError("Session expired or invalid")
    return user


PostIdPath = Annotated[int, Path(ge=1, description="Post ID")]
ClientKey = Annotated[str, Depends(client_key)]
CurrentUser = Annotated[SessionUser, Depends(require_session)]
