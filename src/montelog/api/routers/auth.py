"""Session endpoints.

Sessions are issued out of band (see `montelog issue-session`) and carried
in a cookie; these endpoints only inspect and end them.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response, status

from montelog.api.deps import get_auth_service, get_context, session_id_from
from montelog.context import AppContext
from montelog.services import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/status")
async def auth_status(
    request: Request,
    auth: AuthService = Depends(get_auth_service),
) -> dict[str, bool]:
    session_id = session_id_from(request)
    user = await auth.get_session(session_id) if session_id else None
    return {"isLoggedIn": user is not None}


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    request: Request,
    response: Response,
    context: AppContext = Depends(get_context),
    auth: AuthService = Depends(get_auth_service),
) -> None:
    session_id = session_id_from(request)
    if session_id:
        await auth.delete_session(session_id)
    response.delete_cookie(
        context.settings.session_cookie_name,
        domain=context.settings.session_cookie_domain,
        secure=context.settings.session_cookie_secure,
        httponly=True,
    )
