"""Login sessions.

The OAuth handshake happens elsewhere; once the administrator is
identified, a random session id is issued and the session user is stored
in the cache under session:{id} for the session TTL. The session cookie
carries only the id.
"""

from __future__ import annotations

import logging
from uuid import uuid4

from montelog.cache import CacheKeys, CacheStore
from montelog.config import Settings
from montelog.errors import MontelogError, UnauthorizedError
from montelog.models import SessionUser
from montelog.persistence import Database, MemberRepository

logger = logging.getLogger(__name__)


class SessionUnavailableError(MontelogError):
    """The session store could not persist a new session."""


class AuthService:
    def __init__(self, database: Database, cache: CacheStore, settings: Settings):
        self.database = database
        self.cache = cache
        self.session_ttl = settings.session_ttl
        self.admin_email = settings.admin_email

    async def authenticate(self, email: str) -> SessionUser:
        """Resolve a verified email address to the member allowed to sign in."""
        if self.admin_email is None or email != self.admin_email:
            raise UnauthorizedError("Sign-in is restricted to the administrator")

        async with self.database.session() as session:
            member = await MemberRepository(session).get_by_email(email)
        if member is None:
            raise UnauthorizedError("No member is registered for this email")

        return SessionUser(member_id=member.member_id, email=member.email, name=member.name)

    async def create_session(self, user: SessionUser) -> str:
        session_id = str(uuid4())
        stored = await self.cache.set(
            CacheKeys.session(session_id),
            user.model_dump_json(by_alias=True),
            self.session_ttl,
        )
        if not stored.ok:
            raise SessionUnavailableError(f"Session could not be stored: {stored.error}")
        logger.info(f"Session created for member {user.member_id}")
        return session_id

    async def login(self, email: str) -> tuple[str, SessionUser]:
        user = await self.authenticate(email)
        return await self.create_session(user), user

    async def get_session(self, session_id: str) -> SessionUser | None:
        """Look up a session. An unreachable cache means no session."""
        cached = await self.cache.get(CacheKeys.session(session_id))
        if not cached.hit:
            return None
        try:
            return SessionUser.model_validate_json(cached.value)  # type: ignore[arg-type]
        except ValueError:
            logger.warning(f"Discarding malformed session {session_id[:8]}")
            return None

    async def delete_session(self, session_id: str) -> None:
        deleted = await self.cache.delete(CacheKeys.session(session_id))
        if not deleted.ok:
            logger.warning(f"Could not delete session {session_id[:8]}: {deleted.error}")
