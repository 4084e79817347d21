"""Sign-in session management.

Policy:
- at most 5 active sessions per user; opening another revokes the least
  recently used one
- sessions time out after 60 minutes; any use within the last 30 minutes of
  that window pushes expiry a full timeout forward
- at most 3 sessions per user hold a live refresh token; issuing another
  clears the least recently used holder
- an expired session can still be resumed with its refresh token until the
  session is revoked or the refresh token itself expires

Methods here only stage changes; callers commit.
"""

from __future__ import annotations

import logging
from datetime import timedelta

from sqlalchemy import or_

from portfolio_hub.constants.auth import (
    MAX_REFRESH_TOKENS_PER_USER,
    MAX_SESSIONS_PER_USER,
    SESSION_TIMEOUT_MINUTES,
    SLIDING_EXPIRATION_MINUTES,
    AuthType,
)
from portfolio_hub.data.models import User, UserSession
from portfolio_hub.data.types import utcnow
from portfolio_hub.data.unit_of_work import UnitOfWork
from portfolio_hub.services.base import ServiceBase
from portfolio_hub.services.tokens import TokenService

SESSION_TIMEOUT = timedelta(minutes=SESSION_TIMEOUT_MINUTES)
SLIDING_WINDOW = timedelta(minutes=SLIDING_EXPIRATION_MINUTES)


class SessionService(ServiceBase):
    def __init__(
        self,
        uow: UnitOfWork,
        tokens: TokenService,
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__(uow, logger)
        self._sessions = uow.repository(UserSession)
        self._tokens = tokens

    def active_sessions(self, user_id: str) -> list[UserSession]:
        """Active, unexpired sessions, most recently used first."""
        return self._sessions.find(
            UserSession.user_id == user_id,
            UserSession.is_active.is_(True),
            UserSession.expires_at > utcnow(),
            order_by=[UserSession.last_accessed.desc()],
        )

    def get_session(self, session_id: str) -> UserSession | None:
        return self._sessions.find_by_id(session_id)

    def create_session(
        self,
        user: User,
        *,
        ip_address: str | None = None,
        user_agent: str | None = None,
        device_name: str | None = None,
        auth_type: AuthType = AuthType.JWT,
    ) -> UserSession:
        active = self.active_sessions(user.id)
        # oldest last
        while len(active) >= MAX_SESSIONS_PER_USER:
            oldest = active.pop()
            self.revoke(oldest)
            self._logger.info(
                "Revoked session %s for user %s: session limit reached",
                oldest.session_id,
                user.id,
            )

        now = utcnow()
        session = UserSession(
            user_id=user.id,
            created_at=now,
            last_accessed=now,
            expires_at=now + SESSION_TIMEOUT,
            ip_address=ip_address,
            user_agent=(user_agent or "")[:500] or None,
            device_name=device_name,
            auth_type=auth_type.value,
            is_active=True,
        )
        self._sessions.add(session)
        self._uow.flush()
        self._logger.info("Created session %s for user %s", session.session_id, user.id)
        return session

    def validate_session(self, session_id: str) -> UserSession | None:
        """Return the session if it is active and unexpired, sliding its expiry."""
        session = self._sessions.find_by_id(session_id)
        if session is None or not session.is_active:
            return None
        if session.expires_at <= utcnow():
            return None
        self.touch(session)
        return session

    def touch(self, session: UserSession) -> None:
        now = utcnow()
        session.last_accessed = now
        if session.expires_at - now < SLIDING_WINDOW:
            session.expires_at = now + SESSION_TIMEOUT

    def extend(self, session: UserSession) -> None:
        now = utcnow()
        session.last_accessed = now
        session.expires_at = now + SESSION_TIMEOUT

    def issue_refresh_token(self, session: UserSession) -> str:
        """Rotate the session's refresh token and return the new plaintext value."""
        now = utcnow()
        holders = self._sessions.find(
            UserSession.user_id == session.user_id,
            UserSession.session_id != session.session_id,
            UserSession.is_active.is_(True),
            UserSession.refresh_token_hash.is_not(None),
            or_(
                UserSession.refresh_token_expires_at.is_(None),
                UserSession.refresh_token_expires_at > now,
            ),
            order_by=[UserSession.last_accessed.desc()],
        )
        while len(holders) >= MAX_REFRESH_TOKENS_PER_USER:
            oldest = holders.pop()
            oldest.refresh_token_hash = None
            oldest.refresh_token_expires_at = None

        token = self._tokens.generate_refresh_token()
        session.refresh_token_hash = self._tokens.hash_refresh_token(token)
        session.refresh_token_expires_at = now + self._tokens.refresh_token_lifetime
        return token

    def find_by_refresh_token(self, token: str) -> UserSession | None:
        """Active session whose current, unexpired refresh token is ``token``."""
        session = self._sessions.first(
            UserSession.refresh_token_hash == self._tokens.hash_refresh_token(token),
            UserSession.is_active.is_(True),
        )
        if session is None:
            return None
        if session.refresh_token_expires_at is None or session.refresh_token_expires_at <= utcnow():
            return None
        return session

    def revoke(self, session: UserSession) -> None:
        session.is_active = False
        session.refresh_token_hash = None
        session.refresh_token_expires_at = None

    def revoke_all(self, user_id: str, except_session_id: str | None = None) -> int:
        sessions = self._sessions.find(
            UserSession.user_id == user_id, UserSession.is_active.is_(True)
        )
        count = 0
        for session in sessions:
            if session.session_id == except_session_id:
                continue
            self.revoke(session)
            count += 1
        return count

    def cleanup_expired(self) -> int:
        """Deactivate sessions that can no longer be used or refreshed."""
        now = utcnow()
        stale = self._sessions.find(
            UserSession.is_active.is_(True),
            UserSession.expires_at <= now,
            or_(
                UserSession.refresh_token_hash.is_(None),
                UserSession.refresh_token_expires_at <= now,
            ),
        )
        for session in stale:
            self.revoke(session)
        if stale:
            self._logger.info("Deactivated %d expired sessions", len(stale))
        return len(stale)
