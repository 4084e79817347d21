"""Account service: registration, sign-in, token refresh and sign-out.

Sign-in issues a session, an access token bound to it and a refresh token.
Refreshing rotates the refresh token, so a token can be used once. Five
consecutive failed sign-ins lock the account for fifteen minutes. Every
outcome is written to the audit trail.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TypedDict

from sqlalchemy import func, or_

from portfolio_hub.config import Settings
from portfolio_hub.constants.auth import LOCKOUT_MINUTES, MAX_FAILED_ACCESS_ATTEMPTS, Roles
from portfolio_hub.data.models import (
    AuthenticationAuditLog,
    AuthenticationResult,
    SecuritySeverity,
    User,
    UserSession,
)
from portfolio_hub.data.types import utcnow
from portfolio_hub.data.unit_of_work import UnitOfWork
from portfolio_hub.errors import AccountLockedError, AuthenticationError, ValidationError
from portfolio_hub.services.audit import AuditService, RequestInfo
from portfolio_hub.services.base import ServiceBase, check_length, require_text
from portfolio_hub.services.passwords import hash_password, password_policy_errors, verify_password
from portfolio_hub.services.sessions import SessionService
from portfolio_hub.services.tokens import TokenService

__all__ = ["AccountService", "AuthResult", "RegistrationData"]

INVALID_CREDENTIALS = "Invalid username or password"
SUSPICIOUS_IP_THRESHOLD = 10
SUSPICIOUS_IP_WINDOW = timedelta(minutes=15)


class RegistrationData(TypedDict, total=False):
    username: str
    email: str
    password: str
    first_name: str | None
    last_name: str | None


@dataclass
class AuthResult:
    user: User
    session: UserSession
    access_token: str
    access_token_expires_at: datetime
    refresh_token: str
    refresh_token_expires_at: datetime


class AccountService(ServiceBase):
    def __init__(
        self,
        uow: UnitOfWork,
        settings: Settings,
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__(uow, logger)
        self._users = uow.repository(User)
        self._tokens = TokenService(settings)
        self._sessions = SessionService(uow, self._tokens, logger)
        self._audit = AuditService(uow, logger)

    @property
    def sessions(self) -> SessionService:
        return self._sessions

    def find_user(self, identifier: str) -> User | None:
        """Look a user up by username or e-mail, ignoring case."""
        ident = identifier.strip().lower()
        return self._users.first(
            or_(func.lower(User.username) == ident, func.lower(User.email) == ident)
        )

    def register(self, data: RegistrationData, request: RequestInfo) -> User:
        """Create an account after checking the password policy and uniqueness.

        Raises:
            ValidationError: On missing fields, a taken username/e-mail or a
                password that breaks policy (all violations joined).
        """
        try:
            username = require_text(data.get("username"), "Username is required")
            email = require_text(data.get("email"), "Email is required")
            check_length(username, 256, "Username cannot exceed 256 characters")
            check_length(email, 256, "Email cannot exceed 256 characters")
            if "@" not in email:
                raise ValidationError("Email address is not valid")
            if self.find_user(username) is not None:
                raise ValidationError(f"Username '{username}' is already taken")
            if self.find_user(email) is not None:
                raise ValidationError(f"Email '{email}' is already registered")
            errors = password_policy_errors(data.get("password") or "", username, email)
            if errors:
                raise ValidationError(" ".join(errors))
        except ValidationError as exc:
            self._audit.log_authentication(
                "REGISTER",
                AuthenticationResult.NOT_ALLOWED,
                request,
                username=data.get("username"),
                failure_reason=str(exc),
            )
            self._commit("record rejected registration")
            raise

        user = User(
            username=username,
            email=email,
            password_hash=hash_password(data["password"]),
            first_name=data.get("first_name"),
            last_name=data.get("last_name"),
            roles=Roles.USER,
            created_at=utcnow(),
        )
        self._users.add(user)
        self._uow.flush()
        self._audit.log_authentication("REGISTER", AuthenticationResult.SUCCESS, request, user=user)
        self._commit(f"register user {username}")
        return user

    def login(
        self,
        identifier: str,
        password: str,
        request: RequestInfo,
        device_name: str | None = None,
    ) -> AuthResult:
        """Verify credentials and open a session.

        Raises:
            AccountLockedError: If the account is locked, or this failure locks it.
            AuthenticationError: On unknown user, wrong password or disabled account.
        """
        now = utcnow()
        user = self.find_user(identifier) if identifier else None

        if user is None:
            self._reject_login(request, identifier, None, AuthenticationResult.ACCOUNT_NOT_FOUND)
            raise AuthenticationError(INVALID_CREDENTIALS)

        if not user.is_active:
            self._reject_login(request, identifier, user, AuthenticationResult.NOT_ALLOWED)
            raise AuthenticationError("Account is disabled")

        if user.lockout_end is not None and user.lockout_end > now:
            self._reject_login(request, identifier, user, AuthenticationResult.LOCKED_OUT)
            raise AccountLockedError("Account is locked. Please try again later.")

        if not verify_password(password, user.password_hash):
            user.access_failed_count += 1
            if user.access_failed_count >= MAX_FAILED_ACCESS_ATTEMPTS:
                user.access_failed_count = 0
                user.lockout_end = now + timedelta(minutes=LOCKOUT_MINUTES)
                self._audit.log_security_event(
                    "ACCOUNT_LOCKED",
                    SecuritySeverity.HIGH,
                    request,
                    user_id=user.id,
                    description=f"Account {user.username} locked after repeated failed sign-ins",
                )
                self._reject_login(request, identifier, user, AuthenticationResult.LOCKED_OUT)
                raise AccountLockedError("Account is locked. Please try again later.")
            self._reject_login(request, identifier, user, AuthenticationResult.INVALID_CREDENTIALS)
            raise AuthenticationError(INVALID_CREDENTIALS)

        user.access_failed_count = 0
        user.lockout_end = None
        user.last_login = now
        session = self._sessions.create_session(
            user,
            ip_address=request.ip_address,
            user_agent=request.user_agent,
            device_name=device_name,
        )
        result = self._issue_tokens(user, session)
        self._audit.log_authentication(
            "LOGIN",
            AuthenticationResult.SUCCESS,
            request,
            user=user,
            session_id=session.session_id,
        )
        self._commit(f"sign in user {user.id}")
        return result

    def _reject_login(
        self,
        request: RequestInfo,
        identifier: str,
        user: User | None,
        result: AuthenticationResult,
    ) -> None:
        self._audit.record_failed_login(request, result.value, user=user, username=identifier)
        self._audit.log_authentication(
            "LOGIN", result, request, user=user, username=identifier, failure_reason=result.value
        )
        if request.ip_address:
            recent = self._audit.recent_failed_logins_from_ip(
                request.ip_address, SUSPICIOUS_IP_WINDOW
            )
            # the attempt staged above is not flushed yet
            if recent + 1 >= SUSPICIOUS_IP_THRESHOLD:
                self._audit.log_security_event(
                    "SUSPICIOUS_ACTIVITY",
                    SecuritySeverity.MEDIUM,
                    request,
                    description=f"{recent + 1} failed sign-ins from {request.ip_address}",
                )
        self._commit("record failed sign-in")

    def _issue_tokens(self, user: User, session: UserSession) -> AuthResult:
        access_token, access_expires = self._tokens.generate_access_token(user, session.session_id)
        refresh_token = self._sessions.issue_refresh_token(session)
        return AuthResult(
            user=user,
            session=session,
            access_token=access_token,
            access_token_expires_at=access_expires,
            refresh_token=refresh_token,
            refresh_token_expires_at=session.refresh_token_expires_at,
        )

    def refresh(self, refresh_token: str, request: RequestInfo) -> AuthResult:
        """Exchange a refresh token for a new token pair.

        Raises:
            AuthenticationError: If the token is unknown, rotated out, expired,
                or belongs to a revoked session or disabled account.
        """
        session = self._sessions.find_by_refresh_token(refresh_token)
        if session is None or not session.user.is_active:
            self._audit.log_authentication(
                "TOKEN_REFRESH",
                AuthenticationResult.FAILED,
                request,
                user=session.user if session else None,
                failure_reason="Invalid refresh token",
            )
            self._commit("record failed token refresh")
            raise AuthenticationError("Invalid refresh token")

        self._sessions.extend(session)
        result = self._issue_tokens(session.user, session)
        self._audit.log_authentication(
            "TOKEN_REFRESH",
            AuthenticationResult.SUCCESS,
            request,
            user=session.user,
            session_id=session.session_id,
        )
        self._commit(f"refresh tokens for session {session.session_id}")
        return result

    def authenticate(self, access_token: str) -> tuple[User, UserSession]:
        """Resolve a bearer token to its user and live session, sliding the session.

        Raises:
            AuthenticationError: If the token is invalid or its session has ended.
        """
        claims = self._tokens.decode_access_token(access_token)
        session = self._sessions.validate_session(str(claims["session_id"]))
        if session is None or session.user_id != claims["sub"]:
            raise AuthenticationError("Session has expired or been revoked")
        user = session.user
        if not user.is_active:
            raise AuthenticationError("Account is disabled")
        self._commit(f"touch session {session.session_id}")
        return user, session

    def logout(self, user: User, session: UserSession, request: RequestInfo) -> None:
        self._sessions.revoke(session)
        self._audit.log_authentication(
            "LOGOUT",
            AuthenticationResult.SUCCESS,
            request,
            user=user,
            session_id=session.session_id,
        )
        self._commit(f"sign out session {session.session_id}")

    def extend_session(self, session: UserSession) -> UserSession:
        """Push the session's expiry a full timeout past now."""
        self._sessions.extend(session)
        self._commit(f"extend session {session.session_id}")
        return session

    def list_sessions(self, user: User) -> list[UserSession]:
        return self._sessions.active_sessions(user.id)

    def revoke_session(self, user: User, session_id: str, request: RequestInfo) -> bool:
        """Revoke one of the caller's own sessions. False if there is no such session."""
        session = self._sessions.get_session(session_id)
        if session is None or session.user_id != user.id or not session.is_active:
            return False
        self._sessions.revoke(session)
        self._audit.log_authentication(
            "SESSION_REVOKED",
            AuthenticationResult.SUCCESS,
            request,
            user=user,
            session_id=session_id,
        )
        self._commit(f"revoke session {session_id}")
        return True

    def revoke_other_sessions(self, user: User, current: UserSession, request: RequestInfo) -> int:
        count = self._sessions.revoke_all(user.id, except_session_id=current.session_id)
        self._audit.log_authentication(
            "SESSIONS_REVOKED",
            AuthenticationResult.SUCCESS,
            request,
            user=user,
            session_id=current.session_id,
            data={"revoked": count},
        )
        self._commit(f"revoke other sessions for user {user.id}")
        return count

    def authentication_history(self, user: User, limit: int = 50) -> list[AuthenticationAuditLog]:
        return self._audit.authentication_history(user.id, limit)
