"""JWT access tokens and opaque refresh tokens.

Access tokens are HS256 JWTs signed with the configured secret. Refresh
tokens are random URL-safe strings; only their SHA-256 digest is stored.
"""

from __future__ import annotations

import hashlib
import secrets
import uuid
from datetime import datetime, timedelta
from typing import Any

import jwt
from jwt.exceptions import InvalidTokenError

from portfolio_hub.config import Settings
from portfolio_hub.data.models import User
from portfolio_hub.data.types import utcnow
from portfolio_hub.errors import AuthenticationError

ALGORITHM = "HS256"


class TokenService:
    """Issue and validate tokens.

    Args:
        settings: Supplies the signing secret, issuer, audience and lifetimes.
    """

    def __init__(self, settings: Settings) -> None:
        if len(settings.jwt_secret) < 32:
            raise ValueError("JWT secret key must be at least 32 characters")
        self._settings = settings

    @property
    def refresh_token_lifetime(self) -> timedelta:
        return timedelta(days=self._settings.refresh_token_days)

    def generate_access_token(self, user: User, session_id: str) -> tuple[str, datetime]:
        """Return ``(token, expires_at)`` for ``user`` bound to ``session_id``."""
        now = utcnow()
        expires_at = now + timedelta(minutes=self._settings.access_token_minutes)
        payload: dict[str, Any] = {
            "sub": user.id,
            "name": user.username,
            "email": user.email,
            "roles": user.role_list,
            "session_id": session_id,
            "jti": str(uuid.uuid4()),
            "iat": int(now.timestamp()),
            "exp": int(expires_at.timestamp()),
            "iss": self._settings.jwt_issuer,
            "aud": self._settings.jwt_audience,
        }
        token = jwt.encode(payload, self._settings.jwt_secret, algorithm=ALGORITHM)
        return token, expires_at

    def decode_access_token(self, token: str) -> dict[str, Any]:
        """Validate signature, expiry, issuer and audience; return the claims.

        Raises:
            AuthenticationError: If the token is invalid or expired.
        """
        try:
            return jwt.decode(
                token,
                self._settings.jwt_secret,
                algorithms=[ALGORITHM],
                audience=self._settings.jwt_audience,
                issuer=self._settings.jwt_issuer,
                options={"require": ["sub", "exp", "session_id"]},
            )
        except InvalidTokenError as exc:
            raise AuthenticationError("Invalid or expired access token") from exc

    @staticmethod
    def generate_refresh_token() -> str:
        return secrets.token_urlsafe(64)

    @staticmethod
    def hash_refresh_token(token: str) -> str:
        return hashlib.sha256(token.encode("utf-8")).hexdigest()
