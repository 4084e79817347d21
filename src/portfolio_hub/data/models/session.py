"""ORM model for sign-in sessions."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from portfolio_hub.constants.auth import AuthType
from portfolio_hub.data.db import Base
from portfolio_hub.data.types import UTCDateTime, utcnow

if TYPE_CHECKING:
    from portfolio_hub.data.models.user import User


class UserSession(Base):
    """One signed-in device.

    Attributes:
        session_id: String UUID, embedded in access tokens.
        expires_at: Absolute end of the session; slides forward on use.
        last_accessed: Last time a token for this session was used.
        refresh_token_hash: SHA-256 of the current refresh token, if any.
    """

    __tablename__ = "UserSessions"

    session_id: Mapped[str] = mapped_column(
        String(100), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    user_id: Mapped[str] = mapped_column(
        String(450), ForeignKey("Users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    expires_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    last_accessed: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    ip_address: Mapped[str | None] = mapped_column(String(45), nullable=True)
    user_agent: Mapped[str | None] = mapped_column(String(500), nullable=True)
    device_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    auth_type: Mapped[str] = mapped_column(String(20), nullable=False, default=AuthType.JWT.value)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    refresh_token_hash: Mapped[str | None] = mapped_column(String(128), nullable=True, index=True)
    refresh_token_expires_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)

    user: Mapped[User] = relationship("User", back_populates="sessions")
