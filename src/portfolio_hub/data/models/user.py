"""User account model.

Passwords are stored as salted PBKDF2 hashes, never in plaintext.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Date, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from portfolio_hub.constants.auth import Roles
from portfolio_hub.data.db import Base
from portfolio_hub.data.types import UTCDateTime, utcnow

if TYPE_CHECKING:
    from portfolio_hub.data.models.portfolio import Portfolio
    from portfolio_hub.data.models.session import UserSession


class User(Base):
    """Application user account.

    Attributes:
        id: String UUID primary key.
        username: Unique handle used for login.
        email: Unique e-mail address, also accepted at login.
        password_hash: Salted hash of the user's password.
        roles: Comma-separated role names.
        access_failed_count: Consecutive failed sign-ins since the last success.
        lockout_end: Sign-in is refused until this UTC timestamp.
    """

    __tablename__ = "Users"

    id: Mapped[str] = mapped_column(
        String(450), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    username: Mapped[str] = mapped_column(String(256), unique=True, nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(256), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(256), nullable=False)
    first_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    roles: Mapped[str] = mapped_column(String(200), nullable=False, default=Roles.USER)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    profile_picture_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    website: Mapped[str | None] = mapped_column(String(500), nullable=True)
    location: Mapped[str | None] = mapped_column(String(100), nullable=True)
    date_of_birth: Mapped[date | None] = mapped_column(Date, nullable=True)

    external_provider: Mapped[str | None] = mapped_column(String(50), nullable=True)
    external_id: Mapped[str | None] = mapped_column(String(256), nullable=True)

    access_failed_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    lockout_end: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    last_login: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime, nullable=True, onupdate=utcnow
    )

    portfolios: Mapped[list[Portfolio]] = relationship(
        "Portfolio", back_populates="user", cascade="all, delete-orphan"
    )
    sessions: Mapped[list[UserSession]] = relationship(
        "UserSession", back_populates="user", cascade="all, delete-orphan"
    )

    @property
    def role_list(self) -> list[str]:
        return [role.strip() for role in (self.roles or "").split(",") if role.strip()]

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)
