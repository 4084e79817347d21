"""ORM model for user portfolios."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from portfolio_hub.data.db import Base
from portfolio_hub.data.types import UTCDateTime, utcnow

if TYPE_CHECKING:
    from portfolio_hub.data.models.project import Project
    from portfolio_hub.data.models.user import User

TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 1000


class Portfolio(Base):
    """A named collection of projects owned by one user.

    Attributes:
        id: Auto-incrementing primary key.
        title: Display title (required, at most 200 characters).
        description: Optional summary (at most 1000 characters).
        is_public: Whether the portfolio is publicly visible.
        user_id: Owner; fixed once the portfolio exists.
        created_at: UTC timestamp when the portfolio was created.
        updated_at: UTC timestamp of the last update, if any.
    """

    __tablename__ = "Portfolios"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(TITLE_MAX_LENGTH), nullable=False)
    description: Mapped[str | None] = mapped_column(String(DESCRIPTION_MAX_LENGTH), nullable=True)
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    user_id: Mapped[str] = mapped_column(
        String(450),
        ForeignKey("Users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)

    user: Mapped[User] = relationship("User", back_populates="portfolios")
    projects: Mapped[list[Project]] = relationship(
        "Project",
        back_populates="portfolio",
        cascade="all, delete-orphan",
        order_by="Project.id",
    )
