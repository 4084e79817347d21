"""ORM model for portfolio projects."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from portfolio_hub.data.db import Base
from portfolio_hub.data.types import UTCDateTime, utcnow

if TYPE_CHECKING:
    from portfolio_hub.data.models.portfolio import Portfolio
    from portfolio_hub.data.models.skill import ProjectSkill

TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 2000
URL_MAX_LENGTH = 500


class Project(Base):
    """A piece of work shown in a portfolio.

    Attributes:
        id: Auto-incrementing primary key.
        title: Display title (required, at most 200 characters).
        description: Optional long description.
        project_url: Optional live URL.
        github_url: Optional repository URL.
        start_date: When work started; defaults to creation time.
        end_date: When work ended, if it has.
        is_completed: Completion flag.
        portfolio_id: Owning portfolio.
    """

    __tablename__ = "Projects"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(TITLE_MAX_LENGTH), nullable=False)
    description: Mapped[str | None] = mapped_column(String(DESCRIPTION_MAX_LENGTH), nullable=True)
    project_url: Mapped[str | None] = mapped_column(String(URL_MAX_LENGTH), nullable=True)
    github_url: Mapped[str | None] = mapped_column(String(URL_MAX_LENGTH), nullable=True)
    start_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    end_date: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    is_completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    portfolio_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("Portfolios.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    portfolio: Mapped[Portfolio] = relationship("Portfolio", back_populates="projects")
    project_skills: Mapped[list[ProjectSkill]] = relationship(
        "ProjectSkill", back_populates="project", cascade="all, delete-orphan"
    )
