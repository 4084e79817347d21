"""ORM models for skills and project-skill associations.

This module defines the Skill catalogue and the ProjectSkill join table that
rates a skill's use on a given project.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from portfolio_hub.data.db import Base
from portfolio_hub.data.types import UTCDateTime, utcnow

if TYPE_CHECKING:
    from portfolio_hub.data.models.project import Project

NAME_MAX_LENGTH = 100
CATEGORY_MAX_LENGTH = 50
DESCRIPTION_MAX_LENGTH = 500
MIN_PROFICIENCY = 1
MAX_PROFICIENCY = 5


class Skill(Base):
    """A skill from the shared catalogue.

    Attributes:
        id: Auto-incrementing primary key.
        name: Unique name of the skill (e.g., "PostgreSQL").
        category: Grouping such as "Database" or "Framework".
        description: Optional description.
        created_at: UTC timestamp when the skill was created.
    """

    __tablename__ = "Skills"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(NAME_MAX_LENGTH), nullable=False, unique=True)
    category: Mapped[str] = mapped_column(String(CATEGORY_MAX_LENGTH), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(String(DESCRIPTION_MAX_LENGTH), nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)

    project_skills: Mapped[list[ProjectSkill]] = relationship(
        "ProjectSkill", back_populates="skill", cascade="all, delete-orphan"
    )


class ProjectSkill(Base):
    """Many-to-many association between projects and skills.

    The (project_id, skill_id) pair is the primary key, so a skill can be
    attached to a project at most once.

    Attributes:
        project_id: Foreign key to the associated project.
        skill_id: Foreign key to the associated skill.
        proficiency_level: Rating from 1 to 5.
        is_primary: Whether this is a headline skill for the project.
    """

    __tablename__ = "ProjectSkills"
    __table_args__ = (
        CheckConstraint(
            f"proficiency_level BETWEEN {MIN_PROFICIENCY} AND {MAX_PROFICIENCY}",
            name="ck_project_skill_proficiency",
        ),
    )

    project_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("Projects.id", ondelete="CASCADE"),
        primary_key=True,
    )
    skill_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("Skills.id", ondelete="CASCADE"),
        primary_key=True,
    )
    proficiency_level: Mapped[int] = mapped_column(Integer, nullable=False)
    is_primary: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)

    project: Mapped[Project] = relationship("Project", back_populates="project_skills")
    skill: Mapped[Skill] = relationship("Skill", back_populates="project_skills")
