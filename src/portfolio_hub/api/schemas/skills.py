"""Pydantic schemas for skill and project-skill endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class SkillResponse(BaseModel):
    """Response schema for a catalogue skill."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    category: str
    description: str | None = None
    created_at: datetime


class SkillCreateRequest(BaseModel):
    name: str = Field(..., description="Unique skill name (max 100 characters)")
    category: str = Field(..., description="Category (max 50 characters)")
    description: str | None = Field(None, description="Description (max 500 characters)")


class SkillUpdateRequest(BaseModel):
    name: str | None = None
    category: str | None = None
    description: str | None = None


class ProjectSkillResponse(BaseModel):
    """A skill attached to a project, with the skill's details flattened in."""

    project_id: int
    skill_id: int
    skill_name: str
    skill_category: str
    proficiency_level: int
    is_primary: bool
    created_at: datetime


class ProjectSkillCreateRequest(BaseModel):
    skill_id: int = Field(..., description="Skill to attach")
    proficiency_level: int = Field(..., description="Rating from 1 to 5")
    is_primary: bool = Field(False, description="Headline skill for the project")


class ProjectSkillUpdateRequest(BaseModel):
    proficiency_level: int = Field(..., description="Rating from 1 to 5")
    is_primary: bool | None = None
