"""Pydantic schemas for project endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ProjectResponse(BaseModel):
    """Response schema for a project."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str | None = None
    project_url: str | None = None
    github_url: str | None = None
    start_date: datetime
    end_date: datetime | None = None
    is_completed: bool
    created_at: datetime
    updated_at: datetime | None = None
    portfolio_id: int


class ProjectCreateRequest(BaseModel):
    title: str = Field(..., description="Project title (max 200 characters)")
    description: str | None = Field(None, description="Description (max 2000 characters)")
    project_url: str | None = Field(None, description="Live URL (max 500 characters)")
    github_url: str | None = Field(None, description="Repository URL (max 500 characters)")
    start_date: datetime | None = Field(None, description="Start date; defaults to now")
    end_date: datetime | None = Field(None, description="End date, if finished")
    is_completed: bool = Field(False, description="Whether the project is finished")
    portfolio_id: int = Field(..., description="Owning portfolio ID")


class ProjectUpdateRequest(BaseModel):
    """Request schema for updating a project.

    All fields are optional; only provided fields are updated.
    """

    title: str | None = None
    description: str | None = None
    project_url: str | None = None
    github_url: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    is_completed: bool | None = None
    portfolio_id: int | None = Field(None, description="Move to another portfolio you own")


class ProjectCompleteRequest(BaseModel):
    end_date: datetime | None = Field(None, description="Completion date; defaults to now")
