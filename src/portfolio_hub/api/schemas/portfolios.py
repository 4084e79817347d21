"""Pydantic schemas for portfolio endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from portfolio_hub.api.schemas.projects import ProjectResponse


class PortfolioResponse(BaseModel):
    """Response schema for a portfolio."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str | None = None
    is_public: bool
    user_id: str
    created_at: datetime
    updated_at: datetime | None = None


class PortfolioWithProjectsResponse(PortfolioResponse):
    """Portfolio with its projects embedded."""

    projects: list[ProjectResponse] = Field(default_factory=list)
    project_count: int = 0
    completed_project_count: int = 0


class PortfolioStatsResponse(BaseModel):
    portfolio_id: int
    project_count: int
    completed_project_count: int
    active_project_count: int
    skill_count: int


class PortfolioCreateRequest(BaseModel):
    """Request schema for creating a portfolio. The owner is the caller."""

    title: str = Field(..., description="Portfolio title (max 200 characters)")
    description: str | None = Field(None, description="Summary (max 1000 characters)")
    is_public: bool = Field(False, description="Whether the portfolio is publicly visible")


class PortfolioUpdateRequest(BaseModel):
    """Request schema for updating a portfolio.

    All fields are optional; only provided fields are updated.
    """

    title: str | None = Field(None, description="Portfolio title (max 200 characters)")
    description: str | None = Field(None, description="Summary (max 1000 characters)")
    is_public: bool | None = Field(None, description="Whether the portfolio is publicly visible")
    user_id: str | None = Field(
        None, description="Owner id; accepted only if it matches the current owner"
    )
