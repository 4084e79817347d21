"""Shared Pydantic schemas for API responses."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ProblemDetails(BaseModel):
    """RFC 7807 error body."""

    type: str = Field(description="URI identifying the problem type")
    title: str
    status: int
    detail: str | None = None


class ErrorResponse(BaseModel):
    detail: str
