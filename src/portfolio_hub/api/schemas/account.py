"""Pydantic schemas for account endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class RegisterRequest(BaseModel):
    username: str
    email: str
    password: str
    first_name: str | None = None
    last_name: str | None = None


class LoginRequest(BaseModel):
    username: str = Field(..., description="Username or e-mail address")
    password: str
    device_name: str | None = None


class RefreshTokenRequest(BaseModel):
    refresh_token: str


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str
    email: str
    first_name: str | None = None
    last_name: str | None = None
    roles: list[str] = Field(default_factory=list)
    is_active: bool
    created_at: datetime
    last_login: datetime | None = None


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "Bearer"
    expires_at: datetime
    refresh_token: str
    refresh_token_expires_at: datetime
    session_id: str
    user: UserResponse


class SessionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    session_id: str
    created_at: datetime
    expires_at: datetime
    last_accessed: datetime
    ip_address: str | None = None
    user_agent: str | None = None
    device_name: str | None = None
    auth_type: str
    is_current: bool = False


class AuthEventResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    event_type: str
    result: str
    failure_reason: str | None = None
    ip_address: str | None = None
    session_id: str | None = None
    timestamp: datetime


class RevokedSessionsResponse(BaseModel):
    revoked: int
