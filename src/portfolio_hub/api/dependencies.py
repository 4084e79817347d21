"""Shared dependencies for API routes.

A request gets one ``UnitOfWork``; every service built for that request
shares it, so their staged changes land in the same transaction.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from portfolio_hub.config import Settings
from portfolio_hub.data.models import User, UserSession
from portfolio_hub.data.unit_of_work import UnitOfWork
from portfolio_hub.errors import AuthenticationError
from portfolio_hub.services import (
    AccountService,
    AuditService,
    AuthorizationPolicy,
    PortfolioService,
    ProjectService,
    ProjectSkillService,
    RequestInfo,
    SkillService,
)

_bearer = HTTPBearer(auto_error=False, description="Access token from /api/account/login")


def get_settings(request: Request) -> Settings:
    """Settings the application was created with."""
    return request.app.state.settings


def get_uow() -> Iterator[UnitOfWork]:
    """Open a unit of work for the request and close it afterwards."""
    uow = UnitOfWork()
    try:
        yield uow
    finally:
        uow.close()


UowDep = Annotated[UnitOfWork, Depends(get_uow)]
SettingsDep = Annotated[Settings, Depends(get_settings)]


def get_request_info(request: Request) -> RequestInfo:
    return RequestInfo(
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )


def get_policy(uow: UowDep) -> AuthorizationPolicy:
    return AuthorizationPolicy(uow)


def get_audit_service(uow: UowDep) -> AuditService:
    return AuditService(uow)


def get_portfolio_service(
    uow: UowDep, policy: Annotated[AuthorizationPolicy, Depends(get_policy)]
) -> PortfolioService:
    return PortfolioService(uow, policy, autocommit=False)


def get_project_service(
    uow: UowDep, policy: Annotated[AuthorizationPolicy, Depends(get_policy)]
) -> ProjectService:
    return ProjectService(uow, policy, autocommit=False)


def get_skill_service(uow: UowDep) -> SkillService:
    return SkillService(uow, autocommit=False)


def get_project_skill_service(uow: UowDep) -> ProjectSkillService:
    return ProjectSkillService(uow, autocommit=False)


def get_account_service(uow: UowDep, settings: SettingsDep) -> AccountService:
    return AccountService(uow, settings)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_auth(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer)],
    account: Annotated[AccountService, Depends(get_account_service)],
) -> tuple[User, UserSession]:
    """Resolve the bearer token to the signed-in user and their session.

    Raises:
        HTTPException: 401 if the token is missing, invalid or its session ended.
    """
    if credentials is None:
        raise _unauthorized("Missing authentication. Please provide a Bearer token.")
    try:
        return account.authenticate(credentials.credentials)
    except AuthenticationError as exc:
        raise _unauthorized(str(exc)) from exc


def get_current_user(
    auth: Annotated[tuple[User, UserSession], Depends(get_current_auth)],
) -> User:
    return auth[0]


def get_current_session(
    auth: Annotated[tuple[User, UserSession], Depends(get_current_auth)],
) -> UserSession:
    return auth[1]


def get_optional_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer)],
    account: Annotated[AccountService, Depends(get_account_service)],
) -> User | None:
    """Return the signed-in user, or None for anonymous callers.

    Unlike ``get_current_user`` this does not raise when the token is
    missing. An invalid token is still rejected with 401.
    """
    if credentials is None:
        return None
    try:
        user, _ = account.authenticate(credentials.credentials)
    except AuthenticationError as exc:
        raise _unauthorized(str(exc)) from exc
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]
OptionalUser = Annotated[User | None, Depends(get_optional_user)]
ClientInfo = Annotated[RequestInfo, Depends(get_request_info)]
Policy = Annotated[AuthorizationPolicy, Depends(get_policy)]
Audit = Annotated[AuditService, Depends(get_audit_service)]
