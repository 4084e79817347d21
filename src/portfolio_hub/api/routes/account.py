"""Account routes: registration, sign-in, tokens and sessions."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from portfolio_hub.api.dependencies import (
    ClientInfo,
    CurrentUser,
    get_account_service,
    get_current_session,
)
from portfolio_hub.api.middleware import auth_rate_limit, external_auth_rate_limit
from portfolio_hub.api.schemas.account import (
    AuthEventResponse,
    LoginRequest,
    RefreshTokenRequest,
    RegisterRequest,
    RevokedSessionsResponse,
    SessionResponse,
    TokenResponse,
    UserResponse,
)
from portfolio_hub.data.models import AuthenticationAuditLog, User, UserSession
from portfolio_hub.services import AccountService
from portfolio_hub.services.account import AuthResult

router = APIRouter(prefix="/account", tags=["account"])

Account = Annotated[AccountService, Depends(get_account_service)]
CurrentSession = Annotated[UserSession, Depends(get_current_session)]


def _user_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        username=user.username,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        roles=user.role_list,
        is_active=user.is_active,
        created_at=user.created_at,
        last_login=user.last_login,
    )


def _token_response(result: AuthResult) -> TokenResponse:
    return TokenResponse(
        access_token=result.access_token,
        expires_at=result.access_token_expires_at,
        refresh_token=result.refresh_token,
        refresh_token_expires_at=result.refresh_token_expires_at,
        session_id=result.session.session_id,
        user=_user_response(result.user),
    )


def _session_response(session: UserSession, current: UserSession) -> SessionResponse:
    response = SessionResponse.model_validate(session)
    response.is_current = session.session_id == current.session_id
    return response


@router.post(
    "/register",
    dependencies=[Depends(auth_rate_limit)],
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an account",
    responses={400: {"description": "Taken username/e-mail or weak password"}},
)
def register(request: RegisterRequest, account: Account, client: ClientInfo) -> UserResponse:
    user = account.register(request.model_dump(), client)
    return _user_response(user)


@router.post(
    "/login",
    dependencies=[Depends(auth_rate_limit)],
    response_model=TokenResponse,
    summary="Sign in",
    description="Accepts a username or e-mail address. Five failures lock the account.",
    responses={401: {"description": "Invalid credentials or locked account"}},
)
def login(request: LoginRequest, account: Account, client: ClientInfo) -> TokenResponse:
    result = account.login(request.username, request.password, client, request.device_name)
    return _token_response(result)


@router.post(
    "/refresh-token",
    dependencies=[Depends(external_auth_rate_limit)],
    response_model=TokenResponse,
    summary="Exchange a refresh token",
    description="Each refresh token works once; the response carries its replacement.",
    responses={401: {"description": "Invalid, expired or already used refresh token"}},
)
def refresh_token(
    request: RefreshTokenRequest, account: Account, client: ClientInfo
) -> TokenResponse:
    return _token_response(account.refresh(request.refresh_token, client))


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT, summary="Sign out")
def logout(
    account: Account, user: CurrentUser, session: CurrentSession, client: ClientInfo
) -> Response:
    account.logout(user, session, client)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/me", response_model=UserResponse, summary="Current user")
def me(user: CurrentUser) -> UserResponse:
    return _user_response(user)


@router.get("/session/status", response_model=SessionResponse, summary="Current session")
def session_status(session: CurrentSession) -> SessionResponse:
    return _session_response(session, session)


@router.post(
    "/session/extend",
    response_model=SessionResponse,
    summary="Extend the current session",
)
def extend_session(account: Account, session: CurrentSession) -> SessionResponse:
    return _session_response(account.extend_session(session), session)


@router.get("/sessions", response_model=list[SessionResponse], summary="List my sessions")
def list_sessions(
    account: Account, user: CurrentUser, session: CurrentSession
) -> list[SessionResponse]:
    return [_session_response(s, session) for s in account.list_sessions(user)]


@router.delete(
    "/sessions/{session_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Revoke one of my sessions",
    responses={404: {"description": "No such active session"}},
)
def revoke_session(
    session_id: str, account: Account, user: CurrentUser, client: ClientInfo
) -> Response:
    if not account.revoke_session(user, session_id, client):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Session {session_id} not found",
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/sessions",
    response_model=RevokedSessionsResponse,
    summary="Revoke every other session",
)
def revoke_other_sessions(
    account: Account, user: CurrentUser, session: CurrentSession, client: ClientInfo
) -> RevokedSessionsResponse:
    return RevokedSessionsResponse(revoked=account.revoke_other_sessions(user, session, client))


@router.get(
    "/audit/authentication",
    response_model=list[AuthEventResponse],
    summary="My recent sign-in history",
)
def authentication_history(
    account: Account,
    user: CurrentUser,
    limit: Annotated[int, Query(ge=1, le=200)] = 50,
) -> list[AuthenticationAuditLog]:
    return account.authentication_history(user, limit)
