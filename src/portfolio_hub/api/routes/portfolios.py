"""Portfolio routes for the API."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status

from portfolio_hub.api.dependencies import (
    Audit,
    ClientInfo,
    CurrentUser,
    OptionalUser,
    Policy,
    UowDep,
    get_portfolio_service,
    get_project_service,
)
from portfolio_hub.api.middleware import api_rate_limit
from portfolio_hub.api.schemas.portfolios import (
    PortfolioCreateRequest,
    PortfolioResponse,
    PortfolioStatsResponse,
    PortfolioUpdateRequest,
    PortfolioWithProjectsResponse,
)
from portfolio_hub.api.schemas.projects import ProjectResponse
from portfolio_hub.data.models import Portfolio, Project, User
from portfolio_hub.services import AuthorizationPolicy, PortfolioService, ProjectService

router = APIRouter(
    prefix="/portfolios", tags=["portfolios"], dependencies=[Depends(api_rate_limit)]
)

Portfolios = Annotated[PortfolioService, Depends(get_portfolio_service)]
Projects = Annotated[ProjectService, Depends(get_project_service)]


def _get_visible_portfolio(
    portfolios: PortfolioService,
    policy: AuthorizationPolicy,
    user: User | None,
    portfolio_id: int,
) -> Portfolio:
    """Fetch a portfolio the caller may see; private ones look missing to others."""
    portfolio = portfolios.get_portfolio_by_id(portfolio_id)
    if portfolio is None or not policy.can_view_portfolio(user, portfolio):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Portfolio with ID {portfolio_id} not found",
        )
    return portfolio


def _require_owner(policy: AuthorizationPolicy, user: User, portfolio_id: int) -> None:
    policy.ensure(
        policy.can_modify_portfolio(user, portfolio_id),
        user,
        "You do not have permission to modify this portfolio",
    )


@router.get(
    "",
    response_model=list[PortfolioResponse],
    summary="List portfolios",
    description="Public portfolios plus the caller's own. Admins see every portfolio.",
)
def list_portfolios(
    portfolios: Portfolios, policy: Policy, user: OptionalUser
) -> list[Portfolio]:
    everything = portfolios.get_all_portfolios()
    return [p for p in everything if policy.can_view_portfolio(user, p)]


@router.get(
    "/mine",
    response_model=list[PortfolioResponse],
    summary="List my portfolios",
)
def list_my_portfolios(portfolios: Portfolios, user: CurrentUser) -> list[Portfolio]:
    return portfolios.get_portfolios_by_user_id(user.id)


@router.get(
    "/user/{user_id}",
    response_model=list[PortfolioResponse],
    summary="List a user's portfolios",
    description="Only public portfolios unless the caller is that user or an admin.",
)
def list_user_portfolios(
    user_id: str, portfolios: Portfolios, policy: Policy, user: OptionalUser
) -> list[Portfolio]:
    owned = portfolios.get_portfolios_by_user_id(user_id)
    return [p for p in owned if policy.can_view_portfolio(user, p)]


@router.get(
    "/{portfolio_id}",
    response_model=PortfolioResponse,
    summary="Get a portfolio",
    responses={404: {"description": "Portfolio not found"}},
)
def get_portfolio(
    portfolio_id: int, portfolios: Portfolios, policy: Policy, user: OptionalUser
) -> Portfolio:
    return _get_visible_portfolio(portfolios, policy, user, portfolio_id)


@router.get(
    "/{portfolio_id}/with-projects",
    response_model=PortfolioWithProjectsResponse,
    summary="Get a portfolio with its projects",
    responses={404: {"description": "Portfolio not found"}},
)
def get_portfolio_with_projects(
    portfolio_id: int, portfolios: Portfolios, policy: Policy, user: OptionalUser
) -> PortfolioWithProjectsResponse:
    _get_visible_portfolio(portfolios, policy, user, portfolio_id)
    portfolio = portfolios.get_portfolio_with_projects(portfolio_id)
    projects = [ProjectResponse.model_validate(p) for p in portfolio.projects]
    return PortfolioWithProjectsResponse(
        **PortfolioResponse.model_validate(portfolio).model_dump(),
        projects=projects,
        project_count=len(projects),
        completed_project_count=sum(1 for p in projects if p.is_completed),
    )


@router.get(
    "/{portfolio_id}/stats",
    response_model=PortfolioStatsResponse,
    summary="Portfolio statistics",
    responses={404: {"description": "Portfolio not found"}},
)
def get_portfolio_stats(
    portfolio_id: int, portfolios: Portfolios, policy: Policy, user: OptionalUser
) -> PortfolioStatsResponse:
    _get_visible_portfolio(portfolios, policy, user, portfolio_id)
    stats = portfolios.get_portfolio_stats(portfolio_id)
    return PortfolioStatsResponse(**stats)


@router.get(
    "/{portfolio_id}/projects",
    response_model=list[ProjectResponse],
    summary="List a portfolio's projects",
    responses={404: {"description": "Portfolio not found"}},
)
def list_portfolio_projects(
    portfolio_id: int,
    portfolios: Portfolios,
    projects: Projects,
    policy: Policy,
    user: OptionalUser,
) -> list[Project]:
    _get_visible_portfolio(portfolios, policy, user, portfolio_id)
    return projects.get_projects_by_portfolio_id(portfolio_id)


@router.post(
    "",
    response_model=PortfolioResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a portfolio",
    description="Create a portfolio owned by the caller.",
)
def create_portfolio(
    request: PortfolioCreateRequest,
    portfolios: Portfolios,
    audit: Audit,
    uow: UowDep,
    user: CurrentUser,
    client: ClientInfo,
) -> Portfolio:
    portfolio = portfolios.create_portfolio(
        {
            "title": request.title,
            "description": request.description,
            "is_public": request.is_public,
            "user_id": user.id,
        }
    )
    audit.log_activity(
        user, "CREATE", "Portfolio", portfolio.id, client, new_values={"title": portfolio.title}
    )
    uow.commit()
    return portfolio


@router.put(
    "/{portfolio_id}",
    response_model=PortfolioResponse,
    summary="Update a portfolio",
    description="Update fields of a portfolio you own. Only provided fields are changed.",
    responses={403: {"description": "Not the owner"}, 404: {"description": "Portfolio not found"}},
)
def update_portfolio(
    portfolio_id: int,
    request: PortfolioUpdateRequest,
    portfolios: Portfolios,
    policy: Policy,
    audit: Audit,
    uow: UowDep,
    user: CurrentUser,
    client: ClientInfo,
) -> Portfolio:
    if not portfolios.portfolio_exists(portfolio_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Portfolio with ID {portfolio_id} not found",
        )
    _require_owner(policy, user, portfolio_id)

    changes = request.model_dump(exclude_unset=True)
    portfolio = portfolios.update_portfolio(portfolio_id, changes)
    audit.log_activity(user, "UPDATE", "Portfolio", portfolio_id, client, new_values=changes)
    uow.commit()
    return portfolio


@router.delete(
    "/{portfolio_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a portfolio",
    description="Delete a portfolio you own, together with its projects.",
    responses={403: {"description": "Not the owner"}, 404: {"description": "Portfolio not found"}},
)
def delete_portfolio(
    portfolio_id: int,
    portfolios: Portfolios,
    policy: Policy,
    audit: Audit,
    uow: UowDep,
    user: CurrentUser,
    client: ClientInfo,
) -> Response:
    if not portfolios.portfolio_exists(portfolio_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Portfolio with ID {portfolio_id} not found",
        )
    _require_owner(policy, user, portfolio_id)

    portfolios.delete_portfolio(portfolio_id)
    audit.log_activity(user, "DELETE", "Portfolio", portfolio_id, client)
    uow.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
