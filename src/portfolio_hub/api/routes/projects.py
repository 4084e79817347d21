"""Project routes for the API."""

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
    get_project_service,
)
from portfolio_hub.api.middleware import api_rate_limit
from portfolio_hub.api.schemas.projects import (
    ProjectCompleteRequest,
    ProjectCreateRequest,
    ProjectResponse,
    ProjectUpdateRequest,
)
from portfolio_hub.data.models import Portfolio, Project, User
from portfolio_hub.data.unit_of_work import UnitOfWork
from portfolio_hub.services import AuthorizationPolicy, ProjectService

router = APIRouter(prefix="/projects", tags=["projects"], dependencies=[Depends(api_rate_limit)])

Projects = Annotated[ProjectService, Depends(get_project_service)]


def _not_found(project_id: int) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Project with ID {project_id} not found",
    )


def _get_visible_project(
    projects: ProjectService, policy: AuthorizationPolicy, user: User | None, project_id: int
) -> Project:
    project = projects.get_project_by_id(project_id)
    if project is None or not policy.can_view_portfolio(user, project.portfolio):
        raise _not_found(project_id)
    return project


def _check_portfolio_visible(
    uow: UnitOfWork, policy: AuthorizationPolicy, user: User | None, portfolio_id: int
) -> None:
    portfolio = uow.repository(Portfolio).find_by_id(portfolio_id)
    if portfolio is None or not policy.can_view_portfolio(user, portfolio):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Portfolio with ID {portfolio_id} not found",
        )


def _require_portfolio_owner(
    uow: UnitOfWork, policy: AuthorizationPolicy, user: User, portfolio_id: int
) -> None:
    # an unknown portfolio is left for the service to reject with a 400
    if uow.repository(Portfolio).find_by_id(portfolio_id) is None:
        return
    policy.ensure(
        policy.can_modify_portfolio(user, portfolio_id),
        user,
        "You do not have permission to add projects to this portfolio",
    )


def _require_project_owner(
    projects: ProjectService, policy: AuthorizationPolicy, user: User, project_id: int
) -> None:
    if not projects.project_exists(project_id):
        raise _not_found(project_id)
    policy.ensure(
        policy.can_modify_project(user, project_id),
        user,
        "You do not have permission to modify this project",
    )


@router.get("", response_model=list[ProjectResponse], summary="List projects")
def list_projects(projects: Projects, policy: Policy, user: OptionalUser) -> list[Project]:
    """Projects in every portfolio the caller can see."""
    return [
        p for p in projects.get_all_projects() if policy.can_view_portfolio(user, p.portfolio)
    ]


@router.get(
    "/portfolio/{portfolio_id}",
    response_model=list[ProjectResponse],
    summary="List projects in a portfolio",
    responses={404: {"description": "Portfolio not found"}},
)
def list_portfolio_projects(
    portfolio_id: int, projects: Projects, policy: Policy, uow: UowDep, user: OptionalUser
) -> list[Project]:
    _check_portfolio_visible(uow, policy, user, portfolio_id)
    return projects.get_projects_by_portfolio_id(portfolio_id)


@router.get(
    "/portfolio/{portfolio_id}/active",
    response_model=list[ProjectResponse],
    summary="List unfinished projects in a portfolio",
)
def list_active_projects(
    portfolio_id: int, projects: Projects, policy: Policy, uow: UowDep, user: OptionalUser
) -> list[Project]:
    _check_portfolio_visible(uow, policy, user, portfolio_id)
    return projects.get_active_projects(portfolio_id)


@router.get(
    "/portfolio/{portfolio_id}/completed",
    response_model=list[ProjectResponse],
    summary="List completed projects in a portfolio",
)
def list_completed_projects(
    portfolio_id: int, projects: Projects, policy: Policy, uow: UowDep, user: OptionalUser
) -> list[Project]:
    _check_portfolio_visible(uow, policy, user, portfolio_id)
    return projects.get_completed_projects(portfolio_id)


@router.get(
    "/{project_id}",
    response_model=ProjectResponse,
    summary="Get a project",
    responses={404: {"description": "Project not found"}},
)
def get_project(
    project_id: int, projects: Projects, policy: Policy, user: OptionalUser
) -> Project:
    return _get_visible_project(projects, policy, user, project_id)


@router.post(
    "",
    response_model=ProjectResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a project",
    description="Create a project in a portfolio you own.",
    responses={400: {"description": "Invalid input"}, 403: {"description": "Not the owner"}},
)
def create_project(
    request: ProjectCreateRequest,
    projects: Projects,
    policy: Policy,
    audit: Audit,
    uow: UowDep,
    user: CurrentUser,
    client: ClientInfo,
) -> Project:
    _require_portfolio_owner(uow, policy, user, request.portfolio_id)
    data = request.model_dump(exclude_none=True)
    project = projects.create_project(data)
    audit.log_activity(
        user,
        "CREATE",
        "Project",
        project.id,
        client,
        new_values=request.model_dump(mode="json", exclude_none=True),
    )
    uow.commit()
    return project


@router.put(
    "/{project_id}",
    response_model=ProjectResponse,
    summary="Update a project",
    description=(
        "Update fields of a project you own. Only provided fields are changed. "
        "Setting portfolio_id moves the project into another portfolio you own."
    ),
    responses={403: {"description": "Not the owner"}, 404: {"description": "Project not found"}},
)
def update_project(
    project_id: int,
    request: ProjectUpdateRequest,
    projects: Projects,
    policy: Policy,
    audit: Audit,
    uow: UowDep,
    user: CurrentUser,
    client: ClientInfo,
) -> Project:
    _require_project_owner(projects, policy, user, project_id)
    if request.portfolio_id is not None:
        _require_portfolio_owner(uow, policy, user, request.portfolio_id)

    changes = request.model_dump(exclude_unset=True)
    project = projects.update_project(project_id, changes)
    audit.log_activity(
        user,
        "UPDATE",
        "Project",
        project_id,
        client,
        new_values=request.model_dump(mode="json", exclude_unset=True),
    )
    uow.commit()
    return project


@router.patch(
    "/{project_id}/complete",
    response_model=ProjectResponse,
    summary="Mark a project completed",
    responses={403: {"description": "Not the owner"}, 404: {"description": "Project not found"}},
)
def complete_project(
    project_id: int,
    projects: Projects,
    policy: Policy,
    audit: Audit,
    uow: UowDep,
    user: CurrentUser,
    client: ClientInfo,
    request: ProjectCompleteRequest | None = None,
) -> Project:
    _require_project_owner(projects, policy, user, project_id)
    end_date = request.end_date if request is not None else None
    project = projects.complete_project(project_id, end_date)
    audit.log_activity(user, "COMPLETE", "Project", project_id, client)
    uow.commit()
    return project


@router.delete(
    "/{project_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a project",
    responses={403: {"description": "Not the owner"}, 404: {"description": "Project not found"}},
)
def delete_project(
    project_id: int,
    projects: Projects,
    policy: Policy,
    audit: Audit,
    uow: UowDep,
    user: CurrentUser,
    client: ClientInfo,
) -> Response:
    _require_project_owner(projects, policy, user, project_id)
    projects.delete_project(project_id)
    audit.log_activity(user, "DELETE", "Project", project_id, client)
    uow.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
