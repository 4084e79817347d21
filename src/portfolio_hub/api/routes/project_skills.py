"""Routes for the skills attached to a project."""

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
    get_project_skill_service,
)
from portfolio_hub.api.middleware import api_rate_limit
from portfolio_hub.api.schemas.skills import (
    ProjectSkillCreateRequest,
    ProjectSkillResponse,
    ProjectSkillUpdateRequest,
)
from portfolio_hub.data.models import ProjectSkill, User
from portfolio_hub.services import AuthorizationPolicy, ProjectService, ProjectSkillService

router = APIRouter(
    prefix="/projects/{project_id}/skills",
    tags=["project skills"],
    dependencies=[Depends(api_rate_limit)],
)

Projects = Annotated[ProjectService, Depends(get_project_service)]
ProjectSkills = Annotated[ProjectSkillService, Depends(get_project_skill_service)]


def _to_response(link: ProjectSkill) -> ProjectSkillResponse:
    return ProjectSkillResponse(
        project_id=link.project_id,
        skill_id=link.skill_id,
        skill_name=link.skill.name,
        skill_category=link.skill.category,
        proficiency_level=link.proficiency_level,
        is_primary=link.is_primary,
        created_at=link.created_at,
    )


def _check_project_visible(
    projects: ProjectService, policy: AuthorizationPolicy, user: User | None, project_id: int
) -> None:
    project = projects.get_project_by_id(project_id)
    if project is None or not policy.can_view_portfolio(user, project.portfolio):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Project with ID {project_id} not found",
        )


def _require_project_owner(
    projects: ProjectService, policy: AuthorizationPolicy, user: User, project_id: int
) -> None:
    # a missing project is reported by the service, not as an ownership failure
    if not projects.project_exists(project_id):
        return
    policy.ensure(
        policy.can_modify_project(user, project_id),
        user,
        "You do not have permission to modify this project",
    )


@router.get(
    "",
    response_model=list[ProjectSkillResponse],
    summary="List a project's skills",
    description="Primary skills first.",
    responses={404: {"description": "Project not found"}},
)
def list_project_skills(
    project_id: int,
    projects: Projects,
    project_skills: ProjectSkills,
    policy: Policy,
    user: OptionalUser,
) -> list[ProjectSkillResponse]:
    _check_project_visible(projects, policy, user, project_id)
    return [_to_response(link) for link in project_skills.get_project_skills(project_id)]


@router.get(
    "/{skill_id}",
    response_model=ProjectSkillResponse,
    summary="Get one skill of a project",
    responses={404: {"description": "Project not found or skill not attached"}},
)
def get_project_skill(
    project_id: int,
    skill_id: int,
    projects: Projects,
    project_skills: ProjectSkills,
    policy: Policy,
    user: OptionalUser,
) -> ProjectSkillResponse:
    _check_project_visible(projects, policy, user, project_id)
    link = project_skills.get_project_skill(project_id, skill_id)
    if link is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Skill {skill_id} is not assigned to project {project_id}",
        )
    return _to_response(link)


@router.post(
    "",
    response_model=ProjectSkillResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Attach a skill to a project",
    responses={
        400: {"description": "Unknown project or skill, duplicate, or level out of range"},
        403: {"description": "Not the owner"},
    },
)
def add_project_skill(
    project_id: int,
    request: ProjectSkillCreateRequest,
    projects: Projects,
    project_skills: ProjectSkills,
    policy: Policy,
    audit: Audit,
    uow: UowDep,
    user: CurrentUser,
    client: ClientInfo,
) -> ProjectSkillResponse:
    _require_project_owner(projects, policy, user, project_id)
    link = project_skills.add_skill_to_project(
        project_id, request.skill_id, request.proficiency_level, request.is_primary
    )
    audit.log_activity(
        user,
        "CREATE",
        "ProjectSkill",
        f"{project_id}:{request.skill_id}",
        client,
        new_values=request.model_dump(),
    )
    uow.commit()
    return _to_response(link)


@router.put(
    "/{skill_id}",
    response_model=ProjectSkillResponse,
    summary="Change a project skill's rating",
    responses={
        400: {"description": "Level out of range"},
        403: {"description": "Not the owner"},
        404: {"description": "Skill not attached"},
    },
)
def update_project_skill(
    project_id: int,
    skill_id: int,
    request: ProjectSkillUpdateRequest,
    projects: Projects,
    project_skills: ProjectSkills,
    policy: Policy,
    audit: Audit,
    uow: UowDep,
    user: CurrentUser,
    client: ClientInfo,
) -> ProjectSkillResponse:
    _require_project_owner(projects, policy, user, project_id)
    link = project_skills.update_project_skill(
        project_id, skill_id, request.proficiency_level, request.is_primary
    )
    audit.log_activity(
        user,
        "UPDATE",
        "ProjectSkill",
        f"{project_id}:{skill_id}",
        client,
        new_values=request.model_dump(exclude_unset=True),
    )
    uow.commit()
    return _to_response(link)


@router.delete(
    "/{skill_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Detach a skill from a project",
    responses={403: {"description": "Not the owner"}, 404: {"description": "Skill not attached"}},
)
def remove_project_skill(
    project_id: int,
    skill_id: int,
    projects: Projects,
    project_skills: ProjectSkills,
    policy: Policy,
    audit: Audit,
    uow: UowDep,
    user: CurrentUser,
    client: ClientInfo,
) -> Response:
    _require_project_owner(projects, policy, user, project_id)
    if not project_skills.remove_skill_from_project(project_id, skill_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Skill {skill_id} is not assigned to project {project_id}",
        )
    audit.log_activity(user, "DELETE", "ProjectSkill", f"{project_id}:{skill_id}", client)
    uow.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
