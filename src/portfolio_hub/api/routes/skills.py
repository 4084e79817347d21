"""Skill catalogue routes for the API."""

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
    get_project_skill_service,
    get_skill_service,
)
from portfolio_hub.api.middleware import api_rate_limit
from portfolio_hub.api.schemas.projects import ProjectResponse
from portfolio_hub.api.schemas.skills import SkillCreateRequest, SkillResponse, SkillUpdateRequest
from portfolio_hub.data.models import Project, Skill
from portfolio_hub.services import ProjectSkillService, SkillService

router = APIRouter(prefix="/skills", tags=["skills"], dependencies=[Depends(api_rate_limit)])

Skills = Annotated[SkillService, Depends(get_skill_service)]
ProjectSkills = Annotated[ProjectSkillService, Depends(get_project_skill_service)]


def _get_skill_or_404(skills: SkillService, skill_id: int) -> Skill:
    skill = skills.get_skill_by_id(skill_id)
    if skill is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Skill with ID {skill_id} not found",
        )
    return skill


@router.get("", response_model=list[SkillResponse], summary="List skills")
def list_skills(skills: Skills) -> list[Skill]:
    return skills.get_all_skills()


@router.get(
    "/category/{category}",
    response_model=list[SkillResponse],
    summary="List skills in a category",
    description="Category matching ignores case.",
)
def list_skills_by_category(category: str, skills: Skills) -> list[Skill]:
    return skills.get_skills_by_category(category)


@router.get("/categories", response_model=list[str], summary="List skill categories")
def list_categories(skills: Skills) -> list[str]:
    return skills.get_skill_categories()


@router.get(
    "/{skill_id}",
    response_model=SkillResponse,
    summary="Get a skill",
    responses={404: {"description": "Skill not found"}},
)
def get_skill(skill_id: int, skills: Skills) -> Skill:
    return _get_skill_or_404(skills, skill_id)


@router.get(
    "/{skill_id}/projects",
    response_model=list[ProjectResponse],
    summary="List projects using a skill",
    description="Only projects in portfolios the caller can see are returned.",
    responses={404: {"description": "Skill not found"}},
)
def list_skill_projects(
    skill_id: int,
    skills: Skills,
    project_skills: ProjectSkills,
    policy: Policy,
    user: OptionalUser,
) -> list[Project]:
    _get_skill_or_404(skills, skill_id)
    return [
        p
        for p in project_skills.get_projects_by_skill(skill_id)
        if policy.can_view_portfolio(user, p.portfolio)
    ]


@router.post(
    "",
    response_model=SkillResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a skill",
    responses={400: {"description": "Invalid input or duplicate name"}},
)
def create_skill(
    request: SkillCreateRequest,
    skills: Skills,
    audit: Audit,
    uow: UowDep,
    user: CurrentUser,
    client: ClientInfo,
) -> Skill:
    skill = skills.create_skill(request.model_dump())
    audit.log_activity(user, "CREATE", "Skill", skill.id, client, new_values=request.model_dump())
    uow.commit()
    return skill


@router.put(
    "/{skill_id}",
    response_model=SkillResponse,
    summary="Update a skill",
    description="Requires the skill write permission.",
    responses={403: {"description": "Missing permission"}, 404: {"description": "Skill not found"}},
)
def update_skill(
    skill_id: int,
    request: SkillUpdateRequest,
    skills: Skills,
    policy: Policy,
    audit: Audit,
    uow: UowDep,
    user: CurrentUser,
    client: ClientInfo,
) -> Skill:
    policy.ensure(
        policy.can_manage_skills(user), user, "You do not have permission to modify skills"
    )
    changes = request.model_dump(exclude_unset=True)
    skill = skills.update_skill(skill_id, changes)
    audit.log_activity(user, "UPDATE", "Skill", skill_id, client, new_values=changes)
    uow.commit()
    return skill


@router.delete(
    "/{skill_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a skill",
    description="Requires the skill delete permission. Detaches the skill from every project.",
    responses={403: {"description": "Missing permission"}, 404: {"description": "Skill not found"}},
)
def delete_skill(
    skill_id: int,
    skills: Skills,
    policy: Policy,
    audit: Audit,
    uow: UowDep,
    user: CurrentUser,
    client: ClientInfo,
) -> Response:
    policy.ensure(
        policy.can_delete_skills(user), user, "You do not have permission to delete skills"
    )
    if not skills.delete_skill(skill_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Skill with ID {skill_id} not found",
        )
    audit.log_activity(user, "DELETE", "Skill", skill_id, client)
    uow.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
