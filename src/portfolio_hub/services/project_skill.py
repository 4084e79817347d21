"""Project-skill service: attach skills to projects with a proficiency rating.

Rows are addressed by the (project_id, skill_id) pair.
"""

from __future__ import annotations

import logging

from sqlalchemy import select

from portfolio_hub.data.models import Project, ProjectSkill, Skill
from portfolio_hub.data.models.skill import MAX_PROFICIENCY, MIN_PROFICIENCY
from portfolio_hub.data.types import utcnow
from portfolio_hub.data.unit_of_work import UnitOfWork
from portfolio_hub.errors import EntityNotFoundError, ValidationError
from portfolio_hub.services.base import ServiceBase

__all__ = ["ProjectSkillService", "validate_proficiency"]


def validate_proficiency(level: int) -> None:
    if not MIN_PROFICIENCY <= level <= MAX_PROFICIENCY:
        raise ValidationError(
            f"Proficiency level must be between {MIN_PROFICIENCY} and {MAX_PROFICIENCY}"
        )


class ProjectSkillService(ServiceBase):
    def __init__(
        self,
        uow: UnitOfWork,
        logger: logging.Logger | None = None,
        autocommit: bool = True,
    ) -> None:
        super().__init__(uow, logger, autocommit)
        self._links = uow.repository(ProjectSkill)
        self._projects = uow.repository(Project)
        self._skills = uow.repository(Skill)

    def get_project_skills(self, project_id: int) -> list[ProjectSkill]:
        return self._links.find(
            ProjectSkill.project_id == project_id,
            order_by=[ProjectSkill.is_primary.desc(), ProjectSkill.skill_id],
        )

    def get_project_skill(self, project_id: int, skill_id: int) -> ProjectSkill | None:
        return self._links.find_by_id((project_id, skill_id))

    def project_has_skill(self, project_id: int, skill_id: int) -> bool:
        return self.get_project_skill(project_id, skill_id) is not None

    def get_projects_by_skill(self, skill_id: int) -> list[Project]:
        stmt = (
            select(Project)
            .join(ProjectSkill, ProjectSkill.project_id == Project.id)
            .where(ProjectSkill.skill_id == skill_id)
            .order_by(Project.id)
        )
        return list(self._uow.session.scalars(stmt).all())

    def add_skill_to_project(
        self,
        project_id: int,
        skill_id: int,
        proficiency_level: int,
        is_primary: bool = False,
    ) -> ProjectSkill:
        """Attach a skill to a project.

        Checks run in order: project exists, skill exists, pair not already
        present, level within range. Nothing is staged if any check fails.

        Raises:
            ValidationError: On the first failed check.
        """
        self._logger.info("Adding skill %s to project %s", skill_id, project_id)
        try:
            if self._projects.find_by_id(project_id) is None:
                raise ValidationError(f"Project with ID {project_id} not found")
            if self._skills.find_by_id(skill_id) is None:
                raise ValidationError(f"Skill with ID {skill_id} not found")
            if self.project_has_skill(project_id, skill_id):
                raise ValidationError(
                    f"Skill {skill_id} is already assigned to project {project_id}"
                )
            validate_proficiency(proficiency_level)
        except ValidationError as exc:
            self._logger.warning("Adding skill rejected: %s", exc)
            raise

        link = ProjectSkill(
            project_id=project_id,
            skill_id=skill_id,
            proficiency_level=proficiency_level,
            is_primary=is_primary,
            created_at=utcnow(),
        )
        self._links.add(link)
        self._commit(f"add skill {skill_id} to project {project_id}")
        self._logger.info("Added skill %s to project %s", skill_id, project_id)
        return link

    def update_project_skill(
        self,
        project_id: int,
        skill_id: int,
        proficiency_level: int,
        is_primary: bool | None = None,
    ) -> ProjectSkill:
        """Change the rating (and optionally the primary flag) of an attached skill.

        Raises:
            EntityNotFoundError: If the skill is not attached to the project.
            ValidationError: If the level is out of range.
        """
        link = self.get_project_skill(project_id, skill_id)
        if link is None:
            raise EntityNotFoundError(
                "ProjectSkill",
                (project_id, skill_id),
                f"Skill {skill_id} is not assigned to project {project_id}",
            )
        validate_proficiency(proficiency_level)

        link.proficiency_level = proficiency_level
        if is_primary is not None:
            link.is_primary = is_primary
        self._commit(f"update skill {skill_id} on project {project_id}")
        self._logger.info("Updated skill %s on project %s", skill_id, project_id)
        return link

    def remove_skill_from_project(self, project_id: int, skill_id: int) -> bool:
        """Detach a skill. Returns False if it was not attached."""
        link = self.get_project_skill(project_id, skill_id)
        if link is None:
            self._logger.warning("Skill %s not attached to project %s", skill_id, project_id)
            return False
        self._links.remove(link)
        self._commit(f"remove skill {skill_id} from project {project_id}")
        self._logger.info("Removed skill %s from project %s", skill_id, project_id)
        return True
