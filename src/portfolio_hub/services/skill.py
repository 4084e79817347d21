"""Skill catalogue service."""

from __future__ import annotations

import logging
from typing import TypedDict

from sqlalchemy import func, select

from portfolio_hub.data.models import Skill
from portfolio_hub.data.models.skill import (
    CATEGORY_MAX_LENGTH,
    DESCRIPTION_MAX_LENGTH,
    NAME_MAX_LENGTH,
)
from portfolio_hub.data.types import utcnow
from portfolio_hub.data.unit_of_work import UnitOfWork
from portfolio_hub.errors import EntityNotFoundError, ValidationError
from portfolio_hub.services.base import ServiceBase, check_length, require_text

__all__ = ["SkillData", "SkillService"]


class SkillData(TypedDict, total=False):
    name: str
    category: str
    description: str | None


def _validate_skill_data(data: SkillData, *, creating: bool) -> None:
    if creating or "name" in data:
        require_text(data.get("name"), "Skill name is required")
        check_length(
            data.get("name"),
            NAME_MAX_LENGTH,
            f"Skill name cannot exceed {NAME_MAX_LENGTH} characters",
        )
    if creating or "category" in data:
        require_text(data.get("category"), "Skill category is required")
        check_length(
            data.get("category"),
            CATEGORY_MAX_LENGTH,
            f"Skill category cannot exceed {CATEGORY_MAX_LENGTH} characters",
        )
    check_length(
        data.get("description"),
        DESCRIPTION_MAX_LENGTH,
        f"Skill description cannot exceed {DESCRIPTION_MAX_LENGTH} characters",
    )


class SkillService(ServiceBase):
    def __init__(
        self,
        uow: UnitOfWork,
        logger: logging.Logger | None = None,
        autocommit: bool = True,
    ) -> None:
        super().__init__(uow, logger, autocommit)
        self._skills = uow.repository(Skill)

    def get_all_skills(self) -> list[Skill]:
        return self._skills.find(order_by=[Skill.name])

    def get_skills_by_category(self, category: str) -> list[Skill]:
        """Skills whose category matches ``category``, ignoring case."""
        return self._skills.find(
            func.lower(Skill.category) == category.strip().lower(),
            order_by=[Skill.name],
        )

    def get_skill_by_id(self, skill_id: int) -> Skill | None:
        return self._skills.find_by_id(skill_id)

    def get_skill_categories(self) -> list[str]:
        stmt = select(Skill.category).distinct().order_by(Skill.category)
        return list(self._uow.session.scalars(stmt).all())

    def _ensure_unique_name(self, name: str, exclude_id: int | None = None) -> None:
        criteria = [func.lower(Skill.name) == name.lower()]
        if exclude_id is not None:
            criteria.append(Skill.id != exclude_id)
        if self._skills.exists(*criteria):
            raise ValidationError(f"Skill '{name}' already exists")

    def create_skill(self, data: SkillData) -> Skill:
        """Validate and persist a new skill.

        Raises:
            ValidationError: On a missing name or category, an overlong field,
                or a name already in the catalogue.
        """
        self._logger.info("Creating skill %r", data.get("name"))
        try:
            _validate_skill_data(data, creating=True)
            name = data["name"].strip()
            self._ensure_unique_name(name)
        except ValidationError as exc:
            self._logger.warning("Skill creation rejected: %s", exc)
            raise

        skill = Skill(
            name=name,
            category=data["category"].strip(),
            description=data.get("description"),
            created_at=utcnow(),
        )
        self._skills.add(skill)
        self._commit(f"create skill {name!r}")
        self._logger.info("Created skill %d (%s)", skill.id, name)
        return skill

    def update_skill(self, skill_id: int, data: SkillData) -> Skill:
        """Apply ``data`` to an existing skill.

        Raises:
            EntityNotFoundError: If the skill does not exist.
            ValidationError: On invalid fields or a clashing name.
        """
        skill = self._skills.find_by_id(skill_id)
        if skill is None:
            raise EntityNotFoundError("Skill", skill_id)
        try:
            _validate_skill_data(data, creating=False)
            if "name" in data:
                self._ensure_unique_name(data["name"].strip(), exclude_id=skill_id)
        except ValidationError as exc:
            self._logger.warning("Skill %s update rejected: %s", skill_id, exc)
            raise

        if "name" in data:
            skill.name = data["name"].strip()
        if "category" in data:
            skill.category = data["category"].strip()
        if "description" in data:
            skill.description = data["description"]

        self._commit(f"update skill {skill_id}")
        self._logger.info("Updated skill %s", skill_id)
        return skill

    def delete_skill(self, skill_id: int) -> bool:
        """Delete a skill and its project links. Returns False if it does not exist."""
        if self._skills.find_by_id(skill_id) is None:
            return False
        self._skills.delete(skill_id)
        self._commit(f"delete skill {skill_id}")
        self._logger.info("Deleted skill %s", skill_id)
        return True

    def skill_exists(self, skill_id: int) -> bool:
        return self._skills.find_by_id(skill_id) is not None
