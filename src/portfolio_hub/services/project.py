"""Project service.

CRUD for projects within portfolios, completion, and active/completed
filters. A project can only be created in, or moved to, an existing
portfolio.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TypedDict

from portfolio_hub.data.models import Portfolio, Project
from portfolio_hub.data.models.project import (
    DESCRIPTION_MAX_LENGTH,
    TITLE_MAX_LENGTH,
    URL_MAX_LENGTH,
)
from portfolio_hub.data.types import ensure_utc, utcnow
from portfolio_hub.data.unit_of_work import UnitOfWork
from portfolio_hub.errors import EntityNotFoundError, ValidationError
from portfolio_hub.services.authorization import AuthorizationPolicy
from portfolio_hub.services.base import ServiceBase, check_length, require_text

__all__ = ["ProjectData", "ProjectService"]

# Fields copied verbatim from input onto the entity
_PROJECT_FIELDS = ("description", "project_url", "github_url", "is_completed")


class ProjectData(TypedDict, total=False):
    """TypedDict for project input."""

    title: str
    description: str | None
    project_url: str | None
    github_url: str | None
    start_date: datetime | None
    end_date: datetime | None
    is_completed: bool
    portfolio_id: int


def _validate_project_data(data: ProjectData, *, creating: bool) -> None:
    if creating or "title" in data:
        require_text(data.get("title"), "Project title is required")
        check_length(
            data.get("title"),
            TITLE_MAX_LENGTH,
            f"Project title cannot exceed {TITLE_MAX_LENGTH} characters",
        )
    check_length(
        data.get("description"),
        DESCRIPTION_MAX_LENGTH,
        f"Project description cannot exceed {DESCRIPTION_MAX_LENGTH} characters",
    )
    check_length(
        data.get("project_url"),
        URL_MAX_LENGTH,
        f"Project URL cannot exceed {URL_MAX_LENGTH} characters",
    )
    check_length(
        data.get("github_url"),
        URL_MAX_LENGTH,
        f"GitHub URL cannot exceed {URL_MAX_LENGTH} characters",
    )


def _check_dates(start_date: datetime | None, end_date: datetime | None) -> None:
    if start_date is not None and end_date is not None and end_date < start_date:
        raise ValidationError("End date cannot be before start date")


class ProjectService(ServiceBase):
    def __init__(
        self,
        uow: UnitOfWork,
        policy: AuthorizationPolicy | None = None,
        logger: logging.Logger | None = None,
        autocommit: bool = True,
    ) -> None:
        super().__init__(uow, logger, autocommit)
        self._projects = uow.repository(Project)
        self._portfolios = uow.repository(Portfolio)
        self._policy = policy or AuthorizationPolicy(uow, logger)

    def get_all_projects(self) -> list[Project]:
        return self._projects.find(order_by=[Project.id])

    def get_project_by_id(self, project_id: int) -> Project | None:
        return self._projects.find_by_id(project_id)

    def get_projects_by_portfolio_id(self, portfolio_id: int) -> list[Project]:
        return self._projects.find(Project.portfolio_id == portfolio_id, order_by=[Project.id])

    def get_active_projects(self, portfolio_id: int) -> list[Project]:
        return self._projects.find(
            Project.portfolio_id == portfolio_id,
            Project.is_completed.is_(False),
            order_by=[Project.start_date.desc(), Project.id],
        )

    def get_completed_projects(self, portfolio_id: int) -> list[Project]:
        return self._projects.find(
            Project.portfolio_id == portfolio_id,
            Project.is_completed.is_(True),
            order_by=[Project.end_date.desc(), Project.id],
        )

    def create_project(self, data: ProjectData) -> Project:
        """Validate and persist a new project.

        ``start_date`` defaults to the creation time.

        Raises:
            ValidationError: If the portfolio does not exist or a field is invalid.
        """
        portfolio_id = data.get("portfolio_id")
        self._logger.info("Creating project in portfolio %s", portfolio_id)
        try:
            if portfolio_id is None or self._portfolios.find_by_id(portfolio_id) is None:
                raise ValidationError(f"Portfolio with ID {portfolio_id} does not exist")
            _validate_project_data(data, creating=True)
            now = utcnow()
            start_date = ensure_utc(data.get("start_date")) or now
            end_date = ensure_utc(data.get("end_date"))
            _check_dates(start_date, end_date)
        except ValidationError as exc:
            self._logger.warning("Project creation rejected: %s", exc)
            raise

        project = Project(
            title=data["title"].strip(),
            start_date=start_date,
            end_date=end_date,
            created_at=now,
            portfolio_id=portfolio_id,
        )
        for field in _PROJECT_FIELDS:
            if field in data and data[field] is not None:
                setattr(project, field, data[field])

        self._projects.add(project)
        self._commit(f"create project in portfolio {portfolio_id}")
        self._logger.info("Created project %d in portfolio %s", project.id, portfolio_id)
        return project

    def update_project(self, project_id: int, data: ProjectData) -> Project:
        """Apply ``data`` to an existing project.

        Raises:
            EntityNotFoundError: If the project does not exist.
            ValidationError: On invalid fields, inverted dates or an unknown
                target portfolio.
        """
        self._logger.info("Updating project %s", project_id)
        project = self._projects.find_by_id(project_id)
        if project is None:
            self._logger.warning("Project %s not found for update", project_id)
            raise EntityNotFoundError("Project", project_id)

        try:
            _validate_project_data(data, creating=False)
            target_portfolio = None
            new_portfolio_id = data.get("portfolio_id")
            if new_portfolio_id is not None and new_portfolio_id != project.portfolio_id:
                target_portfolio = self._portfolios.find_by_id(new_portfolio_id)
                if target_portfolio is None:
                    raise ValidationError(f"Portfolio with ID {new_portfolio_id} does not exist")
            start_date = (
                ensure_utc(data["start_date"]) if data.get("start_date") else project.start_date
            )
            end_date = ensure_utc(data["end_date"]) if "end_date" in data else project.end_date
            _check_dates(start_date, end_date)
        except ValidationError as exc:
            self._logger.warning("Project %s update rejected: %s", project_id, exc)
            raise

        if "title" in data:
            project.title = data["title"].strip()
        for field in _PROJECT_FIELDS:
            if field in data:
                if field == "is_completed" and data[field] is None:
                    continue
                setattr(project, field, data[field])
        if target_portfolio is not None:
            project.portfolio = target_portfolio
        project.start_date = start_date
        project.end_date = end_date
        project.updated_at = utcnow()

        self._projects.update(project)
        self._commit(f"update project {project_id}")
        self._logger.info("Updated project %s", project_id)
        return project

    def complete_project(self, project_id: int, end_date: datetime | None = None) -> Project:
        """Mark a project completed, ending it now unless ``end_date`` is given.

        Raises:
            EntityNotFoundError: If the project does not exist.
            ValidationError: If ``end_date`` precedes the start date.
        """
        project = self._projects.find_by_id(project_id)
        if project is None:
            raise EntityNotFoundError("Project", project_id)

        now = utcnow()
        finished = ensure_utc(end_date) or now
        _check_dates(project.start_date, finished)
        project.is_completed = True
        project.end_date = finished
        project.updated_at = now

        self._commit(f"complete project {project_id}")
        self._logger.info("Completed project %s", project_id)
        return project

    def delete_project(self, project_id: int) -> bool:
        """Delete a project and its skill links. Returns False if it does not exist."""
        if self._projects.find_by_id(project_id) is None:
            self._logger.warning("Project %s not found for deletion", project_id)
            return False
        self._projects.delete(project_id)
        self._commit(f"delete project {project_id}")
        self._logger.info("Deleted project %s", project_id)
        return True

    def project_exists(self, project_id: int) -> bool:
        return self._projects.find_by_id(project_id) is not None

    def user_owns_project(self, user_id: str, project_id: int) -> bool:
        return self._policy.owns_project(user_id, project_id)
