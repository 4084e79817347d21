"""Portfolio service.

Create, read, update and delete portfolios, plus ownership checks and
per-portfolio statistics. Validation failures raise ``ValidationError``;
lookups of missing portfolios return None/False, except
``get_portfolio_with_projects`` which raises ``EntityNotFoundError``.
"""

from __future__ import annotations

import logging
from typing import TypedDict

from sqlalchemy import func, select
from sqlalchemy.orm import selectinload

from portfolio_hub.data.models import Portfolio, Project, ProjectSkill, User
from portfolio_hub.data.models.portfolio import DESCRIPTION_MAX_LENGTH, TITLE_MAX_LENGTH
from portfolio_hub.data.types import utcnow
from portfolio_hub.data.unit_of_work import UnitOfWork
from portfolio_hub.errors import EntityNotFoundError, ValidationError
from portfolio_hub.services.authorization import AuthorizationPolicy
from portfolio_hub.services.base import ServiceBase, check_length, require_text

__all__ = ["PortfolioData", "PortfolioService", "PortfolioStats"]


class PortfolioData(TypedDict, total=False):
    """TypedDict for portfolio input."""

    title: str
    description: str | None
    is_public: bool
    user_id: str


class PortfolioStats(TypedDict):
    portfolio_id: int
    project_count: int
    completed_project_count: int
    active_project_count: int
    skill_count: int


def _validate_portfolio_data(data: PortfolioData, *, creating: bool) -> None:
    if creating or "title" in data:
        require_text(data.get("title"), "Portfolio title is required")
        check_length(
            data.get("title"),
            TITLE_MAX_LENGTH,
            f"Portfolio title cannot exceed {TITLE_MAX_LENGTH} characters",
        )
    check_length(
        data.get("description"),
        DESCRIPTION_MAX_LENGTH,
        f"Portfolio description cannot exceed {DESCRIPTION_MAX_LENGTH} characters",
    )


class PortfolioService(ServiceBase):
    def __init__(
        self,
        uow: UnitOfWork,
        policy: AuthorizationPolicy | None = None,
        logger: logging.Logger | None = None,
        autocommit: bool = True,
    ) -> None:
        super().__init__(uow, logger, autocommit)
        self._portfolios = uow.repository(Portfolio)
        self._policy = policy or AuthorizationPolicy(uow, logger)

    def get_all_portfolios(self) -> list[Portfolio]:
        return self._portfolios.find(order_by=[Portfolio.id])

    def get_portfolio_by_id(self, portfolio_id: int) -> Portfolio | None:
        return self._portfolios.find_by_id(portfolio_id)

    def get_portfolio_with_projects(self, portfolio_id: int) -> Portfolio:
        """Return a portfolio with its projects loaded.

        Raises:
            EntityNotFoundError: If the portfolio does not exist.
        """
        stmt = (
            select(Portfolio)
            .where(Portfolio.id == portfolio_id)
            .options(selectinload(Portfolio.projects))
        )
        portfolio = self._uow.session.scalars(stmt).first()
        if portfolio is None:
            self._logger.warning("Portfolio %s not found", portfolio_id)
            raise EntityNotFoundError("Portfolio", portfolio_id)
        return portfolio

    def get_portfolios_by_user_id(self, user_id: str) -> list[Portfolio]:
        return self._portfolios.find(Portfolio.user_id == user_id, order_by=[Portfolio.id])

    def get_public_portfolios(self) -> list[Portfolio]:
        return self._portfolios.find(Portfolio.is_public.is_(True), order_by=[Portfolio.id])

    def get_portfolio_stats(self, portfolio_id: int) -> PortfolioStats | None:
        """Project and distinct-skill counts for one portfolio, or None if it is missing."""
        if self._portfolios.find_by_id(portfolio_id) is None:
            return None

        projects = self._uow.repository(Project)
        total = projects.count(Project.portfolio_id == portfolio_id)
        completed = projects.count(
            Project.portfolio_id == portfolio_id, Project.is_completed.is_(True)
        )
        skill_count = self._uow.session.scalar(
            select(func.count(func.distinct(ProjectSkill.skill_id)))
            .join(Project, Project.id == ProjectSkill.project_id)
            .where(Project.portfolio_id == portfolio_id)
        )
        return {
            "portfolio_id": portfolio_id,
            "project_count": total,
            "completed_project_count": completed,
            "active_project_count": total - completed,
            "skill_count": int(skill_count or 0),
        }

    def create_portfolio(self, data: PortfolioData) -> Portfolio:
        """Validate and persist a new portfolio.

        Raises:
            ValidationError: On a missing/blank/overlong title, an overlong
                description, or an unknown owner.
        """
        self._logger.info("Creating portfolio for user %s", data.get("user_id"))
        try:
            _validate_portfolio_data(data, creating=True)
            user_id = require_text(data.get("user_id"), "Portfolio owner is required")
            if self._uow.repository(User).find_by_id(user_id) is None:
                raise ValidationError(f"User with ID {user_id} does not exist")
        except ValidationError as exc:
            self._logger.warning("Portfolio creation rejected: %s", exc)
            raise

        portfolio = Portfolio(
            title=data["title"].strip(),
            description=data.get("description"),
            is_public=bool(data.get("is_public", False)),
            user_id=user_id,
            created_at=utcnow(),
        )
        self._portfolios.add(portfolio)
        self._commit(f"create portfolio for user {user_id}")
        self._logger.info("Created portfolio %d for user %s", portfolio.id, user_id)
        return portfolio

    def update_portfolio(self, portfolio_id: int, data: PortfolioData) -> Portfolio:
        """Apply ``data`` to an existing portfolio.

        The owner cannot change: a ``user_id`` different from the current one
        is rejected.

        Raises:
            EntityNotFoundError: If the portfolio does not exist.
            ValidationError: On invalid fields or an owner change.
        """
        self._logger.info("Updating portfolio %s", portfolio_id)
        portfolio = self._portfolios.find_by_id(portfolio_id)
        if portfolio is None:
            self._logger.warning("Portfolio %s not found for update", portfolio_id)
            raise EntityNotFoundError("Portfolio", portfolio_id)

        try:
            _validate_portfolio_data(data, creating=False)
            if data.get("user_id") not in (None, portfolio.user_id):
                raise ValidationError("Portfolio owner cannot be changed")
        except ValidationError as exc:
            self._logger.warning("Portfolio %s update rejected: %s", portfolio_id, exc)
            raise

        if "title" in data:
            portfolio.title = data["title"].strip()
        if "description" in data:
            portfolio.description = data["description"]
        if "is_public" in data and data["is_public"] is not None:
            portfolio.is_public = bool(data["is_public"])
        portfolio.updated_at = utcnow()

        self._portfolios.update(portfolio)
        self._commit(f"update portfolio {portfolio_id}")
        self._logger.info("Updated portfolio %s", portfolio_id)
        return portfolio

    def delete_portfolio(self, portfolio_id: int) -> bool:
        """Delete a portfolio and its projects. Returns False if it does not exist."""
        if self._portfolios.find_by_id(portfolio_id) is None:
            self._logger.warning("Portfolio %s not found for deletion", portfolio_id)
            return False
        self._portfolios.delete(portfolio_id)
        self._commit(f"delete portfolio {portfolio_id}")
        self._logger.info("Deleted portfolio %s", portfolio_id)
        return True

    def portfolio_exists(self, portfolio_id: int) -> bool:
        return self._portfolios.find_by_id(portfolio_id) is not None

    def user_owns_portfolio(self, user_id: str, portfolio_id: int) -> bool:
        return self._policy.owns_portfolio(user_id, portfolio_id)
