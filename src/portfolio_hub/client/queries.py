"""Cached reads and cache-maintaining mutations for each resource.

Reads go through the ``QueryCache`` with a per-query staleness window.
Mutations call the API and then keep the cache coherent: the detail entry
is replaced with the server's response, every list is invalidated, deleted
details are removed, and caches scoped to a parent portfolio are
invalidated when the project's portfolio is known.
"""

from __future__ import annotations

from typing import Any

from portfolio_hub.client.http import ApiClient
from portfolio_hub.client.query_cache import QueryCache, QueryKey

MINUTE = 60.0
DEFAULT_STALE_SECONDS = 5 * MINUTE
STATS_STALE_SECONDS = 2 * MINUTE
CATEGORIES_STALE_SECONDS = 15 * MINUTE


def _params_key(params: dict[str, Any] | None) -> tuple[tuple[str, Any], ...] | None:
    if not params:
        return None
    return tuple(sorted(params.items()))


class PortfolioKeys:
    all: QueryKey = ("portfolios",)

    def lists(self) -> QueryKey:
        return (*self.all, "list")

    def list(self, params: dict[str, Any] | None = None) -> QueryKey:
        return (*self.lists(), _params_key(params))

    def details(self) -> QueryKey:
        return (*self.all, "detail")

    def detail(self, portfolio_id: int) -> QueryKey:
        return (*self.details(), portfolio_id)

    def stats(self, portfolio_id: int) -> QueryKey:
        return (*self.detail(portfolio_id), "stats")

    def projects(self, portfolio_id: int) -> QueryKey:
        return (*self.detail(portfolio_id), "projects")


class ProjectKeys:
    all: QueryKey = ("projects",)

    def lists(self) -> QueryKey:
        return (*self.all, "list")

    def list(self, params: dict[str, Any] | None = None) -> QueryKey:
        return (*self.lists(), _params_key(params))

    def details(self) -> QueryKey:
        return (*self.all, "detail")

    def detail(self, project_id: int) -> QueryKey:
        return (*self.details(), project_id)

    def by_portfolios(self) -> QueryKey:
        return (*self.all, "portfolio")

    def by_portfolio(self, portfolio_id: int) -> QueryKey:
        return (*self.by_portfolios(), portfolio_id)


class SkillKeys:
    all: QueryKey = ("skills",)

    def lists(self) -> QueryKey:
        return (*self.all, "list")

    def list(self, params: dict[str, Any] | None = None) -> QueryKey:
        return (*self.lists(), _params_key(params))

    def details(self) -> QueryKey:
        return (*self.all, "detail")

    def detail(self, skill_id: int) -> QueryKey:
        return (*self.details(), skill_id)

    def categories(self) -> QueryKey:
        return (*self.all, "categories")


portfolio_keys = PortfolioKeys()
project_keys = ProjectKeys()
skill_keys = SkillKeys()


class _ResourceQueries:
    def __init__(self, api: ApiClient, cache: QueryCache) -> None:
        self.api = api
        self.cache = cache


class PortfolioQueries(_ResourceQueries):
    def list(self, mine: bool = False) -> list[dict]:
        fetcher = self.api.list_my_portfolios if mine else self.api.list_portfolios
        key = portfolio_keys.list({"mine": True} if mine else None)
        return self.cache.fetch(key, fetcher, DEFAULT_STALE_SECONDS)

    def detail(self, portfolio_id: int) -> dict:
        return self.cache.fetch(
            portfolio_keys.detail(portfolio_id),
            lambda: self.api.get_portfolio(portfolio_id),
            DEFAULT_STALE_SECONDS,
        )

    def stats(self, portfolio_id: int) -> dict:
        return self.cache.fetch(
            portfolio_keys.stats(portfolio_id),
            lambda: self.api.get_portfolio_stats(portfolio_id),
            STATS_STALE_SECONDS,
        )

    def projects(self, portfolio_id: int) -> list[dict]:
        return self.cache.fetch(
            portfolio_keys.projects(portfolio_id),
            lambda: self.api.get_portfolio_projects(portfolio_id),
            DEFAULT_STALE_SECONDS,
        )

    def create(self, data: dict) -> dict:
        portfolio = self.api.create_portfolio(data)
        self.cache.invalidate(portfolio_keys.lists())
        self.cache.set(portfolio_keys.detail(portfolio["id"]), portfolio)
        return portfolio

    def update(self, portfolio_id: int, data: dict) -> dict:
        portfolio = self.api.update_portfolio(portfolio_id, data)
        self.cache.set(portfolio_keys.detail(portfolio["id"]), portfolio)
        self.cache.invalidate(portfolio_keys.lists())
        return portfolio

    def delete(self, portfolio_id: int) -> None:
        self.api.delete_portfolio(portfolio_id)
        self._forget(portfolio_id)
        self.cache.invalidate(portfolio_keys.lists())

    def bulk_delete(self, portfolio_ids: list[int]) -> None:
        try:
            for portfolio_id in portfolio_ids:
                self.api.delete_portfolio(portfolio_id)
                self._forget(portfolio_id)
        finally:
            self.cache.invalidate(portfolio_keys.lists())

    def _forget(self, portfolio_id: int) -> None:
        self.cache.remove(portfolio_keys.detail(portfolio_id))
        self.cache.remove(project_keys.by_portfolio(portfolio_id))
        # the portfolio's projects went with it
        self.cache.invalidate(project_keys.lists())


class ProjectQueries(_ResourceQueries):
    def list(self) -> list[dict]:
        return self.cache.fetch(project_keys.list(), self.api.list_projects, DEFAULT_STALE_SECONDS)

    def detail(self, project_id: int) -> dict:
        return self.cache.fetch(
            project_keys.detail(project_id),
            lambda: self.api.get_project(project_id),
            DEFAULT_STALE_SECONDS,
        )

    def by_portfolio(self, portfolio_id: int) -> list[dict]:
        return self.cache.fetch(
            project_keys.by_portfolio(portfolio_id),
            lambda: self.api.get_projects_by_portfolio(portfolio_id),
            DEFAULT_STALE_SECONDS,
        )

    def create(self, data: dict) -> dict:
        project = self.api.create_project(data)
        self.cache.invalidate(project_keys.lists())
        self.cache.set(project_keys.detail(project["id"]), project)
        self._invalidate_portfolio(project.get("portfolio_id"))
        return project

    def update(self, project_id: int, data: dict) -> dict:
        previous = self.cache.get(project_keys.detail(project_id))
        project = self.api.update_project(project_id, data)
        self._replace(project, previous)
        return project

    def complete(self, project_id: int, end_date: str | None = None) -> dict:
        previous = self.cache.get(project_keys.detail(project_id))
        project = self.api.complete_project(project_id, end_date)
        self._replace(project, previous)
        return project

    def delete(self, project_id: int) -> None:
        self.api.delete_project(project_id)
        self._forget(project_id)
        self.cache.invalidate(project_keys.lists())

    def bulk_delete(self, project_ids: list[int]) -> None:
        try:
            for project_id in project_ids:
                self.api.delete_project(project_id)
                self._forget(project_id)
        finally:
            self.cache.invalidate(project_keys.lists())

    def _replace(self, project: dict, previous: dict | None) -> None:
        self.cache.set(project_keys.detail(project["id"]), project)
        self.cache.invalidate(project_keys.lists())
        self._invalidate_portfolio(project.get("portfolio_id"))
        if previous and previous.get("portfolio_id") != project.get("portfolio_id"):
            self._invalidate_portfolio(previous.get("portfolio_id"))

    def _forget(self, project_id: int) -> None:
        cached = self.cache.get(project_keys.detail(project_id))
        self.cache.remove(project_keys.detail(project_id))
        if cached is not None:
            self._invalidate_portfolio(cached.get("portfolio_id"))
        else:
            # owner unknown, so every portfolio-scoped list may be affected
            self.cache.invalidate(project_keys.by_portfolios())
            self.cache.invalidate(portfolio_keys.details())

    def _invalidate_portfolio(self, portfolio_id: int | None) -> None:
        if portfolio_id is None:
            return
        self.cache.invalidate(project_keys.by_portfolio(portfolio_id))
        self.cache.invalidate(portfolio_keys.projects(portfolio_id))
        self.cache.invalidate(portfolio_keys.stats(portfolio_id))


class SkillQueries(_ResourceQueries):
    def list(self, category: str | None = None) -> list[dict]:
        if category:
            return self.cache.fetch(
                skill_keys.list({"category": category.lower()}),
                lambda: self.api.get_skills_by_category(category),
                DEFAULT_STALE_SECONDS,
            )
        return self.cache.fetch(skill_keys.list(), self.api.list_skills, DEFAULT_STALE_SECONDS)

    def detail(self, skill_id: int) -> dict:
        return self.cache.fetch(
            skill_keys.detail(skill_id),
            lambda: self.api.get_skill(skill_id),
            DEFAULT_STALE_SECONDS,
        )

    def categories(self) -> list[str]:
        return self.cache.fetch(
            skill_keys.categories(), self.api.get_skill_categories, CATEGORIES_STALE_SECONDS
        )

    def create(self, data: dict) -> dict:
        skill = self.api.create_skill(data)
        self.cache.invalidate(skill_keys.lists())
        self.cache.invalidate(skill_keys.categories())
        self.cache.set(skill_keys.detail(skill["id"]), skill)
        return skill

    def update(self, skill_id: int, data: dict) -> dict:
        skill = self.api.update_skill(skill_id, data)
        self.cache.set(skill_keys.detail(skill["id"]), skill)
        self.cache.invalidate(skill_keys.lists())
        self.cache.invalidate(skill_keys.categories())
        return skill

    def delete(self, skill_id: int) -> None:
        self.api.delete_skill(skill_id)
        self.cache.remove(skill_keys.detail(skill_id))
        self.cache.invalidate(skill_keys.lists())
        self.cache.invalidate(skill_keys.categories())

    def bulk_delete(self, skill_ids: list[int]) -> None:
        try:
            for skill_id in skill_ids:
                self.api.delete_skill(skill_id)
                self.cache.remove(skill_keys.detail(skill_id))
        finally:
            self.cache.invalidate(skill_keys.lists())
            self.cache.invalidate(skill_keys.categories())
