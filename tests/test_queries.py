"""Tests for cache maintenance in the resource query helpers."""

from __future__ import annotations

from collections import Counter
from typing import Any

import pytest

from portfolio_hub.client.http import ApiError
from portfolio_hub.client.queries import (
    PortfolioQueries,
    ProjectQueries,
    SkillQueries,
    portfolio_keys,
    project_keys,
    skill_keys,
)
from portfolio_hub.client.query_cache import QueryCache


class FakeApi:
    """Stands in for ``ApiClient``; counts calls and serves canned data."""

    def __init__(self) -> None:
        self.calls: Counter[str] = Counter()
        self.projects = {
            1: {"id": 1, "title": "API", "portfolio_id": 10},
            2: {"id": 2, "title": "CLI", "portfolio_id": 10},
        }
        self.fail_on: set[int] = set()

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)

        def call(*args: Any) -> Any:
            self.calls[name] += 1
            return getattr(self, f"_{name}", lambda *a: [])(*args)

        return call

    def _get_project(self, project_id: int) -> dict:
        return self.projects[project_id]

    def _update_project(self, project_id: int, data: dict) -> dict:
        self.projects[project_id] = {**self.projects[project_id], **data}
        return self.projects[project_id]

    def _complete_project(self, project_id: int, end_date: str | None) -> dict:
        return {**self.projects[project_id], "is_completed": True}

    def _create_project(self, data: dict) -> dict:
        return {"id": 3, **data}

    def _delete_project(self, project_id: int) -> None:
        if project_id in self.fail_on:
            raise ApiError(403, "forbidden")

    def _get_portfolio(self, portfolio_id: int) -> dict:
        return {"id": portfolio_id, "title": "Work"}

    def _create_portfolio(self, data: dict) -> dict:
        return {"id": 11, **data}

    def _update_portfolio(self, portfolio_id: int, data: dict) -> dict:
        return {"id": portfolio_id, **data}

    def _get_portfolio_stats(self, portfolio_id: int) -> dict:
        return {"portfolio_id": portfolio_id, "project_count": 2}

    def _create_skill(self, data: dict) -> dict:
        return {"id": 5, **data}

    def _update_skill(self, skill_id: int, data: dict) -> dict:
        return {"id": skill_id, **data}

    def _get_skill_categories(self) -> list[str]:
        return ["Language"]


@pytest.fixture
def api() -> FakeApi:
    return FakeApi()


@pytest.fixture
def cache() -> QueryCache:
    return QueryCache()


def _stale(cache: QueryCache, key: tuple) -> bool:
    return cache.is_stale(key, stale_seconds=3600)


class TestKeys:
    def test_keys_are_hierarchical(self) -> None:
        assert portfolio_keys.list() == ("portfolios", "list", None)
        assert portfolio_keys.stats(3) == ("portfolios", "detail", 3, "stats")
        assert project_keys.by_portfolio(3) == ("projects", "portfolio", 3)
        assert skill_keys.categories() == ("skills", "categories")

    def test_list_params_are_order_independent(self) -> None:
        assert skill_keys.list({"b": 2, "a": 1}) == skill_keys.list({"a": 1, "b": 2})


class TestPortfolioQueries:
    def test_reads_are_cached(self, api: FakeApi, cache: QueryCache) -> None:
        queries = PortfolioQueries(api, cache)

        queries.list()
        queries.list()
        queries.list(mine=True)
        queries.stats(10)
        queries.stats(10)

        assert api.calls == Counter(
            list_portfolios=1, list_my_portfolios=1, get_portfolio_stats=1
        )

    def test_create_and_update_refresh_detail_and_lists(
        self, api: FakeApi, cache: QueryCache
    ) -> None:
        queries = PortfolioQueries(api, cache)
        queries.list()

        created = queries.create({"title": "Work"})
        assert _stale(cache, portfolio_keys.list())
        assert queries.detail(created["id"]) == created
        assert api.calls["get_portfolio"] == 0

        queries.list()
        queries.update(11, {"title": "Renamed"})

        assert cache.get(portfolio_keys.detail(11)) == {"id": 11, "title": "Renamed"}
        assert _stale(cache, portfolio_keys.list())

    def test_delete_forgets_portfolio_and_its_projects(
        self, api: FakeApi, cache: QueryCache
    ) -> None:
        queries = PortfolioQueries(api, cache)
        projects = ProjectQueries(api, cache)
        queries.detail(10)
        queries.stats(10)
        projects.by_portfolio(10)
        projects.list()

        queries.delete(10)

        assert portfolio_keys.detail(10) not in cache
        assert portfolio_keys.stats(10) not in cache
        assert project_keys.by_portfolio(10) not in cache
        assert _stale(cache, project_keys.list())


class TestProjectQueries:
    def test_update_invalidates_portfolio_scoped_caches(
        self, api: FakeApi, cache: QueryCache
    ) -> None:
        queries = ProjectQueries(api, cache)
        portfolios = PortfolioQueries(api, cache)
        queries.detail(1)
        queries.by_portfolio(10)
        portfolios.stats(10)
        portfolios.detail(10)

        updated = queries.update(1, {"title": "API v2"})

        assert cache.get(project_keys.detail(1)) == updated
        assert _stale(cache, project_keys.by_portfolio(10))
        assert _stale(cache, portfolio_keys.stats(10))
        assert not _stale(cache, portfolio_keys.detail(10))

    def test_moving_a_project_invalidates_both_portfolios(
        self, api: FakeApi, cache: QueryCache
    ) -> None:
        queries = ProjectQueries(api, cache)
        queries.detail(1)
        queries.by_portfolio(10)
        queries.by_portfolio(20)

        queries.update(1, {"portfolio_id": 20})

        assert _stale(cache, project_keys.by_portfolio(10))
        assert _stale(cache, project_keys.by_portfolio(20))

    def test_complete_replaces_detail(self, api: FakeApi, cache: QueryCache) -> None:
        queries = ProjectQueries(api, cache)
        queries.detail(2)

        queries.complete(2)

        assert queries.detail(2)["is_completed"] is True
        assert api.calls["get_project"] == 1

    def test_create_invalidates_parent_portfolio(self, api: FakeApi, cache: QueryCache) -> None:
        queries = ProjectQueries(api, cache)
        queries.by_portfolio(10)
        queries.by_portfolio(20)

        queries.create({"title": "New", "portfolio_id": 10})

        assert _stale(cache, project_keys.by_portfolio(10))
        assert not _stale(cache, project_keys.by_portfolio(20))
        assert cache.get(project_keys.detail(3))["title"] == "New"

    def test_delete_of_uncached_project_invalidates_every_portfolio_scope(
        self, api: FakeApi, cache: QueryCache
    ) -> None:
        queries = ProjectQueries(api, cache)
        queries.by_portfolio(20)

        queries.delete(1)

        assert _stale(cache, project_keys.by_portfolio(20))

    def test_bulk_delete_stops_at_first_failure_but_still_invalidates_lists(
        self, api: FakeApi, cache: QueryCache
    ) -> None:
        queries = ProjectQueries(api, cache)
        queries.detail(1)
        queries.detail(2)
        queries.list()
        api.fail_on = {2}

        with pytest.raises(ApiError):
            queries.bulk_delete([1, 2])

        assert project_keys.detail(1) not in cache
        assert project_keys.detail(2) in cache
        assert _stale(cache, project_keys.list())


class TestSkillQueries:
    def test_category_lists_are_cached_separately(self, api: FakeApi, cache: QueryCache) -> None:
        queries = SkillQueries(api, cache)

        queries.list()
        queries.list(category="Language")
        queries.list(category="language")

        assert api.calls == Counter(list_skills=1, get_skills_by_category=1)

    def test_mutations_invalidate_lists_and_categories(
        self, api: FakeApi, cache: QueryCache
    ) -> None:
        queries = SkillQueries(api, cache)
        queries.list()
        queries.categories()

        skill = queries.create({"name": "Rust", "category": "Language"})
        assert _stale(cache, skill_keys.list())
        assert _stale(cache, skill_keys.categories())

        queries.categories()
        queries.delete(skill["id"])

        assert skill_keys.detail(5) not in cache
        assert _stale(cache, skill_keys.categories())
        assert api.calls["get_skill_categories"] == 2
