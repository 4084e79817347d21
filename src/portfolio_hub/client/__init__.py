"""Python client for the Portfolio Hub API: HTTP wrapper, query cache and UI stores."""

from portfolio_hub.client.http import ApiClient, ApiError
from portfolio_hub.client.queries import (
    PortfolioQueries,
    ProjectQueries,
    SkillQueries,
    portfolio_keys,
    project_keys,
    skill_keys,
)
from portfolio_hub.client.query_cache import QueryCache
from portfolio_hub.client.stores import PortfolioStore, ProjectStore, SkillStore

__all__ = [
    "ApiClient",
    "ApiError",
    "PortfolioQueries",
    "PortfolioStore",
    "ProjectQueries",
    "ProjectStore",
    "QueryCache",
    "SkillQueries",
    "SkillStore",
    "portfolio_keys",
    "project_keys",
    "skill_keys",
]
