"""Route handlers for the API."""

from portfolio_hub.api.routes import (
    account,
    portfolios,
    project_skills,
    projects,
    root,
    skills,
)

__all__ = [
    "root",
    "portfolios",
    "projects",
    "skills",
    "project_skills",
    "account",
]
