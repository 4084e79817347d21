"""Idempotent seed data: starter skills, OAuth scope definitions and the SPA client."""

from __future__ import annotations

import logging

from portfolio_hub.config import Settings
from portfolio_hub.constants.auth import DEFAULT_SCOPE_DEFINITIONS
from portfolio_hub.data.models import OAuthClient, ScopeDefinition, Skill
from portfolio_hub.data.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

DEFAULT_SKILLS = (
    ("C#", "Programming Language"),
    ("ASP.NET Core", "Framework"),
    ("Entity Framework", "ORM"),
    ("PostgreSQL", "Database"),
    ("React", "Frontend Framework"),
    ("Next.js", "Frontend Framework"),
)


def seed_skills(uow: UnitOfWork) -> int:
    """Insert the starter skills when the catalogue is empty. Returns rows added."""
    skills = uow.repository(Skill)
    if skills.count() > 0:
        return 0
    for name, category in DEFAULT_SKILLS:
        skills.add(Skill(name=name, category=category))
    return len(DEFAULT_SKILLS)


def seed_scopes(uow: UnitOfWork) -> int:
    """Insert any missing scope definitions. Returns rows added."""
    scopes = uow.repository(ScopeDefinition)
    added = 0
    for name, display_name, description, required, default, category in DEFAULT_SCOPE_DEFINITIONS:
        if scopes.find_by_id(name) is not None:
            continue
        scopes.add(
            ScopeDefinition(
                name=name,
                display_name=display_name,
                description=description,
                is_required=required,
                is_default=default,
                category=category,
                permissions=[],
            )
        )
        added += 1
    return added


def seed_default_client(uow: UnitOfWork, settings: Settings) -> bool:
    """Register the browser client from settings if it is not there yet."""
    clients = uow.repository(OAuthClient)
    if clients.find_by_id(settings.oauth_client_id) is not None:
        return False
    clients.add(
        OAuthClient(
            client_id=settings.oauth_client_id,
            client_name="Portfolio Hub SPA",
            client_type="web",
            description="Single-page web client",
            redirect_uris=[settings.oauth_redirect_uri],
            scopes=list(settings.oauth_scope),
            grant_types=["authorization_code", "refresh_token"],
            require_pkce=True,
            require_client_secret=False,
        )
    )
    return True


def seed_database(uow: UnitOfWork, settings: Settings) -> None:
    """Run every seeder and commit once."""
    skills = seed_skills(uow)
    scopes = seed_scopes(uow)
    client = seed_default_client(uow, settings)
    uow.commit()
    logger.info(
        "Seed complete: %d skills, %d scopes, default client %s",
        skills,
        scopes,
        "created" if client else "present",
    )
