"""Tests for PortfolioService."""

from __future__ import annotations

import pytest

from portfolio_hub.data.models import Portfolio, Project, ProjectSkill, Skill, User
from portfolio_hub.data.unit_of_work import UnitOfWork
from portfolio_hub.errors import EntityNotFoundError, ValidationError
from portfolio_hub.services.portfolio import PortfolioService


def _user(uow: UnitOfWork, username: str = "alice") -> User:
    user = User(username=username, email=f"{username}@example.com", password_hash="x")
    uow.repository(User).add(user)
    uow.commit()
    return user


def test_create_portfolio_strips_title_and_defaults_private(uow: UnitOfWork) -> None:
    owner = _user(uow)
    service = PortfolioService(uow)

    portfolio = service.create_portfolio({"title": "  My Work  ", "user_id": owner.id})

    assert portfolio.id is not None
    assert portfolio.title == "My Work"
    assert portfolio.is_public is False
    assert portfolio.created_at is not None
    assert portfolio.updated_at is None
    assert service.get_portfolio_by_id(portfolio.id) is portfolio


@pytest.mark.parametrize(
    ("data", "message"),
    [
        ({"title": ""}, "Portfolio title is required"),
        ({"title": "   "}, "Portfolio title is required"),
        ({}, "Portfolio title is required"),
        ({"title": "x" * 201}, "Portfolio title cannot exceed 200 characters"),
    ],
)
def test_create_portfolio_rejects_bad_titles(uow: UnitOfWork, data: dict, message: str) -> None:
    owner = _user(uow)
    service = PortfolioService(uow)

    with pytest.raises(ValidationError, match=message):
        service.create_portfolio({**data, "user_id": owner.id})
    assert uow.repository(Portfolio).count() == 0


def test_create_portfolio_requires_existing_owner(uow: UnitOfWork) -> None:
    service = PortfolioService(uow)

    with pytest.raises(ValidationError, match="User with ID ghost does not exist"):
        service.create_portfolio({"title": "Work", "user_id": "ghost"})


def test_title_of_exactly_200_characters_is_accepted(uow: UnitOfWork) -> None:
    owner = _user(uow)
    portfolio = PortfolioService(uow).create_portfolio({"title": "x" * 200, "user_id": owner.id})
    assert len(portfolio.title) == 200


def test_update_portfolio_applies_fields_and_stamps_updated_at(uow: UnitOfWork) -> None:
    owner = _user(uow)
    service = PortfolioService(uow)
    portfolio = service.create_portfolio({"title": "Old", "user_id": owner.id})

    updated = service.update_portfolio(
        portfolio.id, {"title": "New", "description": "Desc", "is_public": True}
    )

    assert updated.title == "New"
    assert updated.description == "Desc"
    assert updated.is_public is True
    assert updated.updated_at is not None
    assert updated.updated_at >= updated.created_at


def test_update_portfolio_rejects_owner_change(uow: UnitOfWork) -> None:
    owner = _user(uow)
    other = _user(uow, "bob")
    service = PortfolioService(uow)
    portfolio = service.create_portfolio({"title": "Mine", "user_id": owner.id})

    with pytest.raises(ValidationError, match="Portfolio owner cannot be changed"):
        service.update_portfolio(portfolio.id, {"user_id": other.id})

    # same owner is fine
    service.update_portfolio(portfolio.id, {"user_id": owner.id, "title": "Still mine"})
    assert portfolio.user_id == owner.id


def test_update_missing_portfolio_raises_not_found(uow: UnitOfWork) -> None:
    with pytest.raises(EntityNotFoundError):
        PortfolioService(uow).update_portfolio(999, {"title": "Nope"})


def test_delete_portfolio_cascades_to_projects_and_links(uow: UnitOfWork) -> None:
    owner = _user(uow)
    service = PortfolioService(uow)
    portfolio = service.create_portfolio({"title": "Work", "user_id": owner.id})
    project = Project(title="API", portfolio_id=portfolio.id)
    skill = Skill(name="Python", category="Language")
    uow.repository(Project).add(project)
    uow.repository(Skill).add(skill)
    uow.flush()
    uow.repository(ProjectSkill).add(
        ProjectSkill(project_id=project.id, skill_id=skill.id, proficiency_level=4)
    )
    uow.commit()

    assert service.delete_portfolio(portfolio.id) is True

    assert uow.repository(Portfolio).count() == 0
    assert uow.repository(Project).count() == 0
    assert uow.repository(ProjectSkill).count() == 0
    # skills are shared and survive
    assert uow.repository(Skill).count() == 1
    assert service.delete_portfolio(portfolio.id) is False


def test_queries_by_user_and_visibility(uow: UnitOfWork) -> None:
    alice = _user(uow)
    bob = _user(uow, "bob")
    service = PortfolioService(uow)
    public = service.create_portfolio({"title": "Public", "user_id": alice.id, "is_public": True})
    private = service.create_portfolio({"title": "Private", "user_id": alice.id})
    bobs = service.create_portfolio({"title": "Bob", "user_id": bob.id})

    assert [p.id for p in service.get_all_portfolios()] == [public.id, private.id, bobs.id]
    assert [p.id for p in service.get_portfolios_by_user_id(alice.id)] == [public.id, private.id]
    assert [p.id for p in service.get_public_portfolios()] == [public.id]
    assert service.user_owns_portfolio(alice.id, private.id)
    assert not service.user_owns_portfolio(bob.id, private.id)
    assert not service.user_owns_portfolio(alice.id, 999)
    assert service.portfolio_exists(public.id)
    assert not service.portfolio_exists(999)


def test_get_portfolio_with_projects(uow: UnitOfWork) -> None:
    owner = _user(uow)
    service = PortfolioService(uow)
    portfolio = service.create_portfolio({"title": "Work", "user_id": owner.id})
    uow.repository(Project).add(Project(title="One", portfolio_id=portfolio.id))
    uow.commit()

    loaded = service.get_portfolio_with_projects(portfolio.id)
    assert [p.title for p in loaded.projects] == ["One"]

    with pytest.raises(EntityNotFoundError, match="Portfolio with ID 404 not found"):
        service.get_portfolio_with_projects(404)


def test_portfolio_stats_count_projects_and_distinct_skills(uow: UnitOfWork) -> None:
    owner = _user(uow)
    service = PortfolioService(uow)
    portfolio = service.create_portfolio({"title": "Work", "user_id": owner.id})
    done = Project(title="Done", portfolio_id=portfolio.id, is_completed=True)
    open_ = Project(title="Open", portfolio_id=portfolio.id)
    python = Skill(name="Python", category="Language")
    sql = Skill(name="SQL", category="Database")
    for entity in (done, open_, python, sql):
        uow.session.add(entity)
    uow.flush()
    links = uow.repository(ProjectSkill)
    links.add(ProjectSkill(project_id=done.id, skill_id=python.id, proficiency_level=3))
    links.add(ProjectSkill(project_id=open_.id, skill_id=python.id, proficiency_level=2))
    links.add(ProjectSkill(project_id=open_.id, skill_id=sql.id, proficiency_level=5))
    uow.commit()

    stats = service.get_portfolio_stats(portfolio.id)

    assert stats == {
        "portfolio_id": portfolio.id,
        "project_count": 2,
        "completed_project_count": 1,
        "active_project_count": 1,
        "skill_count": 2,
    }
    assert service.get_portfolio_stats(999) is None
