"""Tests for SkillService and ProjectSkillService."""

from __future__ import annotations

import pytest

from portfolio_hub.data.models import Portfolio, Project, ProjectSkill, Skill, User
from portfolio_hub.data.unit_of_work import UnitOfWork
from portfolio_hub.errors import EntityNotFoundError, ValidationError
from portfolio_hub.services.project_skill import ProjectSkillService
from portfolio_hub.services.skill import SkillService


def _project(uow: UnitOfWork, title: str = "API") -> Project:
    user = uow.repository(User).first(User.username == "alice")
    if user is None:
        user = User(username="alice", email="alice@example.com", password_hash="x")
    project = Project(title=title, portfolio=Portfolio(title="Work", user=user))
    uow.repository(Project).add(project)
    uow.commit()
    return project


def _skill(uow: UnitOfWork, name: str = "Python", category: str = "Language") -> Skill:
    return SkillService(uow).create_skill({"name": name, "category": category})


class TestSkillService:
    def test_create_skill_trims_fields(self, uow: UnitOfWork) -> None:
        skill = SkillService(uow).create_skill(
            {"name": " Rust ", "category": " Language ", "description": "Systems"}
        )
        assert (skill.name, skill.category, skill.description) == ("Rust", "Language", "Systems")

    @pytest.mark.parametrize(
        ("data", "message"),
        [
            ({"category": "Language"}, "Skill name is required"),
            ({"name": " ", "category": "Language"}, "Skill name is required"),
            ({"name": "Rust"}, "Skill category is required"),
            ({"name": "x" * 101, "category": "Language"}, "Skill name cannot exceed 100"),
        ],
    )
    def test_create_skill_validation(self, uow: UnitOfWork, data: dict, message: str) -> None:
        with pytest.raises(ValidationError, match=message):
            SkillService(uow).create_skill(data)

    def test_skill_names_are_unique_ignoring_case(self, uow: UnitOfWork) -> None:
        service = SkillService(uow)
        service.create_skill({"name": "Python", "category": "Language"})

        with pytest.raises(ValidationError, match="Skill 'python' already exists"):
            service.create_skill({"name": "python", "category": "Language"})
        assert uow.repository(Skill).count() == 1

    def test_update_skill_allows_keeping_its_own_name(self, uow: UnitOfWork) -> None:
        service = SkillService(uow)
        python = _skill(uow)
        _skill(uow, "Go")

        updated = service.update_skill(python.id, {"name": "Python", "category": "Backend"})
        assert updated.category == "Backend"

        with pytest.raises(ValidationError, match="Skill 'Go' already exists"):
            service.update_skill(python.id, {"name": "Go"})
        with pytest.raises(EntityNotFoundError):
            service.update_skill(999, {"name": "Nope"})

    def test_categories_and_case_insensitive_category_lookup(self, uow: UnitOfWork) -> None:
        service = SkillService(uow)
        _skill(uow, "React", "Frontend")
        _skill(uow, "Angular", "Frontend")
        _skill(uow, "Go", "Language")

        assert service.get_skill_categories() == ["Frontend", "Language"]
        assert [s.name for s in service.get_skills_by_category("frontend")] == [
            "Angular",
            "React",
        ]
        assert [s.name for s in service.get_all_skills()] == ["Angular", "Go", "React"]

    def test_delete_skill_detaches_it_from_projects(self, uow: UnitOfWork) -> None:
        project = _project(uow)
        skill = _skill(uow)
        ProjectSkillService(uow).add_skill_to_project(project.id, skill.id, 3)

        service = SkillService(uow)
        assert service.delete_skill(skill.id) is True
        assert uow.repository(ProjectSkill).count() == 0
        assert uow.repository(Project).count() == 1
        assert service.delete_skill(skill.id) is False
        assert not service.skill_exists(skill.id)


class TestProjectSkillService:
    def test_add_skill_to_project(self, uow: UnitOfWork) -> None:
        project = _project(uow)
        skill = _skill(uow)
        service = ProjectSkillService(uow)

        link = service.add_skill_to_project(project.id, skill.id, 4, is_primary=True)

        assert (link.project_id, link.skill_id) == (project.id, skill.id)
        assert link.proficiency_level == 4
        assert link.is_primary is True
        assert service.project_has_skill(project.id, skill.id)
        assert [p.id for p in service.get_projects_by_skill(skill.id)] == [project.id]

    def test_add_skill_checks_run_in_order(self, uow: UnitOfWork) -> None:
        project = _project(uow)
        skill = _skill(uow)
        service = ProjectSkillService(uow)

        # missing project wins over a bad level
        with pytest.raises(ValidationError, match="Project with ID 999 not found"):
            service.add_skill_to_project(999, skill.id, 9)
        with pytest.raises(ValidationError, match="Skill with ID 999 not found"):
            service.add_skill_to_project(project.id, 999, 9)

        service.add_skill_to_project(project.id, skill.id, 3)
        with pytest.raises(ValidationError, match="is already assigned to project"):
            service.add_skill_to_project(project.id, skill.id, 9)

    @pytest.mark.parametrize("level", [0, 6, -1])
    def test_proficiency_must_be_between_one_and_five(self, uow: UnitOfWork, level: int) -> None:
        project = _project(uow)
        skill = _skill(uow)

        with pytest.raises(ValidationError, match="Proficiency level must be between 1 and 5"):
            ProjectSkillService(uow).add_skill_to_project(project.id, skill.id, level)
        assert uow.repository(ProjectSkill).count() == 0

    @pytest.mark.parametrize("level", [1, 5])
    def test_proficiency_bounds_are_inclusive(self, uow: UnitOfWork, level: int) -> None:
        project = _project(uow)
        skill = _skill(uow)

        link = ProjectSkillService(uow).add_skill_to_project(project.id, skill.id, level)
        assert link.proficiency_level == level

    def test_update_project_skill(self, uow: UnitOfWork) -> None:
        project = _project(uow)
        skill = _skill(uow)
        service = ProjectSkillService(uow)
        service.add_skill_to_project(project.id, skill.id, 2)

        link = service.update_project_skill(project.id, skill.id, 5, is_primary=True)
        assert (link.proficiency_level, link.is_primary) == (5, True)

        # primary flag untouched when omitted
        link = service.update_project_skill(project.id, skill.id, 4)
        assert (link.proficiency_level, link.is_primary) == (4, True)

        with pytest.raises(ValidationError):
            service.update_project_skill(project.id, skill.id, 0)

    def test_update_unattached_skill_raises_not_found(self, uow: UnitOfWork) -> None:
        project = _project(uow)
        skill = _skill(uow)

        with pytest.raises(EntityNotFoundError, match="is not assigned to project"):
            ProjectSkillService(uow).update_project_skill(project.id, skill.id, 3)

    def test_project_skills_list_primary_first(self, uow: UnitOfWork) -> None:
        project = _project(uow)
        first = _skill(uow, "Python")
        second = _skill(uow, "SQL", "Database")
        service = ProjectSkillService(uow)
        service.add_skill_to_project(project.id, first.id, 3)
        service.add_skill_to_project(project.id, second.id, 3, is_primary=True)

        assert [link.skill_id for link in service.get_project_skills(project.id)] == [
            second.id,
            first.id,
        ]

    def test_remove_skill_from_project(self, uow: UnitOfWork) -> None:
        project = _project(uow)
        skill = _skill(uow)
        service = ProjectSkillService(uow)
        service.add_skill_to_project(project.id, skill.id, 3)

        assert service.remove_skill_from_project(project.id, skill.id) is True
        assert service.remove_skill_from_project(project.id, skill.id) is False
        # the skill itself stays in the catalogue
        assert SkillService(uow).skill_exists(skill.id)
