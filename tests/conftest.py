from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

import portfolio_hub.data.db as app_db
from portfolio_hub.api.main import create_app
from portfolio_hub.config import Settings, reset_settings
from portfolio_hub.data.db import init_db
from portfolio_hub.data.models import User
from portfolio_hub.data.unit_of_work import UnitOfWork
from portfolio_hub.services.passwords import hash_password

PASSWORD = "Sup3r$ecret!"


@pytest.fixture(autouse=True)
def _restore_app_logger() -> Iterator[None]:
    """Undo configure_logging() so caplog still sees records from the app."""
    app_logger = logging.getLogger("portfolio_hub")
    saved = (app_logger.level, list(app_logger.handlers), app_logger.propagate)
    yield
    app_logger.setLevel(saved[0])
    app_logger.handlers[:] = saved[1]
    app_logger.propagate = saved[2]


@pytest.fixture
def api_db(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[None]:
    """Use a temporary SQLite DB."""
    db_path = tmp_path / "api.db"
    monkeypatch.setenv("DB_URL", f"sqlite:///{db_path.as_posix()}")
    monkeypatch.setenv("SEED_DATA", "false")
    app_db.reset_db()
    reset_settings()
    init_db()
    yield
    # Dispose engine to release connections
    app_db.reset_db()
    reset_settings()


@pytest.fixture
def uow(api_db: None) -> Iterator[UnitOfWork]:
    with UnitOfWork() as unit:
        yield unit


@pytest.fixture
def settings() -> Settings:
    """Test settings; rate limiting is off unless a test builds its own app."""
    return Settings(rate_limit_enabled=False, seed_data=False)


@pytest.fixture
def client(api_db: None, settings: Settings) -> TestClient:
    return TestClient(create_app(settings))


@pytest.fixture
def make_user(api_db: None) -> Callable[..., User]:
    """Factory that persists a user with a known password."""

    def _make(
        username: str = "alice",
        *,
        password: str = PASSWORD,
        roles: str = "User",
        is_active: bool = True,
    ) -> User:
        with UnitOfWork() as unit:
            user = User(
                username=username,
                email=f"{username}@example.com",
                password_hash=hash_password(password),
                roles=roles,
                is_active=is_active,
            )
            unit.repository(User).add(user)
            unit.commit()
            return user

    return _make


@pytest.fixture
def login(client: TestClient) -> Callable[..., dict[str, str]]:
    """Sign in through the API and return the Authorization header."""

    def _login(username: str, password: str = PASSWORD) -> dict[str, str]:
        response = client.post(
            "/api/account/login", json={"username": username, "password": password}
        )
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['access_token']}"}

    return _login


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Automatically add api_db fixture to tests in API test files."""
    for item in items:
        test_file_path = Path(str(item.fspath))
        if "api" in test_file_path.stem.lower():
            item.add_marker(pytest.mark.usefixtures("api_db"))
