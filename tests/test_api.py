"""Tests for the app factory, the root routes and error translation."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

import portfolio_hub.api.routes.root as root_routes
from portfolio_hub.api.main import create_app
from portfolio_hub.config import Settings
from portfolio_hub.errors import EntityNotFoundError


class TestRootEndpoints:
    """Liveness and database health."""

    def test_root_returns_plain_text(self, client: TestClient) -> None:
        response = client.get("/")

        assert response.status_code == 200
        assert response.text == "API is running!"
        assert response.headers["content-type"].startswith("text/plain")

    def test_database_health_reports_connection(self, client: TestClient) -> None:
        response = client.get("/health/db")

        assert response.status_code == 200
        data = response.json()
        assert data["Console"] == "Database Health Check"
        assert data["Status"] == "Connected"
        assert data["Database"] == "SQLite"
        assert data["Message"] == "Successfully connected to the database"
        assert data["ConnectionInfo"]["Host"] == "N/A"
        assert data["ConnectionInfo"]["Database"].endswith("api.db")
        assert data["Timestamp"]

    def test_database_health_failure_is_a_problem_response(
        self, client: TestClient, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def broken_engine():
            raise RuntimeError("connection refused")

        monkeypatch.setattr(root_routes, "get_engine", broken_engine)

        response = client.get("/health/db")

        assert response.status_code == 500
        assert response.headers["content-type"].startswith("application/problem+json")
        assert response.json() == {
            "type": "https://httpstatuses.org/500",
            "title": "Database Connection Error",
            "status": 500,
            "detail": "connection refused",
        }


class TestErrorHandling:
    def test_unhandled_errors_become_generic_problems(self, api_db: None) -> None:
        app = create_app(Settings(rate_limit_enabled=False, seed_data=False))

        @app.get("/boom")
        def boom() -> None:
            raise RuntimeError("secret internals")

        client = TestClient(app, raise_server_exceptions=False)
        response = client.get("/boom")

        assert response.status_code == 500
        assert response.json()["title"] == "Internal Server Error"
        assert response.json()["detail"] == "An unexpected error occurred."
        assert "secret internals" not in response.text

    def test_domain_not_found_maps_to_404(self, api_db: None) -> None:
        app = create_app(Settings(rate_limit_enabled=False, seed_data=False))

        @app.get("/missing")
        def missing() -> None:
            raise EntityNotFoundError("Widget", 3)

        response = TestClient(app).get("/missing")

        assert response.status_code == 404
        assert response.json() == {"detail": "Widget with ID 3 not found"}

    def test_request_validation_is_422(self, client: TestClient) -> None:
        response = client.get("/api/portfolios/not-a-number")

        assert response.status_code == 422


class TestAppFactory:
    def test_routes_are_mounted_under_api(self, client: TestClient) -> None:
        paths = {route.path for route in client.app.routes}

        assert "/" in paths
        assert "/health/db" in paths
        assert "/api/portfolios" in paths
        assert "/api/projects/{project_id}/complete" in paths
        assert "/api/projects/{project_id}/skills/{skill_id}" in paths
        assert "/api/skills/categories" in paths
        assert "/api/account/refresh-token" in paths

    def test_openapi_schema_is_served(self, client: TestClient) -> None:
        response = client.get("/openapi.json")

        assert response.status_code == 200
        assert response.json()["info"]["title"] == "Portfolio Hub API"

    def test_lifespan_seeds_reference_data(self, api_db: None) -> None:
        settings = Settings(rate_limit_enabled=False, seed_data=True)

        with TestClient(create_app(settings)) as client:
            skills = client.get("/api/skills").json()

        assert len(skills) == 6
