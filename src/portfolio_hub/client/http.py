"""HTTP client for the Portfolio Hub API.

One method per route. Non-2xx responses raise ``ApiError`` carrying the
status code and the server's message. Signing in stores the token pair on
the client so later calls are authenticated.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8000"


class ApiError(Exception):
    """A non-successful API response."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        detail = body.get("detail") or body.get("title")
        if isinstance(detail, str):
            return detail
        if detail is not None:
            return str(detail)
    return response.reason_phrase


class ApiClient:
    """Thin synchronous wrapper over ``httpx.Client``.

    Args:
        base_url: API root, used only when ``client`` is not given.
        client: Pre-built client (for example FastAPI's ``TestClient``).
        timeout: Request timeout in seconds for a client built here.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        client: httpx.Client | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._client = client or httpx.Client(base_url=base_url, timeout=timeout)
        self._owns_client = client is None
        self.access_token: str | None = None
        self.refresh_token: str | None = None

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> ApiClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        headers = {}
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        response = self._client.request(method, path, json=json, params=params, headers=headers)
        if response.status_code >= 400:
            message = _error_message(response)
            logger.debug("%s %s failed with %d: %s", method, path, response.status_code, message)
            raise ApiError(response.status_code, message)
        if response.status_code == 204 or not response.content:
            return None
        if response.headers.get("content-type", "").startswith("application/json"):
            return response.json()
        return response.text

    # --- account ---

    def register(self, username: str, email: str, password: str, **profile: Any) -> dict:
        payload = {"username": username, "email": email, "password": password, **profile}
        return self._request("POST", "/api/account/register", json=payload)

    def login(self, username: str, password: str, device_name: str | None = None) -> dict:
        tokens = self._request(
            "POST",
            "/api/account/login",
            json={"username": username, "password": password, "device_name": device_name},
        )
        self._store_tokens(tokens)
        return tokens

    def refresh(self) -> dict:
        if not self.refresh_token:
            raise ApiError(401, "No refresh token")
        tokens = self._request(
            "POST", "/api/account/refresh-token", json={"refresh_token": self.refresh_token}
        )
        self._store_tokens(tokens)
        return tokens

    def logout(self) -> None:
        try:
            self._request("POST", "/api/account/logout")
        finally:
            self.access_token = None
            self.refresh_token = None

    def me(self) -> dict:
        return self._request("GET", "/api/account/me")

    def list_sessions(self) -> list[dict]:
        return self._request("GET", "/api/account/sessions")

    def revoke_session(self, session_id: str) -> None:
        self._request("DELETE", f"/api/account/sessions/{session_id}")

    def _store_tokens(self, tokens: dict) -> None:
        self.access_token = tokens["access_token"]
        self.refresh_token = tokens["refresh_token"]

    # --- portfolios ---

    def list_portfolios(self) -> list[dict]:
        return self._request("GET", "/api/portfolios")

    def list_my_portfolios(self) -> list[dict]:
        return self._request("GET", "/api/portfolios/mine")

    def get_portfolio(self, portfolio_id: int) -> dict:
        return self._request("GET", f"/api/portfolios/{portfolio_id}")

    def get_portfolio_with_projects(self, portfolio_id: int) -> dict:
        return self._request("GET", f"/api/portfolios/{portfolio_id}/with-projects")

    def get_portfolio_stats(self, portfolio_id: int) -> dict:
        return self._request("GET", f"/api/portfolios/{portfolio_id}/stats")

    def get_portfolio_projects(self, portfolio_id: int) -> list[dict]:
        return self._request("GET", f"/api/portfolios/{portfolio_id}/projects")

    def create_portfolio(self, data: dict) -> dict:
        return self._request("POST", "/api/portfolios", json=data)

    def update_portfolio(self, portfolio_id: int, data: dict) -> dict:
        return self._request("PUT", f"/api/portfolios/{portfolio_id}", json=data)

    def delete_portfolio(self, portfolio_id: int) -> None:
        self._request("DELETE", f"/api/portfolios/{portfolio_id}")

    # --- projects ---

    def list_projects(self) -> list[dict]:
        return self._request("GET", "/api/projects")

    def get_project(self, project_id: int) -> dict:
        return self._request("GET", f"/api/projects/{project_id}")

    def get_projects_by_portfolio(self, portfolio_id: int) -> list[dict]:
        return self._request("GET", f"/api/projects/portfolio/{portfolio_id}")

    def get_active_projects(self, portfolio_id: int) -> list[dict]:
        return self._request("GET", f"/api/projects/portfolio/{portfolio_id}/active")

    def get_completed_projects(self, portfolio_id: int) -> list[dict]:
        return self._request("GET", f"/api/projects/portfolio/{portfolio_id}/completed")

    def create_project(self, data: dict) -> dict:
        return self._request("POST", "/api/projects", json=data)

    def update_project(self, project_id: int, data: dict) -> dict:
        return self._request("PUT", f"/api/projects/{project_id}", json=data)

    def complete_project(self, project_id: int, end_date: str | None = None) -> dict:
        return self._request(
            "PATCH", f"/api/projects/{project_id}/complete", json={"end_date": end_date}
        )

    def delete_project(self, project_id: int) -> None:
        self._request("DELETE", f"/api/projects/{project_id}")

    # --- skills ---

    def list_skills(self) -> list[dict]:
        return self._request("GET", "/api/skills")

    def get_skill(self, skill_id: int) -> dict:
        return self._request("GET", f"/api/skills/{skill_id}")

    def get_skills_by_category(self, category: str) -> list[dict]:
        return self._request("GET", f"/api/skills/category/{category}")

    def get_skill_categories(self) -> list[str]:
        return self._request("GET", "/api/skills/categories")

    def get_skill_projects(self, skill_id: int) -> list[dict]:
        return self._request("GET", f"/api/skills/{skill_id}/projects")

    def create_skill(self, data: dict) -> dict:
        return self._request("POST", "/api/skills", json=data)

    def update_skill(self, skill_id: int, data: dict) -> dict:
        return self._request("PUT", f"/api/skills/{skill_id}", json=data)

    def delete_skill(self, skill_id: int) -> None:
        self._request("DELETE", f"/api/skills/{skill_id}")

    # --- project skills ---

    def list_project_skills(self, project_id: int) -> list[dict]:
        return self._request("GET", f"/api/projects/{project_id}/skills")

    def add_project_skill(
        self, project_id: int, skill_id: int, proficiency_level: int, is_primary: bool = False
    ) -> dict:
        return self._request(
            "POST",
            f"/api/projects/{project_id}/skills",
            json={
                "skill_id": skill_id,
                "proficiency_level": proficiency_level,
                "is_primary": is_primary,
            },
        )

    def update_project_skill(
        self,
        project_id: int,
        skill_id: int,
        proficiency_level: int,
        is_primary: bool | None = None,
    ) -> dict:
        return self._request(
            "PUT",
            f"/api/projects/{project_id}/skills/{skill_id}",
            json={"proficiency_level": proficiency_level, "is_primary": is_primary},
        )

    def remove_project_skill(self, project_id: int, skill_id: int) -> None:
        self._request("DELETE", f"/api/projects/{project_id}/skills/{skill_id}")
