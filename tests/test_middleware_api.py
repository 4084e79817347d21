"""Tests for rate limiting, security headers, CORS and suspicious-request logging."""

from __future__ import annotations

import logging
import time

import pytest
from fastapi.testclient import TestClient
from limits import parse
from starlette.requests import Request

from portfolio_hub.api.main import create_app
from portfolio_hub.api.middleware import RateLimits, limiter, log_suspicious_request
from portfolio_hub.api.middleware.rate_limit import client_key
from portfolio_hub.api.middleware.security_headers import find_suspicious_pattern
from portfolio_hub.config import Settings
from portfolio_hub.constants.security import (
    ANONYMOUS_PARTITION,
    POLICY_LIMITS_PER_MINUTE,
    RATE_LIMIT_MESSAGE,
)

SECURITY_LOGGER = "portfolio_hub.api.middleware.security_headers"
TEST_ADDRESS = ("203.0.113.9", 5555)


def _limits(global_limit: int = 100, **policies: int) -> RateLimits:
    return RateLimits(
        global_per_minute=global_limit, policies={**POLICY_LIMITS_PER_MINUTE, **policies}
    )


def _limited_client(limits: RateLimits) -> TestClient:
    return TestClient(create_app(Settings(seed_data=False), limits))


def _request(
    path: str = "/",
    query: str = "",
    user_agent: str | None = "Mozilla/5.0 test",
    client: tuple[str, int] | None = TEST_ADDRESS,
) -> Request:
    headers = [(b"user-agent", user_agent.encode())] if user_agent is not None else []
    scope = {
        "type": "http",
        "method": "GET",
        "scheme": "http",
        "server": ("testserver", 80),
        "path": path,
        "query_string": query.encode(),
        "headers": headers,
    }
    if client is not None:
        scope["client"] = client
    return Request(scope)


class TestRateLimits:
    def test_defaults(self) -> None:
        limits = RateLimits()

        assert limits.global_limit() == "100/minute"
        assert limits.policy_limit("api") == "60/minute"
        assert limits.policy_limit("auth") == "10/minute"
        assert limits.policy_limit("external_auth") == "20/minute"

    def test_clients_are_keyed_by_address(self) -> None:
        assert client_key(_request()) == "203.0.113.9"
        assert client_key(_request(client=None)) == ANONYMOUS_PARTITION


class TestRateLimiting:
    def test_auth_policy_returns_429_with_retry_after(self) -> None:
        client = _limited_client(_limits(auth=2))
        payload = {"username": "nobody", "password": "x"}

        statuses = [client.post("/api/account/login", json=payload).status_code for _ in range(2)]
        limited = client.post("/api/account/login", json=payload)

        assert statuses == [401, 401]
        assert limited.status_code == 429
        assert limited.text == RATE_LIMIT_MESSAGE
        assert 1 <= int(limited.headers["Retry-After"]) <= 60
        # other routes are still open
        assert client.get("/").status_code == 200

    def test_login_and_register_share_the_auth_policy(self) -> None:
        client = _limited_client(_limits(auth=1))

        client.post("/api/account/login", json={"username": "nobody", "password": "x"})
        response = client.post("/api/account/register", json={"username": "newcomer"})

        assert response.status_code == 429

    def test_token_refresh_has_its_own_policy(self) -> None:
        client = _limited_client(_limits(auth=1, external_auth=2))
        client.post("/api/account/login", json={"username": "nobody", "password": "x"})

        statuses = [
            client.post("/api/account/refresh-token", json={"refresh_token": "bogus"}).status_code
            for _ in range(3)
        ]

        assert 429 not in statuses[:2]
        assert statuses[2] == 429

    def test_api_policy_is_shared_across_resource_routes(self) -> None:
        client = _limited_client(_limits(api=2))

        first = client.get("/api/portfolios")
        second = client.get("/api/skills")
        third = client.get("/api/projects")

        assert first.status_code != 429
        assert second.status_code != 429
        assert third.status_code == 429
        assert client.get("/api/account/me").status_code == 401

    def test_global_limit_covers_every_route(self) -> None:
        client = _limited_client(_limits(global_limit=3))

        statuses = [client.get("/").status_code for _ in range(4)]

        assert statuses == [200, 200, 200, 429]

    def test_global_limit_also_counts_policy_routes(self) -> None:
        client = _limited_client(_limits(global_limit=2))

        client.get("/api/skills")
        client.get("/api/skills")

        assert client.get("/").status_code == 429

    def test_disabled_limiter_lets_everything_through(self) -> None:
        settings = Settings(seed_data=False, rate_limit_enabled=False)
        client = TestClient(create_app(settings, _limits(global_limit=1)))

        assert [client.get("/").status_code for _ in range(3)] == [200, 200, 200]

    def test_new_app_starts_with_empty_counters(self) -> None:
        _limited_client(_limits(global_limit=1)).get("/")

        assert _limited_client(_limits(global_limit=1)).get("/").status_code == 200

    def test_rejections_are_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        client = _limited_client(_limits(global_limit=1))
        client.get("/")

        with caplog.at_level(logging.WARNING):
            client.get("/")

        assert "Rate limit (global) exceeded by testclient on /" in caplog.text

    def test_counters_are_dropped_once_their_window_passes(self) -> None:
        create_app(Settings(seed_data=False))
        strategy = limiter.limiter
        item = parse("1/second")

        for n in range(500):
            strategy.hit(item, f"198.51.100.{n}", "global")
        assert len(strategy.storage.storage) == 500

        time.sleep(1.1)
        strategy.hit(item, "192.0.2.1", "global")
        deadline = time.monotonic() + 2
        while len(strategy.storage.storage) > 1 and time.monotonic() < deadline:
            time.sleep(0.02)

        assert len(strategy.storage.storage) == 1



class TestSecurityHeaders:
    def test_hardening_headers_are_added(self, client: TestClient) -> None:
        response = client.get("/")

        assert response.headers["X-Frame-Options"] == "DENY"
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-XSS-Protection"] == "1; mode=block"
        assert response.headers["Referrer-Policy"] == "strict-origin-when-cross-origin"
        assert "frame-ancestors 'none'" in response.headers["Content-Security-Policy"]
        assert response.headers["Cross-Origin-Opener-Policy"] == "same-origin"
        assert "camera=()" in response.headers["Permissions-Policy"]
        assert "server" not in response.headers

    def test_headers_are_added_to_error_responses(self, client: TestClient) -> None:
        response = client.get("/api/portfolios/999")

        assert response.status_code == 404
        assert response.headers["X-Frame-Options"] == "DENY"

    def test_hsts_only_over_https(self, settings: Settings) -> None:
        app = create_app(settings)

        plain = TestClient(app).get("/")
        secure = TestClient(app, base_url="https://testserver").get("/")

        assert "strict-transport-security" not in plain.headers
        assert secure.headers["Strict-Transport-Security"] == (
            "max-age=31536000; includeSubDomains; preload"
        )


class TestCors:
    def test_development_allows_local_frontend(self, client: TestClient) -> None:
        response = client.options(
            "/api/portfolios",
            headers={
                "Origin": "http://localhost:3000",
                "Access-Control-Request-Method": "PATCH",
            },
        )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "http://localhost:3000"
        assert response.headers["access-control-allow-credentials"] == "true"

    def test_production_only_allows_configured_origins(self) -> None:
        settings = Settings(environment="production", seed_data=False, rate_limit_enabled=False)
        client = TestClient(create_app(settings))

        allowed = client.get("/", headers={"Origin": "https://yourdomain.com"})
        denied = client.get("/", headers={"Origin": "http://localhost:3000"})

        assert allowed.headers["access-control-allow-origin"] == "https://yourdomain.com"
        assert "access-control-allow-origin" not in denied.headers

    def test_production_https_redirect(self) -> None:
        settings = Settings(
            environment="production",
            enable_https_redirect=True,
            seed_data=False,
            rate_limit_enabled=False,
        )
        client = TestClient(create_app(settings))

        response = client.get("/", follow_redirects=False)

        assert response.status_code in (307, 308)
        assert response.headers["location"].startswith("https://")


class TestSuspiciousRequests:
    @pytest.mark.parametrize(
        ("path", "query", "pattern"),
        [
            ("/api/skills", "q=<SCRIPT>alert(1)</script>", "script"),
            ("/files/../etc/passwd", "", "../"),
            ("/api/projects", "id=1 UNION SELECT", "union"),
            ("/api/portfolios", "", None),
        ],
    )
    def test_find_suspicious_pattern(self, path: str, query: str, pattern: str | None) -> None:
        assert find_suspicious_pattern(path, query) == pattern

    def test_suspicious_query_is_logged_but_served(
        self, client: TestClient, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING, logger=SECURITY_LOGGER):
            response = client.get("/", params={"q": "javascript:alert(1)"})

        assert response.status_code == 200
        assert "Suspicious request detected from testclient" in caplog.text

    def test_short_user_agent_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger=SECURITY_LOGGER):
            assert log_suspicious_request(_request(user_agent="curl"))

        assert "suspicious User-Agent from 203.0.113.9" in caplog.text

    def test_ordinary_request_is_not_flagged(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger=SECURITY_LOGGER):
            assert not log_suspicious_request(_request("/api/portfolios", "page=2"))

        assert caplog.text == ""
