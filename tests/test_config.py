"""Tests for environment-driven settings."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from portfolio_hub.config import Settings, get_settings, load_settings, reset_settings

ENV_VARS = (
    "APP_ENV",
    "JWT_SECRET",
    "CORS_ALLOWED_ORIGINS",
    "ACCESS_TOKEN_MINUTES",
    "RATE_LIMIT_ENABLED",
    "LOG_LEVEL",
    "LOG_DIR",
    "SEED_DATA",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    reset_settings()
    yield
    reset_settings()


def test_defaults_match_settings_defaults() -> None:
    assert load_settings() == Settings()


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_ENV", "production")
    monkeypatch.setenv("JWT_SECRET", "x" * 40)
    monkeypatch.setenv("CORS_ALLOWED_ORIGINS", "http://a.test, http://b.test,")
    monkeypatch.setenv("ACCESS_TOKEN_MINUTES", "15")
    monkeypatch.setenv("RATE_LIMIT_ENABLED", "off")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("SEED_DATA", "0")

    settings = load_settings()

    assert not settings.is_development
    assert settings.jwt_secret == "x" * 40
    assert settings.cors_allowed_origins == ("http://a.test", "http://b.test")
    assert settings.access_token_minutes == 15
    assert settings.rate_limit_enabled is False
    assert settings.log_level == "DEBUG"
    assert settings.seed_data is False


def test_blank_boolean_falls_back_to_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RATE_LIMIT_ENABLED", "  ")

    assert load_settings().rate_limit_enabled is True


def test_short_jwt_secret_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("JWT_SECRET", "too-short")

    with pytest.raises(ValueError, match="at least 32 characters"):
        load_settings()


def test_get_settings_is_cached_until_reset(monkeypatch: pytest.MonkeyPatch) -> None:
    first = get_settings()
    monkeypatch.setenv("APP_ENV", "production")

    assert get_settings() is first

    reset_settings()
    assert get_settings().environment == "production"
