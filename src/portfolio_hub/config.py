"""Application settings read from the environment.

Every setting has a development-friendly default so the API starts with no
configuration at all. ``get_settings()`` caches the result; tests that change
environment variables call ``reset_settings()`` afterwards.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache

from dotenv import load_dotenv

DEFAULT_CORS_ORIGINS = ("http://localhost:3000", "https://localhost:3000")
DEFAULT_PRODUCTION_ORIGINS = ("https://yourdomain.com",)
_DEV_JWT_SECRET = "dev-only-secret-key-change-me-0123456789abcdef"


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return int(value)


def _env_list(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    value = os.getenv(name)
    if not value:
        return default
    return tuple(item.strip() for item in value.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    """Runtime configuration.

    Attributes:
        environment: ``development`` or ``production``; drives CORS and HTTPS policy.
        cors_allowed_origins: Origins allowed in development.
        cors_production_origins: Origins allowed in production.
        jwt_secret: HMAC key for access tokens (at least 32 characters).
        access_token_minutes: Lifetime of access tokens.
        refresh_token_days: Lifetime of refresh tokens.
        log_dir: Directory for rotating log files; console only when unset.
    """

    environment: str = "development"
    cors_allowed_origins: tuple[str, ...] = DEFAULT_CORS_ORIGINS
    cors_production_origins: tuple[str, ...] = DEFAULT_PRODUCTION_ORIGINS
    jwt_secret: str = _DEV_JWT_SECRET
    jwt_issuer: str = "portfolio-hub"
    jwt_audience: str = "portfolio-hub-client"
    access_token_minutes: int = 60
    refresh_token_days: int = 7
    enable_https_redirect: bool = False
    rate_limit_enabled: bool = True
    oauth_client_id: str = "portfolio-client"
    oauth_client_secret: str = ""
    oauth_redirect_uri: str = "http://localhost:3000/auth/callback"
    oauth_scope: tuple[str, ...] = field(
        default=("openid", "profile", "email", "portfolio", "projects", "skills")
    )
    log_level: str = "INFO"
    log_dir: str | None = None
    seed_data: bool = True

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"


def load_settings() -> Settings:
    """Build settings from environment variables, reading a local `.env` first."""
    load_dotenv()
    secret = os.getenv("JWT_SECRET") or _DEV_JWT_SECRET
    if len(secret) < 32:
        raise ValueError("JWT_SECRET must be at least 32 characters")

    return Settings(
        environment=os.getenv("APP_ENV", "development"),
        cors_allowed_origins=_env_list("CORS_ALLOWED_ORIGINS", DEFAULT_CORS_ORIGINS),
        cors_production_origins=_env_list("CORS_PRODUCTION_ORIGINS", DEFAULT_PRODUCTION_ORIGINS),
        jwt_secret=secret,
        jwt_issuer=os.getenv("JWT_ISSUER", "portfolio-hub"),
        jwt_audience=os.getenv("JWT_AUDIENCE", "portfolio-hub-client"),
        access_token_minutes=_env_int("ACCESS_TOKEN_MINUTES", 60),
        refresh_token_days=_env_int("REFRESH_TOKEN_DAYS", 7),
        enable_https_redirect=_env_bool("ENABLE_HTTPS_REDIRECT", False),
        rate_limit_enabled=_env_bool("RATE_LIMIT_ENABLED", True),
        oauth_client_id=os.getenv("OAUTH_CLIENT_ID", "portfolio-client"),
        oauth_client_secret=os.getenv("OAUTH_CLIENT_SECRET", ""),
        oauth_redirect_uri=os.getenv(
            "OAUTH_REDIRECT_URI", "http://localhost:3000/auth/callback"
        ),
        oauth_scope=_env_list(
            "OAUTH_SCOPE", ("openid", "profile", "email", "portfolio", "projects", "skills")
        ),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        log_dir=os.getenv("LOG_DIR") or None,
        seed_data=_env_bool("SEED_DATA", True),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return load_settings()


def reset_settings() -> None:
    """Forget cached settings so the next call re-reads the environment."""
    get_settings.cache_clear()
