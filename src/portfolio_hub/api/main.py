"""FastAPI application entry point for the Portfolio Hub API."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.httpsredirect import HTTPSRedirectMiddleware

from portfolio_hub import __version__
from portfolio_hub.api.errors import register_exception_handlers
from portfolio_hub.api.middleware import (
    RateLimits,
    SecurityHeadersMiddleware,
    install_rate_limiting,
)
from portfolio_hub.api.routes import account, portfolios, project_skills, projects, root, skills
from portfolio_hub.config import Settings, get_settings
from portfolio_hub.constants.security import PRODUCTION_CORS_HEADERS, PRODUCTION_CORS_METHODS

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Configure logging, create tables and seed reference data on startup."""
    from portfolio_hub.data.db import init_db
    from portfolio_hub.data.seed import seed_database
    from portfolio_hub.data.unit_of_work import UnitOfWork
    from portfolio_hub.logging_config import configure_logging

    settings: Settings = app.state.settings
    configure_logging(settings)
    init_db()
    if settings.seed_data:
        with UnitOfWork() as uow:
            seed_database(uow, settings)
    logger.info("Portfolio Hub API started (%s)", settings.environment)
    yield


def _add_cors(app: FastAPI, settings: Settings) -> None:
    if settings.is_development:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(settings.cors_allowed_origins),
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    else:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(settings.cors_production_origins),
            allow_credentials=True,
            allow_methods=list(PRODUCTION_CORS_METHODS),
            allow_headers=list(PRODUCTION_CORS_HEADERS),
        )


def create_app(settings: Settings | None = None, rate_limits: RateLimits | None = None) -> FastAPI:
    """Build the application.

    Middleware runs outermost first: HTTPS redirect (production, when
    enabled), rate limiting, CORS, then security headers.
    """
    settings = settings or get_settings()
    app = FastAPI(
        title="Portfolio Hub API",
        description="API for managing portfolios, projects and skills",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings

    # add_middleware wraps, so the last one added runs first
    app.add_middleware(SecurityHeadersMiddleware)
    _add_cors(app, settings)
    install_rate_limiting(app, rate_limits, enabled=settings.rate_limit_enabled)
    if settings.enable_https_redirect and not settings.is_development:
        app.add_middleware(HTTPSRedirectMiddleware)

    register_exception_handlers(app)

    app.include_router(root.router)
    app.include_router(portfolios.router, prefix="/api")
    app.include_router(projects.router, prefix="/api")
    app.include_router(project_skills.router, prefix="/api")
    app.include_router(skills.router, prefix="/api")
    app.include_router(account.router, prefix="/api")
    return app


app = create_app()


def main() -> None:
    """Start the development server."""
    import uvicorn

    uvicorn.run(
        "portfolio_hub.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=get_settings().is_development,
        server_header=False,
    )


if __name__ == "__main__":
    main()
