"""Liveness and database health routes."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy import text

from portfolio_hub.api.errors import problem_response
from portfolio_hub.data.db import get_engine
from portfolio_hub.data.types import utcnow

logger = logging.getLogger(__name__)

router = APIRouter(tags=["general"])

_DIALECT_NAMES = {"postgresql": "PostgreSQL", "sqlite": "SQLite"}


@router.get("/", response_class=PlainTextResponse, summary="Liveness check")
def root() -> str:
    return "API is running!"


@router.get(
    "/health/db",
    summary="Database health check",
    description="Open a connection, run a trivial query and report where it went.",
    responses={500: {"description": "Database unreachable (problem details)"}},
)
def database_health() -> Any:
    try:
        engine = get_engine()
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
    except Exception as exc:
        logger.exception("Database health check failed")
        return problem_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Database Connection Error", str(exc)
        )

    url = engine.url
    return JSONResponse(
        {
            "Console": "Database Health Check",
            "Status": "Connected",
            "Database": _DIALECT_NAMES.get(engine.dialect.name, engine.dialect.name),
            "Timestamp": utcnow().isoformat(),
            "Message": "Successfully connected to the database",
            "ConnectionInfo": {
                "Host": url.host or "N/A",
                "Database": url.database or "N/A",
            },
        }
    )
