"""Security response headers and suspicious-request logging."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from portfolio_hub.constants.security import (
    HSTS_VALUE,
    INFORMATION_DISCLOSURE_HEADERS,
    MIN_USER_AGENT_LENGTH,
    SECURITY_HEADERS,
    SUSPICIOUS_PATTERNS,
)

logger = logging.getLogger(__name__)


def find_suspicious_pattern(path: str, query: str) -> str | None:
    """Return the first blocklisted substring in the lowercased path or query."""
    haystack = (path + "?" + query).lower() if query else path.lower()
    for pattern in SUSPICIOUS_PATTERNS:
        if pattern in haystack:
            return pattern
    return None


def log_suspicious_request(request: Request) -> bool:
    """Warn about blocklisted path/query content or a missing or short User-Agent.

    Detection only; the request is never blocked. Returns True if anything
    was logged.
    """
    client = request.client.host if request.client else "unknown"
    path = request.url.path
    query = request.url.query
    user_agent = request.headers.get("user-agent", "")
    flagged = False

    if find_suspicious_pattern(path, query) is not None:
        logger.warning(
            "Suspicious request detected from %s: Path=%s, Query=%s, UserAgent=%s",
            client,
            path,
            query,
            user_agent,
        )
        flagged = True

    if len(user_agent) < MIN_USER_AGENT_LENGTH:
        logger.warning("Request with suspicious User-Agent from %s: %r", client, user_agent)
        flagged = True

    return flagged


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Adds hardening headers to every response.

    Headers a handler already set are left alone. HSTS is only sent over
    HTTPS. Headers that reveal the server stack are stripped.
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        log_suspicious_request(request)
        response = await call_next(request)

        for name, value in SECURITY_HEADERS.items():
            if name not in response.headers:
                response.headers[name] = value
        if request.url.scheme == "https" and "Strict-Transport-Security" not in response.headers:
            response.headers["Strict-Transport-Security"] = HSTS_VALUE
        for name in INFORMATION_DISCLOSURE_HEADERS:
            if name in response.headers:
                del response.headers[name]

        return response
