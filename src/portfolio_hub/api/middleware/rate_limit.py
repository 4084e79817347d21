"""Per-client rate limiting on slowapi.

Every routed request counts against the global application limit, which
``SlowAPIMiddleware`` enforces. Route groups add a named policy through the
``*_rate_limit`` dependencies below; all routes under one policy share a
counter per client. Counters live in fixed one-minute windows in the limits
memory storage, which drops them once their window has passed.

Usage:
    install_rate_limiting(app, enabled=settings.rate_limit_enabled)

    @router.post("/login", dependencies=[Depends(auth_rate_limit)])
    def login(...): ...
"""

import logging
import math
import time
from collections.abc import Mapping
from dataclasses import dataclass, field

from fastapi import FastAPI, Request
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from starlette.responses import PlainTextResponse, Response

from portfolio_hub.constants.security import (
    ANONYMOUS_PARTITION,
    API_POLICY,
    AUTH_POLICY,
    EXTERNAL_AUTH_POLICY,
    GLOBAL_LIMIT_PER_MINUTE,
    POLICY_LIMITS_PER_MINUTE,
    RATE_LIMIT_MESSAGE,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimits:
    """Requests each client may make per minute, globally and per policy."""

    global_per_minute: int = GLOBAL_LIMIT_PER_MINUTE
    policies: Mapping[str, int] = field(default_factory=lambda: dict(POLICY_LIMITS_PER_MINUTE))

    def global_limit(self) -> str:
        return f"{self.global_per_minute}/minute"

    def policy_limit(self, policy: str) -> str:
        return f"{self.policies[policy]}/minute"


_active = RateLimits()


def client_key(request: Request) -> str:
    """Partition by client IP; requests with no peer address share one bucket."""
    if request.client is None or not request.client.host:
        return ANONYMOUS_PARTITION
    return get_remote_address(request)


limiter = Limiter(
    key_func=client_key,
    application_limits=[lambda: _active.global_limit()],
    strategy="fixed-window",
    storage_uri="memory://",
)


@limiter.shared_limit(lambda: _active.policy_limit(API_POLICY), scope=API_POLICY)
def api_rate_limit(request: Request) -> None:
    """Portfolio, project and skill routes."""


@limiter.shared_limit(lambda: _active.policy_limit(AUTH_POLICY), scope=AUTH_POLICY)
def auth_rate_limit(request: Request) -> None:
    """Login and registration."""


@limiter.shared_limit(
    lambda: _active.policy_limit(EXTERNAL_AUTH_POLICY), scope=EXTERNAL_AUTH_POLICY
)
def external_auth_rate_limit(request: Request) -> None:
    """Token refresh."""


def retry_after_seconds(request: Request) -> int:
    """Seconds until the window that rejected ``request`` resets."""
    item, args = request.state.view_rate_limit
    reset_at, _ = request.app.state.limiter.limiter.get_window_stats(item, *args)
    return max(1, math.ceil(reset_at - time.time()))


# SlowAPIMiddleware falls back to its JSON handler for coroutine handlers
def rate_limit_exceeded(request: Request, exc: RateLimitExceeded) -> Response:
    _, args = request.state.view_rate_limit
    key, scope = args[-2], args[-1]
    logger.warning("Rate limit (%s) exceeded by %s on %s", scope, key, request.url.path)
    return PlainTextResponse(
        RATE_LIMIT_MESSAGE,
        status_code=429,
        headers={"Retry-After": str(retry_after_seconds(request))},
    )


def install_rate_limiting(
    app: FastAPI, limits: RateLimits | None = None, enabled: bool = True
) -> None:
    """Attach the shared limiter to ``app`` and start from empty counters.

    The limiter is process-wide, so the limits and the enabled flag follow
    the most recently built app.
    """
    global _active
    _active = limits or RateLimits()
    limiter.enabled = enabled
    limiter.reset()

    app.state.limiter = limiter
    app.state.rate_limits = _active
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded)
    app.add_middleware(SlowAPIMiddleware)
