"""HTTP middleware: rate limiting and security headers."""

from portfolio_hub.api.middleware.rate_limit import (
    RateLimits,
    api_rate_limit,
    auth_rate_limit,
    external_auth_rate_limit,
    install_rate_limiting,
    limiter,
)
from portfolio_hub.api.middleware.security_headers import (
    SecurityHeadersMiddleware,
    log_suspicious_request,
)

__all__ = [
    "RateLimits",
    "SecurityHeadersMiddleware",
    "api_rate_limit",
    "auth_rate_limit",
    "external_auth_rate_limit",
    "install_rate_limiting",
    "limiter",
    "log_suspicious_request",
]
