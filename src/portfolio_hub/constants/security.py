"""
Rate-limit policies, HTTP security headers and suspicious-request patterns.
"""

from __future__ import annotations

# === RATE LIMITING ===
GLOBAL_LIMIT_PER_MINUTE = 100
API_POLICY = "api"
AUTH_POLICY = "auth"
EXTERNAL_AUTH_POLICY = "external_auth"

POLICY_LIMITS_PER_MINUTE = {
    API_POLICY: 60,
    AUTH_POLICY: 10,
    EXTERNAL_AUTH_POLICY: 20,
}

RATE_LIMIT_MESSAGE = "Rate limit exceeded. Please try again later."
ANONYMOUS_PARTITION = "anonymous"

# === SECURITY HEADERS ===
CONTENT_SECURITY_POLICY = (
    "default-src 'self'; "
    "script-src 'self'; "
    "style-src 'self' 'unsafe-inline'; "
    "img-src 'self' data: https:; "
    "font-src 'self'; "
    "connect-src 'self'; "
    "frame-ancestors 'none'; "
    "object-src 'none'; "
    "base-uri 'self';"
)

SECURITY_HEADERS = {
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "X-Content-Type-Options": "nosniff",
    "Content-Security-Policy": CONTENT_SECURITY_POLICY,
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": (
        "geolocation=(), microphone=(), camera=(), usb=(), bluetooth=(), payment=()"
    ),
    "Cross-Origin-Embedder-Policy": "require-corp",
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
}

HSTS_VALUE = "max-age=31536000; includeSubDomains; preload"

INFORMATION_DISCLOSURE_HEADERS = (
    "Server",
    "X-Powered-By",
)

# === SUSPICIOUS REQUESTS ===
SUSPICIOUS_PATTERNS = (
    "script",
    "javascript:",
    "vbscript:",
    "onload",
    "onerror",
    "../",
    "..\\",
    "union",
    "select",
    "drop",
    "insert",
    "update",
    "delete",
    "<script",
    "</script",
    "eval(",
    "settimeout(",
    "setinterval(",
)

MIN_USER_AGENT_LENGTH = 10

# === CORS (production) ===
PRODUCTION_CORS_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE")
PRODUCTION_CORS_HEADERS = ("Content-Type", "Authorization")
