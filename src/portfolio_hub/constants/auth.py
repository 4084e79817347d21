"""
Roles, permissions, OAuth scopes and account-security limits.
"""

from __future__ import annotations

from enum import StrEnum


class Roles:
    ADMIN = "Admin"
    USER = "User"
    MODERATOR = "Moderator"


class Permissions:
    PORTFOLIO_READ = "portfolio:read"
    PORTFOLIO_WRITE = "portfolio:write"
    PORTFOLIO_DELETE = "portfolio:delete"
    PORTFOLIO_SHARE = "portfolio:share"

    PROJECT_READ = "project:read"
    PROJECT_WRITE = "project:write"
    PROJECT_DELETE = "project:delete"
    PROJECT_PUBLISH = "project:publish"

    SKILL_READ = "skill:read"
    SKILL_WRITE = "skill:write"
    SKILL_DELETE = "skill:delete"

    USER_MANAGEMENT = "user:management"
    SYSTEM_ADMIN = "system:admin"
    AUDIT_LOGS = "audit:logs"

    PROFILE_READ = "profile:read"
    PROFILE_WRITE = "profile:write"
    ACCOUNT_MANAGEMENT = "account:management"


class OAuthScopes:
    OPENID = "openid"
    PROFILE = "profile"
    EMAIL = "email"
    ROLES = "roles"
    PORTFOLIO = "portfolio"
    PROJECTS = "projects"
    SKILLS = "skills"
    ADMIN = "admin"

    PORTFOLIO_READ = "portfolio:read"
    PORTFOLIO_WRITE = "portfolio:write"
    PROJECTS_READ = "projects:read"
    PROJECTS_WRITE = "projects:write"
    SKILLS_READ = "skills:read"
    SKILLS_WRITE = "skills:write"

    FULL_ACCESS = "full_access"
    READ_ONLY = "read_only"

    STANDARD = (OPENID, PROFILE, EMAIL)
    APPLICATION = (PORTFOLIO, PROJECTS, SKILLS)


# (name, display name, description, required, default, category)
DEFAULT_SCOPE_DEFINITIONS: tuple[tuple[str, str, str, bool, bool, str], ...] = (
    (OAuthScopes.OPENID, "OpenID", "OpenID Connect identifier", True, True, "identity"),
    (OAuthScopes.PROFILE, "Profile", "Access to user profile information", False, True, "identity"),
    (OAuthScopes.EMAIL, "Email", "Access to user email address", False, True, "identity"),
    (OAuthScopes.ROLES, "Roles & Permissions", "Access to user roles and permissions", False, False, "identity"),
    (OAuthScopes.PORTFOLIO_READ, "Portfolio Read", "Read access to portfolio data", False, False, "portfolio"),
    (OAuthScopes.PORTFOLIO_WRITE, "Portfolio Write", "Write access to portfolio data", False, False, "portfolio"),
    (OAuthScopes.PROJECTS_READ, "Projects Read", "Read access to project data", False, False, "projects"),
    (OAuthScopes.PROJECTS_WRITE, "Projects Write", "Write access to project data", False, False, "projects"),
    (OAuthScopes.SKILLS_READ, "Skills Read", "Read access to skill data", False, False, "skills"),
    (OAuthScopes.SKILLS_WRITE, "Skills Write", "Write access to skill data", False, False, "skills"),
    (OAuthScopes.ADMIN, "Administrator", "Full administrative access", False, False, "admin"),
)


class AuthType(StrEnum):
    JWT = "jwt"
    COOKIE = "cookie"
    HYBRID = "hybrid"


# === SESSION POLICY ===
MAX_SESSIONS_PER_USER = 5
SESSION_TIMEOUT_MINUTES = 60
SLIDING_EXPIRATION_MINUTES = 30

# === TOKEN POLICY ===
MAX_REFRESH_TOKENS_PER_USER = 3

# === LOCKOUT ===
MAX_FAILED_ACCESS_ATTEMPTS = 5
LOCKOUT_MINUTES = 15

# === PASSWORD POLICY ===
PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 128
PASSWORD_MIN_UNIQUE_CHARS = 4
