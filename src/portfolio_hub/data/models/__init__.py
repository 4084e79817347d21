"""ORM models package for database tables.

This package provides SQLAlchemy ORM models representing database tables:
- User / UserSession: accounts and signed-in devices
- Portfolio / Project: the portfolio hierarchy
- Skill / ProjectSkill: the skill catalogue and its per-project ratings
- OAuthClient, UserConsent, UserPermission, ScopeDefinition: authorization records
- Audit logs: authentication, failed logins, user activity, security events

All models inherit from the shared Base declarative class defined in data.db.
"""

from portfolio_hub.data.db import Base
from portfolio_hub.data.models.audit import (
    AuthenticationAuditLog,
    AuthenticationResult,
    FailedLoginAttempt,
    SecurityAuditLog,
    SecuritySeverity,
    UserActivityAuditLog,
)
from portfolio_hub.data.models.authorization import (
    OAuthClient,
    ScopeDefinition,
    UserConsent,
    UserPermission,
)
from portfolio_hub.data.models.portfolio import Portfolio
from portfolio_hub.data.models.project import Project
from portfolio_hub.data.models.session import UserSession
from portfolio_hub.data.models.skill import ProjectSkill, Skill
from portfolio_hub.data.models.user import User

__all__ = [
    "AuthenticationAuditLog",
    "AuthenticationResult",
    "Base",
    "FailedLoginAttempt",
    "OAuthClient",
    "Portfolio",
    "Project",
    "ProjectSkill",
    "ScopeDefinition",
    "SecurityAuditLog",
    "SecuritySeverity",
    "Skill",
    "User",
    "UserActivityAuditLog",
    "UserConsent",
    "UserPermission",
    "UserSession",
]
