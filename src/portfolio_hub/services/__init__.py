"""Services"""

from portfolio_hub.services.account import AccountService
from portfolio_hub.services.audit import AuditService, RequestInfo
from portfolio_hub.services.authorization import AuthorizationPolicy
from portfolio_hub.services.portfolio import PortfolioService
from portfolio_hub.services.project import ProjectService
from portfolio_hub.services.project_skill import ProjectSkillService
from portfolio_hub.services.skill import SkillService

__all__ = [
    "AccountService",
    "AuditService",
    "AuthorizationPolicy",
    "PortfolioService",
    "ProjectService",
    "ProjectSkillService",
    "RequestInfo",
    "SkillService",
]
