"""Authorization policy.

Every ownership and permission decision goes through ``AuthorizationPolicy``
so routes and services answer "may this user do that?" the same way.
Admins pass every check. Everyone else needs to own the resource or hold an
active, unrevoked, unexpired ``UserPermission`` grant.
"""

from __future__ import annotations

from sqlalchemy import or_

from portfolio_hub.constants.auth import Permissions, Roles
from portfolio_hub.data.models import Portfolio, Project, User, UserPermission
from portfolio_hub.data.types import utcnow
from portfolio_hub.errors import PermissionDeniedError
from portfolio_hub.services.base import ServiceBase

__all__ = ["AuthorizationPolicy"]


class AuthorizationPolicy(ServiceBase):
    @staticmethod
    def is_admin(user: User | None) -> bool:
        return user is not None and Roles.ADMIN in user.role_list

    def owns_portfolio(self, user_id: str, portfolio_id: int) -> bool:
        """True iff the portfolio exists and belongs to ``user_id``."""
        portfolio = self._uow.repository(Portfolio).find_by_id(portfolio_id)
        return portfolio is not None and portfolio.user_id == user_id

    def owns_project(self, user_id: str, project_id: int) -> bool:
        """True iff the project exists and its portfolio belongs to ``user_id``."""
        project = self._uow.repository(Project).find_by_id(project_id)
        return project is not None and project.portfolio.user_id == user_id

    def permissions_for(self, user_id: str) -> list[str]:
        now = utcnow()
        grants = self._uow.repository(UserPermission).find(
            UserPermission.user_id == user_id,
            UserPermission.is_active.is_(True),
            UserPermission.is_revoked.is_(False),
            or_(UserPermission.expires_at.is_(None), UserPermission.expires_at > now),
        )
        return sorted({grant.permission for grant in grants})

    def has_permission(self, user: User, permission: str) -> bool:
        if self.is_admin(user):
            return True
        return permission in self.permissions_for(user.id)

    def can_view_portfolio(self, user: User | None, portfolio: Portfolio) -> bool:
        if portfolio.is_public:
            return True
        return user is not None and (portfolio.user_id == user.id or self.is_admin(user))

    def can_modify_portfolio(self, user: User, portfolio_id: int) -> bool:
        return self.is_admin(user) or self.owns_portfolio(user.id, portfolio_id)

    def can_modify_project(self, user: User, project_id: int) -> bool:
        return self.is_admin(user) or self.owns_project(user.id, project_id)

    def can_manage_skills(self, user: User) -> bool:
        return self.has_permission(user, Permissions.SKILL_WRITE)

    def can_delete_skills(self, user: User) -> bool:
        return self.has_permission(user, Permissions.SKILL_DELETE)

    def ensure(self, allowed: bool, user: User, message: str) -> None:
        """Raise PermissionDeniedError with ``message`` unless ``allowed``."""
        if not allowed:
            self._logger.warning("Access denied for user %s: %s", user.id, message)
            raise PermissionDeniedError(message)

    def grant_permission(
        self,
        user_id: str,
        permission: str,
        granted_by: str,
        *,
        source: str = "manual",
        reason: str | None = None,
    ) -> UserPermission:
        """Stage a new grant. The caller commits."""
        grant = UserPermission(
            user_id=user_id,
            permission=permission,
            granted_by=granted_by,
            source=source,
            reason=reason,
        )
        self._uow.repository(UserPermission).add(grant)
        return grant

    def revoke_permission(self, user_id: str, permission: str, revoked_by: str) -> int:
        """Stage revocation of every active grant of ``permission``. Returns the count."""
        grants = self._uow.repository(UserPermission).find(
            UserPermission.user_id == user_id,
            UserPermission.permission == permission,
            UserPermission.is_revoked.is_(False),
        )
        now = utcnow()
        for grant in grants:
            grant.is_revoked = True
            grant.is_active = False
            grant.revoked_at = now
            grant.revoked_by = revoked_by
        return len(grants)
