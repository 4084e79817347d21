"""Audit trail writer.

Appends authentication events, failed sign-ins, user activity and security
events. Methods stage rows on the unit of work; callers commit.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any

from portfolio_hub.data.models import (
    AuthenticationAuditLog,
    AuthenticationResult,
    FailedLoginAttempt,
    SecurityAuditLog,
    SecuritySeverity,
    User,
    UserActivityAuditLog,
)
from portfolio_hub.data.types import utcnow
from portfolio_hub.services.base import ServiceBase

__all__ = ["AuditService", "RequestInfo"]


class RequestInfo:
    """Caller address and user agent attached to audit rows."""

    __slots__ = ("ip_address", "user_agent")

    def __init__(self, ip_address: str | None = None, user_agent: str | None = None) -> None:
        self.ip_address = ip_address
        self.user_agent = (user_agent or "")[:500] or None


class AuditService(ServiceBase):
    def log_authentication(
        self,
        event_type: str,
        result: AuthenticationResult,
        request: RequestInfo,
        *,
        user: User | None = None,
        username: str | None = None,
        failure_reason: str | None = None,
        session_id: str | None = None,
        method: str = "LOCAL",
        data: dict[str, Any] | None = None,
    ) -> AuthenticationAuditLog:
        entry = AuthenticationAuditLog(
            user_id=user.id if user else None,
            username=user.username if user else username,
            email=user.email if user else None,
            event_type=event_type,
            result=result.value,
            failure_reason=failure_reason,
            ip_address=request.ip_address,
            user_agent=request.user_agent,
            authentication_method=method,
            session_id=session_id,
            timestamp=utcnow(),
            additional_data=data,
        )
        self._uow.repository(AuthenticationAuditLog).add(entry)
        if result is AuthenticationResult.SUCCESS:
            self._logger.info("%s succeeded for %s", event_type, entry.username)
        else:
            self._logger.warning(
                "%s failed for %s: %s", event_type, entry.username, failure_reason or result.value
            )
        return entry

    def record_failed_login(
        self,
        request: RequestInfo,
        reason: str,
        *,
        user: User | None = None,
        username: str | None = None,
    ) -> FailedLoginAttempt:
        attempt = FailedLoginAttempt(
            user_id=user.id if user else None,
            username=user.username if user else username,
            email=user.email if user else None,
            ip_address=request.ip_address or "unknown",
            user_agent=request.user_agent,
            failure_reason=reason,
            attempt_time=utcnow(),
        )
        self._uow.repository(FailedLoginAttempt).add(attempt)
        return attempt

    def recent_failed_logins_from_ip(self, ip_address: str, window: timedelta) -> int:
        cutoff = utcnow() - window
        return self._uow.repository(FailedLoginAttempt).count(
            FailedLoginAttempt.ip_address == ip_address,
            FailedLoginAttempt.attempt_time >= cutoff,
        )

    def log_activity(
        self,
        user: User,
        action: str,
        resource: str,
        resource_id: object,
        request: RequestInfo,
        *,
        details: dict[str, Any] | None = None,
        old_values: dict[str, Any] | None = None,
        new_values: dict[str, Any] | None = None,
    ) -> UserActivityAuditLog:
        entry = UserActivityAuditLog(
            user_id=user.id,
            username=user.username,
            action=action,
            resource=resource,
            resource_id=str(resource_id) if resource_id is not None else None,
            ip_address=request.ip_address,
            user_agent=request.user_agent,
            timestamp=utcnow(),
            details=details,
            old_values=old_values,
            new_values=new_values,
        )
        self._uow.repository(UserActivityAuditLog).add(entry)
        return entry

    def log_security_event(
        self,
        event_type: str,
        severity: SecuritySeverity,
        request: RequestInfo,
        *,
        user_id: str | None = None,
        request_path: str | None = None,
        description: str | None = None,
        data: dict[str, Any] | None = None,
    ) -> SecurityAuditLog:
        entry = SecurityAuditLog(
            user_id=user_id,
            event_type=event_type,
            severity=severity.value,
            ip_address=request.ip_address or "unknown",
            user_agent=request.user_agent,
            request_path=request_path,
            description=description,
            additional_data=data,
            timestamp=utcnow(),
        )
        self._uow.repository(SecurityAuditLog).add(entry)
        self._logger.warning("Security event %s (%s): %s", event_type, severity.value, description)
        return entry

    def authentication_history(self, user_id: str, limit: int = 50) -> list[AuthenticationAuditLog]:
        rows = self._uow.repository(AuthenticationAuditLog).find(
            AuthenticationAuditLog.user_id == user_id,
            order_by=[AuthenticationAuditLog.timestamp.desc()],
        )
        return rows[:limit]
