"""Exception types shared by the data, service and API layers."""

from __future__ import annotations


class PortfolioHubError(Exception):
    """Base class for application errors."""


class ValidationError(PortfolioHubError, ValueError):
    """Input failed a business rule. Maps to HTTP 400."""


class EntityNotFoundError(PortfolioHubError, LookupError):
    """A lookup by key found nothing. Maps to HTTP 404."""

    def __init__(self, entity: str, key: object, message: str | None = None) -> None:
        self.entity = entity
        self.key = key
        super().__init__(message or f"{entity} with ID {key} not found")


class AuthenticationError(PortfolioHubError):
    """Credentials or tokens were rejected. Maps to HTTP 401."""


class AccountLockedError(AuthenticationError):
    """Too many failed sign-ins; the account is temporarily locked."""


class PermissionDeniedError(PortfolioHubError):
    """The caller may not act on the resource. Maps to HTTP 403."""
