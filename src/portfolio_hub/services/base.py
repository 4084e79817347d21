"""Shared plumbing for domain services: commit with logging, text validation."""

from __future__ import annotations

import logging

from portfolio_hub.data.unit_of_work import UnitOfWork
from portfolio_hub.errors import ValidationError


class ServiceBase:
    """Holds the unit of work and the logger a service writes to.

    With ``autocommit=False`` the caller owns the transaction: writes are
    only flushed, so generated keys are available, and the caller commits
    them together with whatever else it stages on the same unit of work.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        logger: logging.Logger | None = None,
        autocommit: bool = True,
    ) -> None:
        self._uow = uow
        self._logger = logger or logging.getLogger(type(self).__module__)
        self._autocommit = autocommit

    def _commit(self, action: str) -> None:
        try:
            if self._autocommit:
                self._uow.commit()
            else:
                self._uow.flush()
        except Exception:
            self._logger.error("Failed to %s", action)
            raise


def require_text(value: str | None, message: str) -> str:
    """Return ``value`` stripped, raising ValidationError when it is missing or blank."""
    if value is None or not value.strip():
        raise ValidationError(message)
    return value.strip()


def check_length(value: str | None, max_length: int, message: str) -> None:
    if value is not None and len(value) > max_length:
        raise ValidationError(message)
