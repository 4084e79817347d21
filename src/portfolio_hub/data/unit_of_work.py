"""Unit of work: one session, one repository per model, one commit.

Every repository handed out by a unit of work shares its session, so the
changes staged through any of them are written together by ``commit()`` in a
single transaction.
"""

from __future__ import annotations

import logging
from types import TracebackType
from typing import Any, TypeVar

from sqlalchemy import inspect
from sqlalchemy.orm import ColumnProperty, Session, sessionmaker
from sqlalchemy.orm.attributes import set_committed_value

from portfolio_hub.data.db import Base, get_session_factory
from portfolio_hub.data.repository import GenericRepository

ModelT = TypeVar("ModelT", bound=Base)


class UnitOfWork:
    """Transactional boundary shared by a set of repositories.

    Args:
        session_factory: Factory for the underlying session; the application
            factory from ``data.db`` when omitted.
        logger: Logger for commit failures; this module's logger when omitted.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session] | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        factory = session_factory or get_session_factory()
        self._session: Session = factory()
        self._repositories: dict[type[Any], GenericRepository[Any]] = {}
        self._logger = logger or logging.getLogger(__name__)

    @property
    def session(self) -> Session:
        return self._session

    def repository(self, model: type[ModelT]) -> GenericRepository[ModelT]:
        """Return the repository for ``model``, the same instance on every call."""
        repo = self._repositories.get(model)
        if repo is None:
            repo = GenericRepository(self._session, model)
            self._repositories[model] = repo
        return repo

    def commit(self) -> None:
        """Write all staged changes in one transaction.

        On failure the transaction is rolled back and the error re-raised;
        nothing staged is persisted.
        """
        try:
            self._session.commit()
        except Exception:
            self._logger.exception("Commit failed; transaction rolled back")
            self._session.rollback()
            raise

    def flush(self) -> None:
        """Send staged changes to the database inside the open transaction.

        Used when a generated key is needed before ``commit()``.
        """
        self._session.flush()

    def rollback(self) -> None:
        """Discard staged changes in memory without touching the database.

        Pending inserts are detached, pending deletes are un-staged and
        modified column values revert to what was loaded. Attributes whose
        loaded value is unknown are expired and reload on next access.
        """
        session = self._session

        # expunge cascades, so an entity may already be gone by its turn
        for entity in list(session.new):
            if entity in session:
                session.expunge(entity)

        for entity in list(session.deleted):
            if entity in session:
                session.expunge(entity)
            session.add(entity)

        for entity in list(session.dirty):
            state = inspect(entity)
            for attr in state.attrs:
                history = attr.history
                if not history.has_changes():
                    continue
                prop = state.mapper.get_property(attr.key)
                if isinstance(prop, ColumnProperty) and history.deleted:
                    set_committed_value(entity, attr.key, history.deleted[0])
                else:
                    session.expire(entity, [attr.key])

    def close(self) -> None:
        self._session.close()
        self._repositories.clear()

    def __enter__(self) -> UnitOfWork:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if exc_type is not None and self._session.in_transaction():
            self._session.rollback()
        self.close()
