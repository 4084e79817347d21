"""Generic per-model repository over a SQLAlchemy session.

A repository only stages changes on its session. Nothing is written to the
database until the owning ``UnitOfWork`` commits.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Generic, TypeVar

from sqlalchemy import ColumnElement, func, select
from sqlalchemy.orm import Session

from portfolio_hub.data.db import Base
from portfolio_hub.errors import EntityNotFoundError

ModelT = TypeVar("ModelT", bound=Base)


class GenericRepository(Generic[ModelT]):
    """CRUD access to one mapped class.

    Args:
        session: Session shared with the unit of work.
        model: Mapped class this repository serves.
    """

    def __init__(self, session: Session, model: type[ModelT]) -> None:
        self._session = session
        self._model = model

    @property
    def model(self) -> type[ModelT]:
        return self._model

    def get_by_id(self, entity_id: Any) -> ModelT:
        """Return the entity with the given primary key.

        ``entity_id`` is a tuple for composite keys.

        Raises:
            EntityNotFoundError: If no row has that key.
        """
        entity = self._session.get(self._model, entity_id)
        if entity is None:
            raise EntityNotFoundError(self._model.__name__, entity_id)
        return entity

    def find_by_id(self, entity_id: Any) -> ModelT | None:
        """Return the entity with the given primary key, or None."""
        return self._session.get(self._model, entity_id)

    def get_all(self) -> list[ModelT]:
        return list(self._session.scalars(select(self._model)).all())

    def find(
        self,
        *criteria: ColumnElement[bool],
        order_by: Iterable[Any] | None = None,
    ) -> list[ModelT]:
        """Return entities matching every criterion, optionally ordered."""
        stmt = select(self._model).where(*criteria)
        if order_by is not None:
            stmt = stmt.order_by(*order_by)
        return list(self._session.scalars(stmt).all())

    def first(self, *criteria: ColumnElement[bool]) -> ModelT | None:
        stmt = select(self._model).where(*criteria).limit(1)
        return self._session.scalars(stmt).first()

    def count(self, *criteria: ColumnElement[bool]) -> int:
        stmt = select(func.count()).select_from(self._model).where(*criteria)
        return int(self._session.scalar(stmt) or 0)

    def exists(self, *criteria: ColumnElement[bool]) -> bool:
        return self.first(*criteria) is not None

    def add(self, entity: ModelT) -> ModelT:
        """Stage an insert."""
        self._session.add(entity)
        return entity

    def update(self, entity: ModelT) -> ModelT:
        """Stage an update.

        Entities already attached to the session are tracked automatically;
        detached ones are merged and the attached copy is returned.
        """
        if entity in self._session:
            return entity
        return self._session.merge(entity)

    def delete(self, entity_id: Any) -> None:
        """Load the entity by key and stage its removal.

        Raises:
            EntityNotFoundError: If no row has that key.
        """
        self.remove(self.get_by_id(entity_id))

    def remove(self, entity: ModelT) -> None:
        """Stage removal of an already loaded entity."""
        self._session.delete(entity)
