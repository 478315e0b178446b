"""
Generic SQLAlchemy store implementing the ``EntityStore`` contract.

Each call opens its own session from the factory and commits before
returning, so results are detached and safe to keep in a cache.
"""

from __future__ import annotations

import logging
from typing import Generic, Sequence, Type, TypeVar

from sqlalchemy import delete as sa_delete
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ordertracker.core.db import SessionFactory
from ordertracker.core.result import (
    DatabaseError,
    Failure,
    NotFoundError,
    Result,
    failure,
    success,
)
from ordertracker.domain.base import Base

logger = logging.getLogger(__name__)

T_Model = TypeVar("T_Model", bound=Base)


class SqlAlchemyStore(Generic[T_Model]):
    """
    CRUD store for one SQLAlchemy model.

    Example:
        class MealRepository(SqlAlchemyStore[Meal]):
            def __init__(self, session_factory: SessionFactory):
                super().__init__(Meal, session_factory)
    """

    def __init__(self, model: Type[T_Model], session_factory: SessionFactory):
        self.model = model
        self.session_factory = session_factory

    @property
    def model_name(self) -> str:
        return self.model.__name__

    def _database_failure(self, operation: str, exc: SQLAlchemyError) -> Failure[DatabaseError]:
        if isinstance(exc, IntegrityError):
            logger.warning("Integrity error in %s.%s: %s", self.model_name, operation, exc.orig)
        else:
            logger.error("Database error in %s.%s", self.model_name, operation, exc_info=True)
        return failure(
            DatabaseError(
                operation=f"{self.model_name}.{operation}",
                message=str(exc),
                original_exception=exc,
            )
        )

    async def find_by_id(self, id: int) -> Result[T_Model, NotFoundError | DatabaseError]:
        try:
            async with self.session_factory() as session:
                entity = await session.get(self.model, id)
        except SQLAlchemyError as exc:
            return self._database_failure("find_by_id", exc)

        if entity is None:
            return failure(NotFoundError(entity_type=self.model_name, entity_id=id))
        return success(entity)

    async def find_all(self) -> Result[Sequence[T_Model], DatabaseError]:
        try:
            async with self.session_factory() as session:
                result = await session.scalars(select(self.model).order_by(self.model.id))
                return success(result.all())
        except SQLAlchemyError as exc:
            return self._database_failure("find_all", exc)

    async def save(self, entity: T_Model) -> Result[T_Model, DatabaseError]:
        """Insert ``entity`` (no id) or overwrite the row with its id."""
        try:
            async with self.session_factory() as session:
                merged = await session.merge(entity)
                await session.commit()
                return success(merged)
        except SQLAlchemyError as exc:
            return self._database_failure("save", exc)

    async def delete(self, id: int) -> Result[bool, DatabaseError]:
        """
        Delete by primary key.

        Returns:
            Success(True) if a row was deleted, Success(False) if none matched
        """
        try:
            async with self.session_factory() as session:
                result = await session.execute(sa_delete(self.model).where(self.model.id == id))
                await session.commit()
                return success(result.rowcount > 0)
        except SQLAlchemyError as exc:
            return self._database_failure("delete", exc)


__all__ = ["SqlAlchemyStore"]
