from __future__ import annotations

from typing import Iterable, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from ordertracker.core.db import SessionFactory
from ordertracker.core.result import DatabaseError, Result, success
from ordertracker.domain.models import Meal
from ordertracker.repositories.base import SqlAlchemyStore


class MealRepository(SqlAlchemyStore[Meal]):
    def __init__(self, session_factory: SessionFactory):
        super().__init__(Meal, session_factory)

    async def find_by_name(self, name: str) -> Result[Optional[Meal], DatabaseError]:
        try:
            async with self.session_factory() as session:
                return success(await session.scalar(select(Meal).where(Meal.name == name)))
        except SQLAlchemyError as exc:
            return self._database_failure("find_by_name", exc)

    async def save_all(self, meals: Iterable[Meal]) -> Result[Sequence[Meal], DatabaseError]:
        """Insert all meals in one transaction; nothing is stored if any insert fails."""
        try:
            async with self.session_factory() as session:
                pending = list(meals)
                session.add_all(pending)
                await session.commit()
                return success(pending)
        except SQLAlchemyError as exc:
            return self._database_failure("save_all", exc)


__all__ = ["MealRepository"]
