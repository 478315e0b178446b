from __future__ import annotations

from typing import Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from ordertracker.core.db import SessionFactory
from ordertracker.core.result import DatabaseError, Result, success
from ordertracker.domain.models import Meal, Order, OrderStatus, order_meals
from ordertracker.repositories.base import SqlAlchemyStore


class OrderRepository(SqlAlchemyStore[Order]):
    def __init__(self, session_factory: SessionFactory):
        super().__init__(Order, session_factory)

    async def save(self, entity: Order) -> Result[Order, DatabaseError]:
        """
        Insert or overwrite an order.

        Meals are matched by id inside the session, so the caller may pass
        detached (for example cached) meal instances.
        """
        meal_ids = [meal.id for meal in entity.meals or ()]
        try:
            async with self.session_factory() as session:
                order = await session.get(Order, entity.id) if entity.id is not None else None
                if order is None:
                    order = Order(id=entity.id)
                    session.add(order)
                order.customer_id = entity.customer_id
                order.status = entity.status or OrderStatus.ACCEPTED
                if meal_ids:
                    meals = await session.scalars(select(Meal).where(Meal.id.in_(meal_ids)))
                    order.meals = list(meals.all())
                else:
                    order.meals = []
                await session.commit()
                return success(order)
        except SQLAlchemyError as exc:
            return self._database_failure("save", exc)

    async def find_by_customer_id(self, customer_id: int) -> Result[Sequence[Order], DatabaseError]:
        stmt = select(Order).where(Order.customer_id == customer_id).order_by(Order.id)
        try:
            async with self.session_factory() as session:
                result = await session.scalars(stmt)
                return success(result.all())
        except SQLAlchemyError as exc:
            return self._database_failure("find_by_customer_id", exc)

    async def find_ids_by_customer_id(self, customer_id: int) -> Result[list[int], DatabaseError]:
        stmt = select(Order.id).where(Order.customer_id == customer_id)
        try:
            async with self.session_factory() as session:
                result = await session.scalars(stmt)
                return success(list(result.all()))
        except SQLAlchemyError as exc:
            return self._database_failure("find_ids_by_customer_id", exc)

    async def find_ids_by_meal_id(self, meal_id: int) -> Result[list[int], DatabaseError]:
        """Ids of the orders that contain the meal."""
        stmt = select(order_meals.c.order_id).where(order_meals.c.meal_id == meal_id)
        try:
            async with self.session_factory() as session:
                result = await session.scalars(stmt)
                return success(list(result.all()))
        except SQLAlchemyError as exc:
            return self._database_failure("find_ids_by_meal_id", exc)


__all__ = ["OrderRepository"]
