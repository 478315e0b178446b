from __future__ import annotations

from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from ordertracker.core.db import SessionFactory
from ordertracker.core.result import DatabaseError, Result, success
from ordertracker.domain.models import Customer, Meal, Order, OrderStatus, order_meals
from ordertracker.repositories.base import SqlAlchemyStore


class CustomerRepository(SqlAlchemyStore[Customer]):
    def __init__(self, session_factory: SessionFactory):
        super().__init__(Customer, session_factory)

    async def find_by_name(self, name: str) -> Result[Optional[Customer], DatabaseError]:
        # Names are not unique; the lowest id wins.
        stmt = select(Customer).where(Customer.name == name).order_by(Customer.id).limit(1)
        try:
            async with self.session_factory() as session:
                return success(await session.scalar(stmt))
        except SQLAlchemyError as exc:
            return self._database_failure("find_by_name", exc)

    async def find_by_phone_number(
        self, phone_number: str
    ) -> Result[Optional[Customer], DatabaseError]:
        stmt = select(Customer).where(Customer.phone_number == phone_number)
        try:
            async with self.session_factory() as session:
                return success(await session.scalar(stmt))
        except SQLAlchemyError as exc:
            return self._database_failure("find_by_phone_number", exc)

    async def find_by_order_status_and_meal_name(
        self, status: OrderStatus, meal_name: str
    ) -> Result[Sequence[Customer], DatabaseError]:
        """Customers having an order in ``status`` that contains the meal ``meal_name``."""
        stmt = (
            select(Customer)
            .join(Order, Order.customer_id == Customer.id)
            .join(order_meals, order_meals.c.order_id == Order.id)
            .join(Meal, Meal.id == order_meals.c.meal_id)
            .where(Order.status == OrderStatus(status).value, Meal.name == meal_name)
            .distinct()
            .order_by(Customer.id)
        )
        try:
            async with self.session_factory() as session:
                result = await session.scalars(stmt)
                return success(result.all())
        except SQLAlchemyError as exc:
            return self._database_failure("find_by_order_status_and_meal_name", exc)


__all__ = ["CustomerRepository"]
