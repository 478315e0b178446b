from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

from ordertracker.core.cache import CachedRepository
from ordertracker.core.result import DatabaseError, NotFoundError, Result, success
from ordertracker.domain.models import Customer, Meal, Order, OrderStatus

logger = logging.getLogger(__name__)


def _copy_order(
    order: Order,
    *,
    status: Optional[OrderStatus] = None,
    meals: Optional[Iterable[Meal]] = None,
) -> Order:
    # Cached orders are shared between requests and are never modified in place.
    return Order(
        id=order.id,
        customer_id=order.customer_id,
        status=status if status is not None else order.status,
        meals=list(meals if meals is not None else order.meals),
    )


class OrderService:
    def __init__(
        self,
        orders: CachedRepository[Order],
        customers: CachedRepository[Customer],
        meals: CachedRepository[Meal],
    ) -> None:
        self.orders = orders
        self.customers = customers
        self.meals = meals

    async def get_all(self) -> Result[Sequence[Order], DatabaseError]:
        return await self.orders.find_all()

    async def get_by_id(self, order_id: int) -> Result[Order, NotFoundError | DatabaseError]:
        return await self.orders.lookup_by_id(order_id)

    async def add_order(self, customer_id: int) -> Result[Order, NotFoundError | DatabaseError]:
        """Open a new, empty order in ``ACCEPTED`` state for the customer."""
        customer = await self.customers.lookup_by_id(customer_id)
        if customer.is_failure():
            return customer
        order = Order(customer_id=customer_id, status=OrderStatus.ACCEPTED, meals=[])
        return await self.orders.create(order)

    async def update_status(
        self, order_id: int, status: OrderStatus
    ) -> Result[Order, NotFoundError | DatabaseError]:
        current = await self.orders.lookup_by_id(order_id)
        if current.is_failure():
            return current
        return await self.orders.update(order_id, _copy_order(current.unwrap(), status=status))

    async def add_meal(
        self, order_id: int, meal_id: int
    ) -> Result[Order, NotFoundError | DatabaseError]:
        current = await self.orders.lookup_by_id(order_id)
        if current.is_failure():
            return current
        meal = await self.meals.lookup_by_id(meal_id)
        if meal.is_failure():
            return meal

        order = current.unwrap()
        if any(existing.id == meal_id for existing in order.meals):
            logger.debug("Meal %s already in order %s", meal_id, order_id)
            return success(order)
        return await self.orders.update(
            order_id, _copy_order(order, meals=[*order.meals, meal.unwrap()])
        )

    async def remove_meal(
        self, order_id: int, meal_id: int
    ) -> Result[Order, NotFoundError | DatabaseError]:
        current = await self.orders.lookup_by_id(order_id)
        if current.is_failure():
            return current
        meal = await self.meals.lookup_by_id(meal_id)
        if meal.is_failure():
            return meal

        order = current.unwrap()
        remaining = [existing for existing in order.meals if existing.id != meal_id]
        if len(remaining) == len(order.meals):
            return success(order)
        return await self.orders.update(order_id, _copy_order(order, meals=remaining))

    async def delete(self, order_id: int) -> Result[bool, NotFoundError | DatabaseError]:
        return await self.orders.delete(order_id)


__all__ = ["OrderService"]
