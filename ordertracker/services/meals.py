from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Sequence

from ordertracker.core.cache import CachedRepository
from ordertracker.core.result import (
    DatabaseError,
    NotFoundError,
    Result,
    ValidationError,
    failure,
    success,
)
from ordertracker.domain.models import Meal, Order
from ordertracker.repositories import MealRepository, OrderRepository

logger = logging.getLogger(__name__)

COARSE = "coarse"
PRECISE = "precise"


@dataclass(frozen=True)
class MealData:
    name: str
    price: Decimal
    cooking_time: int


class MealService:
    """
    Meal use cases.

    Cached orders carry copies of their meals, so changing or deleting a meal
    also invalidates the order cache: all of it in ``coarse`` mode, only the
    orders containing the meal in ``precise`` mode.
    """

    def __init__(
        self,
        meals: CachedRepository[Meal],
        repository: MealRepository,
        orders: CachedRepository[Order],
        order_repository: OrderRepository,
        *,
        order_invalidation: str = COARSE,
    ) -> None:
        if order_invalidation not in (COARSE, PRECISE):
            raise ValueError(f"Unknown order invalidation mode: {order_invalidation}")
        self.meals = meals
        self.repository = repository
        self.orders = orders
        self.order_repository = order_repository
        self.order_invalidation = order_invalidation

    async def get_all(self) -> Result[Sequence[Meal], DatabaseError]:
        return await self.meals.find_all()

    async def get_by_id(self, meal_id: int) -> Result[Meal, NotFoundError | DatabaseError]:
        return await self.meals.lookup_by_id(meal_id)

    async def get_by_name(self, name: str) -> Result[Meal, NotFoundError | DatabaseError]:
        result = await self.repository.find_by_name(name)
        if result.is_failure():
            return result
        meal = result.unwrap()
        if meal is None:
            return failure(
                NotFoundError(
                    entity_type="Meal",
                    entity_id=name,
                    message=f"Meal not found with name: {name}",
                )
            )
        return success(meal)

    async def add(self, data: MealData) -> Result[Meal, ValidationError | DatabaseError]:
        conflict = await self._name_taken(data.name, exclude_id=None)
        if conflict is not None:
            return conflict
        return await self.meals.create(_build(None, data))

    async def add_bulk(
        self, items: Sequence[MealData]
    ) -> Result[Sequence[Meal], ValidationError | DatabaseError]:
        """Add several meals at once; either all of them are stored or none."""
        if not items:
            return failure(ValidationError(field="meals", message="Meal list must not be empty"))

        names = [item.name for item in items]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            return failure(
                ValidationError(
                    field="meals",
                    message=f"Duplicate meal names in request: {', '.join(duplicates)}",
                )
            )
        for name in names:
            conflict = await self._name_taken(name, exclude_id=None)
            if conflict is not None:
                return conflict

        result = await self.repository.save_all([_build(None, item) for item in items])
        if result.is_success():
            for meal in result.unwrap():
                self.meals.remember(meal.id, meal)
            logger.info("Added %d meals in bulk", len(result.unwrap()))
        return result

    async def update(
        self, meal_id: int, data: MealData
    ) -> Result[Meal, NotFoundError | ValidationError | DatabaseError]:
        conflict = await self._name_taken(data.name, exclude_id=meal_id)
        if conflict is not None:
            return conflict

        affected = await self._affected_order_ids(meal_id)
        result = await self.meals.update(meal_id, _build(meal_id, data))
        if result.is_success():
            self._invalidate_orders(meal_id, affected, reason="update")
        return result

    async def delete(self, meal_id: int) -> Result[bool, NotFoundError | DatabaseError]:
        # Collected before the delete: the store drops the order links with the meal.
        affected = await self._affected_order_ids(meal_id)
        result = await self.meals.delete(meal_id)
        if result.is_success():
            self._invalidate_orders(meal_id, affected, reason="deletion")
        return result

    async def _affected_order_ids(self, meal_id: int) -> Optional[list[int]]:
        if self.order_invalidation != PRECISE:
            return None
        result = await self.order_repository.find_ids_by_meal_id(meal_id)
        if result.is_failure():
            logger.warning(
                "Cannot list orders containing meal %s, falling back to a full order cache clear",
                meal_id,
            )
            return None
        return result.unwrap()

    def _invalidate_orders(
        self, meal_id: int, order_ids: Optional[list[int]], *, reason: str
    ) -> None:
        if order_ids is None:
            self.orders.invalidate_all()
            logger.info("Order cache cleared due to meal %s", reason)
            return
        for order_id in order_ids:
            self.orders.forget(order_id)
        # Orders that picked up the meal after the listing.
        self.orders.forget_matching(lambda order: any(meal.id == meal_id for meal in order.meals))
        logger.info("Evicted %d cached orders due to meal %s", len(order_ids), reason)

    async def _name_taken(self, name: str, exclude_id: Optional[int]) -> Optional[Result]:
        existing = await self.repository.find_by_name(name)
        if existing.is_failure():
            return existing
        meal = existing.unwrap()
        if meal is not None and meal.id != exclude_id:
            return failure(
                ValidationError(field="name", message=f"Meal with name {name} already exists")
            )
        return None


def _build(meal_id: Optional[int], data: MealData) -> Meal:
    return Meal(id=meal_id, name=data.name, price=data.price, cooking_time=data.cooking_time)


__all__ = ["COARSE", "MealData", "MealService", "PRECISE"]
