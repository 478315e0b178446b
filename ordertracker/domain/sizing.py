"""Approximate in-memory cost of cached entities.

These are order-of-magnitude figures used only for cache admission: a fixed
per-object overhead plus two bytes per character of text fields.
"""

from __future__ import annotations

from ordertracker.core.cache.accounting import BASE_OBJECT_BYTES, BYTES_PER_CHAR
from ordertracker.domain.models import Customer, Meal, Order

ORDER_CUSTOMER_BYTES = 50
ORDER_MEALS_BYTES = 50
ORDER_MEAL_REF_BYTES = 30


def _text_bytes(value: str | None) -> int:
    return len(value) * BYTES_PER_CHAR if value else 0


def customer_size(customer: Customer) -> int:
    return BASE_OBJECT_BYTES + _text_bytes(customer.name) + _text_bytes(customer.phone_number)


def meal_size(meal: Meal) -> int:
    return BASE_OBJECT_BYTES + _text_bytes(meal.name)


def order_size(order: Order) -> int:
    size = BASE_OBJECT_BYTES
    if order.customer_id is not None:
        size += ORDER_CUSTOMER_BYTES
    meals = order.meals
    if meals is not None:
        size += ORDER_MEALS_BYTES + len(meals) * ORDER_MEAL_REF_BYTES
    return size


__all__ = ["customer_size", "meal_size", "order_size"]
