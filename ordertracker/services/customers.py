from __future__ import annotations

import logging
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
from ordertracker.domain.models import Customer, Order, OrderStatus
from ordertracker.repositories import CustomerRepository, OrderRepository

logger = logging.getLogger(__name__)


class CustomerService:
    """Customer use cases; lookups by id go through the customer cache."""

    def __init__(
        self,
        customers: CachedRepository[Customer],
        repository: CustomerRepository,
        orders: CachedRepository[Order],
        order_repository: OrderRepository,
    ) -> None:
        self.customers = customers
        self.repository = repository
        self.orders = orders
        self.order_repository = order_repository

    async def get_all(self) -> Result[Sequence[Customer], DatabaseError]:
        return await self.customers.find_all()

    async def get_by_id(self, customer_id: int) -> Result[Customer, NotFoundError | DatabaseError]:
        return await self.customers.lookup_by_id(customer_id)

    async def get_by_name(self, name: str) -> Result[Customer, NotFoundError | DatabaseError]:
        result = await self.repository.find_by_name(name)
        return _require(result, "name", name)

    async def get_by_phone_number(
        self, phone_number: str
    ) -> Result[Customer, NotFoundError | DatabaseError]:
        result = await self.repository.find_by_phone_number(phone_number)
        return _require(result, "phone number", phone_number)

    async def get_by_order_status_and_meal_name(
        self, status: OrderStatus, meal_name: str
    ) -> Result[Sequence[Customer], NotFoundError | DatabaseError]:
        result = await self.repository.find_by_order_status_and_meal_name(status, meal_name)
        if result.is_failure():
            return result
        customers = result.unwrap()
        if not customers:
            return failure(
                NotFoundError(
                    entity_type="Customer",
                    entity_id=meal_name,
                    message=(
                        f"No customers found with order status {OrderStatus(status).value} "
                        f"and meal {meal_name}"
                    ),
                )
            )
        return success(customers)

    async def get_orders(
        self, customer_id: int
    ) -> Result[Sequence[Order], NotFoundError | DatabaseError]:
        customer = await self.customers.lookup_by_id(customer_id)
        if customer.is_failure():
            return customer
        return await self.order_repository.find_by_customer_id(customer_id)

    async def add(
        self, name: str, phone_number: str
    ) -> Result[Customer, ValidationError | DatabaseError]:
        conflict = await self._phone_number_taken(phone_number, exclude_id=None)
        if conflict is not None:
            return conflict
        return await self.customers.create(Customer(name=name, phone_number=phone_number))

    async def update(
        self, customer_id: int, name: str, phone_number: str
    ) -> Result[Customer, NotFoundError | ValidationError | DatabaseError]:
        conflict = await self._phone_number_taken(phone_number, exclude_id=customer_id)
        if conflict is not None:
            return conflict
        return await self.customers.update(
            customer_id,
            Customer(id=customer_id, name=name, phone_number=phone_number),
        )

    async def delete(self, customer_id: int) -> Result[bool, NotFoundError | DatabaseError]:
        """Delete the customer; their orders go with it (store cascade) and leave the order cache."""
        order_ids = await self.order_repository.find_ids_by_customer_id(customer_id)
        if order_ids.is_failure():
            return order_ids

        result = await self.customers.delete(customer_id)
        if result.is_success():
            for order_id in order_ids.unwrap():
                self.orders.forget(order_id)
            # Orders created after the listing went with the cascade too.
            self.orders.forget_matching(lambda order: order.customer_id == customer_id)
            logger.info(
                "Customer %s deleted with %d orders", customer_id, len(order_ids.unwrap())
            )
        return result

    async def _phone_number_taken(
        self, phone_number: str, exclude_id: Optional[int]
    ) -> Optional[Result]:
        existing = await self.repository.find_by_phone_number(phone_number)
        if existing.is_failure():
            return existing
        owner = existing.unwrap()
        if owner is not None and owner.id != exclude_id:
            return failure(
                ValidationError(
                    field="phone_number",
                    message=f"Phone number {phone_number} is already in use",
                )
            )
        return None


def _require(
    result: Result[Optional[Customer], DatabaseError], field: str, value: str
) -> Result[Customer, NotFoundError | DatabaseError]:
    if result.is_failure():
        return result
    customer = result.unwrap()
    if customer is None:
        return failure(
            NotFoundError(
                entity_type="Customer",
                entity_id=value,
                message=f"Customer not found with {field}: {value}",
            )
        )
    return success(customer)


__all__ = ["CustomerService"]
