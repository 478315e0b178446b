from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import List, Optional

from sqlalchemy import (
    Column,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Table,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from .base import Base


class OrderStatus(str, Enum):
    """Order lifecycle: accepted by the kitchen, being cooked, ready."""

    ACCEPTED = "ACCEPTED"
    COOKING = "COOKING"
    READY = "READY"


order_meals = Table(
    "order_meals",
    Base.metadata,
    Column("order_id", Integer, ForeignKey("orders.id", ondelete="CASCADE"), primary_key=True),
    Column("meal_id", Integer, ForeignKey("meals.id", ondelete="CASCADE"), primary_key=True),
)


class Customer(Base):
    __tablename__ = "customers"
    __table_args__ = (UniqueConstraint("phone_number", name="uq_customer_phone_number"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    phone_number: Mapped[str] = mapped_column(String(20), nullable=False)

    def __repr__(self) -> str:
        return f"<Customer {self.id} {self.name}>"


class Meal(Base):
    __tablename__ = "meals"
    __table_args__ = (UniqueConstraint("name", name="uq_meal_name"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(6, 2), nullable=False)
    cooking_time: Mapped[int] = mapped_column(Integer, nullable=False)

    def __repr__(self) -> str:
        return f"<Meal {self.id} {self.name}>"


class Order(Base):
    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    customer_id: Mapped[int] = mapped_column(
        ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True
    )
    status: Mapped[str] = mapped_column(
        String(16), default=OrderStatus.ACCEPTED.value, nullable=False
    )

    # Loaded eagerly: cached orders are detached from their session.
    meals: Mapped[List[Meal]] = relationship(
        secondary=order_meals,
        lazy="selectin",
        order_by=Meal.id,
    )

    def __repr__(self) -> str:
        return f"<Order {self.id} customer={self.customer_id} {self.status}>"

    @validates("status")
    def _normalize_status(self, _key, value: Optional[str | OrderStatus]) -> Optional[str]:
        if value is None:
            return value
        raw_value = value.value if isinstance(value, OrderStatus) else value
        return OrderStatus(str(raw_value).strip().upper()).value


__all__ = ["Customer", "Meal", "Order", "OrderStatus", "order_meals"]
