from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ordertracker.domain.models import OrderStatus
from ordertracker.services.logs import LogTaskStatus

PHONE_NUMBER_PATTERN = r"^[0-9+\-() ]+$"
MEAL_NAME_PATTERN = r"^[a-zA-Z0-9 ]+$"


class CustomerIn(BaseModel):
    """Customer payload; ``id`` must be absent on create and match the path on update."""

    id: Optional[int] = None
    name: str = Field(..., min_length=2, max_length=100)
    phone_number: str = Field(..., min_length=5, max_length=20, pattern=PHONE_NUMBER_PATTERN)


class CustomerOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    phone_number: str


class MealIn(BaseModel):
    id: Optional[int] = None
    name: str = Field(..., min_length=2, max_length=100, pattern=MEAL_NAME_PATTERN)
    price: Decimal = Field(..., ge=Decimal("0.01"), le=Decimal("9999.99"), decimal_places=2)
    cooking_time: int = Field(..., ge=1, le=1440, description="Minutes")


class MealOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    price: float
    cooking_time: int


class OrderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    customer_id: int
    status: OrderStatus
    meals: List[MealOut] = Field(default_factory=list)


class VisitCount(BaseModel):
    url: str
    count: int


class LogTaskOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    status: LogTaskStatus
