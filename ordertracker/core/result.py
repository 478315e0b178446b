"""
Result values for store and service operations.

Stores and services return ``Success`` or ``Failure`` instead of raising for
expected conditions (missing rows, constraint violations, bad input), so the
cache layer can pass store outcomes through without inspecting them.

Example:
    result = await orders.lookup_by_id(order_id)
    match result:
        case Success(order):
            print(order.status)
        case Failure(NotFoundError() as error):
            print(error)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True, slots=True)
class Success(Generic[T]):
    value: T

    def is_success(self) -> bool:
        return True

    def is_failure(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True, slots=True)
class Failure(Generic[E]):
    error: E

    def is_success(self) -> bool:
        return False

    def is_failure(self) -> bool:
        return True

    def unwrap(self) -> T:
        """Raise the carried error (or a RuntimeError wrapping it)."""
        if isinstance(self.error, Exception):
            raise self.error
        raise RuntimeError(f"Operation failed: {self.error}")


Result = Union[Success[T], Failure[E]]


def success(value: T) -> Success[T]:
    return Success(value)


def failure(error: E) -> Failure[E]:
    return Failure(error)


@dataclass(frozen=True, slots=True)
class NotFoundError:
    """Entity not found error."""

    entity_type: str
    entity_id: str | int
    message: str | None = None

    def __str__(self) -> str:
        if self.message:
            return self.message
        return f"{self.entity_type} not found with id: {self.entity_id}"


@dataclass(frozen=True, slots=True)
class ValidationError:
    """Request rejected before it reached the store."""

    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


@dataclass(frozen=True, slots=True)
class DatabaseError:
    """Store operation failed."""

    operation: str
    message: str
    original_exception: Exception | None = None

    def __str__(self) -> str:
        return f"Database error during {self.operation}: {self.message}"


__all__ = [
    "DatabaseError",
    "Failure",
    "NotFoundError",
    "Result",
    "Success",
    "ValidationError",
    "failure",
    "success",
]
