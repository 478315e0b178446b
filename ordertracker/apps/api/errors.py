"""Translation of service ``Failure`` values into HTTP errors."""

from __future__ import annotations

from typing import Any, TypeVar

from fastapi import HTTPException

from ordertracker.core.result import DatabaseError, NotFoundError, Result, ValidationError

T = TypeVar("T")


def status_for(error: Any) -> int:
    if isinstance(error, NotFoundError):
        return 404
    if isinstance(error, ValidationError):
        return 400
    if isinstance(error, DatabaseError):
        return 500
    return 500


def unwrap_or_raise(result: Result[T, Any]) -> T:
    """Return the success value or raise the matching ``HTTPException``."""
    if result.is_success():
        return result.unwrap()
    error = result.error
    detail = "Internal server error" if isinstance(error, DatabaseError) else str(error)
    raise HTTPException(status_code=status_for(error), detail=detail)


def bad_request(message: str) -> HTTPException:
    return HTTPException(status_code=400, detail=message)


__all__ = ["bad_request", "status_for", "unwrap_or_raise"]
