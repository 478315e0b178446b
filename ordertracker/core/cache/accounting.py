"""Approximate memory bookkeeping for a single cache instance.

Sizes are estimates, not measurements. The accountant keeps a running total
of what has been admitted and refuses admissions that would push the total
past the ceiling.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable

logger = logging.getLogger(__name__)

DEFAULT_CEILING_BYTES = 100 * 1024 * 1024
BASE_OBJECT_BYTES = 100
BYTES_PER_CHAR = 2

SizeEstimator = Callable[[Any], int]


def estimate_size(value: Any) -> int:
    """
    Fallback estimator for arbitrary objects.

    Charges a fixed overhead plus two bytes per character of every public
    string attribute (or of the value itself when it is a string).

    Args:
        value: Object to size

    Returns:
        Estimated size in bytes
    """
    size = BASE_OBJECT_BYTES
    if isinstance(value, str):
        return size + len(value) * BYTES_PER_CHAR
    try:
        attributes = vars(value)
    except TypeError:
        return size
    for name, attr in attributes.items():
        if not name.startswith("_") and isinstance(attr, str):
            size += len(attr) * BYTES_PER_CHAR
    return size


class MemoryAccountant:
    """Running total of estimated bytes held by one cache."""

    def __init__(
        self,
        ceiling_bytes: int = DEFAULT_CEILING_BYTES,
        estimator: SizeEstimator = estimate_size,
    ) -> None:
        if ceiling_bytes < 0:
            raise ValueError("ceiling_bytes must not be negative")
        self._ceiling = ceiling_bytes
        self._estimator = estimator
        self._usage = 0
        self._lock = threading.Lock()

    @property
    def ceiling(self) -> int:
        return self._ceiling

    @property
    def usage(self) -> int:
        with self._lock:
            return self._usage

    @property
    def is_over_ceiling(self) -> bool:
        with self._lock:
            return self._usage > self._ceiling

    def estimate_size(self, value: Any) -> int:
        size = int(self._estimator(value))
        if size < 0:
            raise ValueError(f"size estimator returned a negative size: {size}")
        return size

    def try_admit(self, nbytes: int) -> bool:
        """Whether ``nbytes`` more would still fit. Does not reserve anything."""
        with self._lock:
            return self._usage + nbytes <= self._ceiling

    def admit(self, nbytes: int) -> bool:
        """Check and record ``nbytes`` in one step."""
        with self._lock:
            if self._usage + nbytes > self._ceiling:
                return False
            self._usage += nbytes
            return True

    def record_add(self, nbytes: int) -> None:
        with self._lock:
            self._usage += nbytes

    def record_remove(self, nbytes: int) -> None:
        with self._lock:
            self._usage -= nbytes
            if self._usage < 0:
                # Estimates drift; the total is clamped rather than trusted.
                logger.debug("Accountant usage went negative (%d), clamping to 0", self._usage)
                self._usage = 0

    def reset(self) -> None:
        with self._lock:
            self._usage = 0

    def __repr__(self) -> str:
        return f"<MemoryAccountant usage={self.usage} ceiling={self._ceiling}>"


__all__ = ["MemoryAccountant", "SizeEstimator", "estimate_size", "DEFAULT_CEILING_BYTES"]
