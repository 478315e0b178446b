"""Thread-safe in-process key-value map used by the entity caches.

The map knows nothing about sizes or backing stores: admission and
accounting live in the repository facade that owns it.
"""

from __future__ import annotations

import threading
from typing import Generic, Hashable, Optional, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class BoundedCache(Generic[K, V]):
    """Concurrent map with explicit eviction.

    Every operation takes the instance lock, so a single put/evict/clear is
    atomic with respect to the others. Sequences of calls are not.
    """

    def __init__(self, name: str = "cache") -> None:
        self.name = name
        self._entries: dict[K, V] = {}
        self._lock = threading.Lock()

    def get(self, key: K) -> Optional[V]:
        with self._lock:
            return self._entries.get(key)

    def put(self, key: K, value: V) -> None:
        with self._lock:
            self._entries[key] = value

    def evict(self, key: K) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def pop(self, key: K) -> Optional[V]:
        """Evict ``key`` and return what was stored under it."""
        with self._lock:
            return self._entries.pop(key, None)

    def clear(self) -> int:
        """Drop every entry; returns how many were removed."""
        with self._lock:
            removed = len(self._entries)
            self._entries.clear()
            return removed

    def keys(self) -> list[K]:
        with self._lock:
            return list(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __repr__(self) -> str:
        return f"<BoundedCache {self.name} entries={len(self)}>"


__all__ = ["BoundedCache"]
