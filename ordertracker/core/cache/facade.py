"""
Read-through / write-through cache in front of an entity store.

One ``CachedRepository`` exists per entity type. It owns a ``BoundedCache``,
a ``MemoryAccountant`` and a ``PeriodicSweeper`` and keeps them consistent:

- lookups fill the cache on a miss, if the accountant admits the value
- writes go to the store first and only then replace the cached entry
- deletes go to the store first and only then evict
- sweeps drop every entry and reset the running total

The store stays authoritative. Cache-side problems (admission refused,
size estimation failing) are logged and never reach the caller; store
results are returned unchanged.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from operator import attrgetter
from time import monotonic
from typing import Any, Callable, Generic, Optional, Protocol, Sequence, TypeVar

from ordertracker.core.cache.accounting import MemoryAccountant
from ordertracker.core.cache.bounded import BoundedCache
from ordertracker.core.cache.stats import CacheStats
from ordertracker.core.cache.sweeper import PeriodicSweeper
from ordertracker.core.result import (
    DatabaseError,
    NotFoundError,
    Result,
    failure,
    success,
)

logger = logging.getLogger(__name__)

V = TypeVar("V")


@dataclass(frozen=True)
class CacheEntry(Generic[V]):
    """Cached value with the size it was admitted with."""

    value: V
    size: int
    inserted_at: float = field(default_factory=monotonic)


class EntityStore(Protocol[V]):
    """Durable store contract consumed by the cache layer."""

    async def find_by_id(self, id: int) -> Result[V, NotFoundError | DatabaseError]:
        ...

    async def find_all(self) -> Result[Sequence[V], DatabaseError]:
        ...

    async def save(self, entity: V) -> Result[V, DatabaseError]:
        ...

    async def delete(self, id: int) -> Result[bool, DatabaseError]:
        ...


class CachedRepository(Generic[V]):
    """
    Per-entity cache facade over an ``EntityStore``.

    Args:
        store: Durable store (source of truth)
        entity_type: Entity name used in logs and NotFoundError
        accountant: Memory accountant for this cache (default: 100 MiB ceiling)
        sweeper: Periodic sweeper; bound to ``sweep`` here, started by the owner
        key_of: Extracts the cache key from a stored entity (default: ``.id``)
    """

    def __init__(
        self,
        store: EntityStore[V],
        *,
        entity_type: str,
        accountant: Optional[MemoryAccountant] = None,
        sweeper: Optional[PeriodicSweeper] = None,
        key_of: Callable[[V], int] = attrgetter("id"),
    ) -> None:
        self.entity_type = entity_type
        self._store = store
        self._cache: BoundedCache[int, CacheEntry[V]] = BoundedCache(entity_type.lower())
        self._accountant = accountant or MemoryAccountant()
        self._sweeper = sweeper or PeriodicSweeper(name=entity_type.lower())
        self._sweeper.bind(self.sweep)
        self._key_of = key_of

        # Guards compound cache updates (drop old entry, admit, put) and counters.
        self._lock = threading.Lock()
        # Read fills started before a write to the same key, or before a clear, are dropped.
        self._generation = 0
        self._key_epochs: dict[int, int] = {}
        self._hits = 0
        self._misses = 0
        self._rejected = 0
        self._evictions = 0

    @property
    def store(self) -> EntityStore[V]:
        return self._store

    @property
    def cache(self) -> BoundedCache[int, CacheEntry[V]]:
        return self._cache

    @property
    def accountant(self) -> MemoryAccountant:
        return self._accountant

    @property
    def sweeper(self) -> PeriodicSweeper:
        return self._sweeper

    # ------------------------------------------------------------------
    # Store-facing operations
    # ------------------------------------------------------------------

    async def lookup_by_id(self, id: int) -> Result[V, NotFoundError | DatabaseError]:
        entry = self._cache.get(id)
        if entry is not None:
            with self._lock:
                self._hits += 1
            logger.debug("%s retrieved from cache: %s", self.entity_type, id)
            return success(entry.value)

        with self._lock:
            self._misses += 1
            token = self._fill_token(id)

        result = await self._store.find_by_id(id)
        if result.is_success():
            self._fill(id, result.unwrap(), token)
        return result

    async def find_all(self) -> Result[Sequence[V], DatabaseError]:
        return await self._store.find_all()

    async def create(self, entity: V) -> Result[V, DatabaseError]:
        result = await self._store.save(entity)
        if result.is_success():
            saved = result.unwrap()
            self.remember(self._key_of(saved), saved)
            logger.info("%s added to cache: %s", self.entity_type, self._key_of(saved))
        return result

    async def update(self, id: int, entity: V) -> Result[V, NotFoundError | DatabaseError]:
        existing = await self._store.find_by_id(id)
        if existing.is_failure():
            return existing

        result = await self._store.save(entity)
        if result.is_failure():
            return result

        self.forget(id)
        self.remember(id, result.unwrap())
        logger.info("%s updated in cache: %s", self.entity_type, id)
        return result

    async def delete(self, id: int) -> Result[bool, NotFoundError | DatabaseError]:
        result = await self._store.delete(id)
        if result.is_failure():
            return result

        self.forget(id)
        if not result.unwrap():
            return failure(NotFoundError(entity_type=self.entity_type, entity_id=id))
        logger.info("%s evicted from cache: %s", self.entity_type, id)
        return success(True)

    # ------------------------------------------------------------------
    # Cache-side operations (synchronous, never touch the store)
    # ------------------------------------------------------------------

    def peek(self, id: int) -> Optional[V]:
        """Cached value for ``id`` without falling through to the store."""
        entry = self._cache.get(id)
        return entry.value if entry is not None else None

    def remember(self, id: int, value: V) -> bool:
        """Cache ``value`` under ``id`` replacing any previous entry.

        Returns:
            True if the value is now cached, False if it was not admitted
        """
        with self._lock:
            self._bump(id)
        return self._store_entry(id, value)

    def forget(self, id: int) -> bool:
        """Evict ``id`` and release its recorded size."""
        with self._lock:
            self._bump(id)
            entry = self._cache.pop(id)
            if entry is None:
                return False
            self._accountant.record_remove(entry.size)
            self._evictions += 1
        return True

    def forget_matching(self, predicate: Callable[[V], bool]) -> int:
        """Evict every cached value the predicate accepts."""
        removed = 0
        for key in self._cache.keys():
            entry = self._cache.get(key)
            if entry is not None and predicate(entry.value) and self.forget(key):
                removed += 1
        return removed

    def invalidate_all(self) -> int:
        """Drop every entry and reset accounting."""
        with self._lock:
            self._generation += 1
            self._key_epochs.clear()
            removed = self._cache.clear()
            self._accountant.reset()
        logger.info("%s cache cleared (%d entries)", self.entity_type, removed)
        return removed

    def sweep(self) -> None:
        logger.info(
            "Sweeping %s cache (usage: %d/%d bytes)",
            self.entity_type,
            self._accountant.usage,
            self._accountant.ceiling,
        )
        self.invalidate_all()

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(
                name=self._cache.name,
                entries=len(self._cache),
                usage_bytes=self._accountant.usage,
                ceiling_bytes=self._accountant.ceiling,
                hits=self._hits,
                misses=self._misses,
                rejected=self._rejected,
                evictions=self._evictions,
                sweeps=self._sweeper.sweeps,
            )

    # ------------------------------------------------------------------

    def _bump(self, id: int) -> None:
        # Caller holds self._lock.
        self._key_epochs[id] = self._key_epochs.get(id, 0) + 1

    def _fill_token(self, id: int) -> tuple[int, int]:
        # Caller holds self._lock.
        return self._generation, self._key_epochs.get(id, 0)

    def _fill(self, id: int, value: V, token: tuple[int, int]) -> None:
        with self._lock:
            if token != self._fill_token(id):
                logger.debug("Skipping cache fill for %s %s: written meanwhile", self.entity_type, id)
                return
        self._store_entry(id, value, expected_token=token)

    def _store_entry(
        self, id: int, value: V, expected_token: Optional[tuple[int, int]] = None
    ) -> bool:
        try:
            size = self._accountant.estimate_size(value)
        except Exception:
            logger.warning(
                "Cannot estimate size of %s %s, not caching it",
                self.entity_type,
                id,
                exc_info=True,
            )
            self.forget(id)
            return False

        with self._lock:
            if expected_token is not None and expected_token != self._fill_token(id):
                return False
            previous = self._cache.pop(id)
            if previous is not None:
                self._accountant.record_remove(previous.size)
            if not self._accountant.admit(size):
                self._rejected += 1
                admitted = False
            else:
                self._cache.put(id, CacheEntry(value=value, size=size))
                admitted = True

        if not admitted:
            logger.warning(
                "Cannot cache %s %s - memory limit would be exceeded (%d bytes requested)",
                self.entity_type,
                id,
                size,
            )
        return admitted

    def __repr__(self) -> str:
        return f"<CachedRepository {self.entity_type} entries={len(self._cache)}>"


def describe(repositories: Sequence[CachedRepository[Any]]) -> list[dict[str, Any]]:
    return [repository.stats().as_dict() for repository in repositories]


__all__ = ["CacheEntry", "CachedRepository", "EntityStore", "describe"]
