"""In-process entity caches: map, memory accounting, periodic sweep and the repository facade."""

from ordertracker.core.cache.accounting import (
    DEFAULT_CEILING_BYTES,
    MemoryAccountant,
    SizeEstimator,
    estimate_size,
)
from ordertracker.core.cache.bounded import BoundedCache
from ordertracker.core.cache.facade import CacheEntry, CachedRepository, EntityStore, describe
from ordertracker.core.cache.stats import CacheStats
from ordertracker.core.cache.sweeper import DEFAULT_SWEEP_INTERVAL_SECONDS, PeriodicSweeper

__all__ = [
    "BoundedCache",
    "CacheEntry",
    "CacheStats",
    "CachedRepository",
    "DEFAULT_CEILING_BYTES",
    "DEFAULT_SWEEP_INTERVAL_SECONDS",
    "EntityStore",
    "MemoryAccountant",
    "PeriodicSweeper",
    "SizeEstimator",
    "describe",
    "estimate_size",
]
