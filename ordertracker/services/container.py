"""Wiring of caches, stores and services for one application instance."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ordertracker.core.cache import CachedRepository, MemoryAccountant, PeriodicSweeper
from ordertracker.core.db import SessionFactory
from ordertracker.core.error_handler import GracefulShutdown
from ordertracker.core.logging import log_files
from ordertracker.core.settings import Settings
from ordertracker.domain.models import Customer, Meal, Order
from ordertracker.domain.sizing import customer_size, meal_size, order_size
from ordertracker.repositories import CustomerRepository, MealRepository, OrderRepository
from ordertracker.services.customers import CustomerService
from ordertracker.services.logs import LogService
from ordertracker.services.meals import MealService
from ordertracker.services.orders import OrderService
from ordertracker.services.visits import VisitCounter

logger = logging.getLogger(__name__)


@dataclass
class Services:
    customer_cache: CachedRepository[Customer]
    meal_cache: CachedRepository[Meal]
    order_cache: CachedRepository[Order]
    customers: CustomerService
    meals: MealService
    orders: OrderService
    visits: VisitCounter
    logs: LogService
    shutdown: GracefulShutdown

    @property
    def caches(self) -> list[CachedRepository]:
        return [self.customer_cache, self.meal_cache, self.order_cache]

    def start(self) -> None:
        """Start one sweeper per cache. Needs a running event loop."""
        for cache in self.caches:
            cache.sweeper.start()

    async def stop(self) -> None:
        for cache in self.caches:
            await cache.sweeper.stop()
        await self.shutdown.shutdown()


def _cache(store, entity_type: str, estimator, settings: Settings) -> CachedRepository:
    return CachedRepository(
        store,
        entity_type=entity_type,
        accountant=MemoryAccountant(settings.cache_max_bytes, estimator),
        sweeper=PeriodicSweeper(
            settings.cache_sweep_interval_seconds, name=entity_type.lower()
        ),
    )


def build_services(
    settings: Settings,
    session_factory: SessionFactory,
    *,
    export_dir: Optional[Path] = None,
) -> Services:
    customer_store = CustomerRepository(session_factory)
    meal_store = MealRepository(session_factory)
    order_store = OrderRepository(session_factory)

    customer_cache = _cache(customer_store, "Customer", customer_size, settings)
    meal_cache = _cache(meal_store, "Meal", meal_size, settings)
    order_cache = _cache(order_store, "Order", order_size, settings)

    shutdown = GracefulShutdown(timeout=10.0)
    services = Services(
        customer_cache=customer_cache,
        meal_cache=meal_cache,
        order_cache=order_cache,
        customers=CustomerService(customer_cache, customer_store, order_cache, order_store),
        meals=MealService(
            meal_cache,
            meal_store,
            order_cache,
            order_store,
            order_invalidation=settings.order_cache_invalidation,
        ),
        orders=OrderService(order_cache, customer_cache, meal_cache),
        visits=VisitCounter(),
        logs=LogService(
            lambda: log_files(settings),
            export_dir or settings.data_dir / "logs" / "exports",
            shutdown=shutdown,
        ),
        shutdown=shutdown,
    )
    logger.info(
        "Services ready (cache ceiling: %d bytes, sweep every %.0fs, order invalidation: %s)",
        settings.cache_max_bytes,
        settings.cache_sweep_interval_seconds,
        settings.order_cache_invalidation,
    )
    return services


__all__ = ["Services", "build_services"]
