"""FastAPI application wiring for the order tracking API."""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from ordertracker import __version__
from ordertracker.apps.api.routers import customers, logs, meals, orders, statistics, system
from ordertracker.core.db import build_engine, build_session_factory, init_models
from ordertracker.core.error_handler import setup_global_exception_handler
from ordertracker.core.logging import configure_logging
from ordertracker.core.settings import Settings, get_settings
from ordertracker.services import build_services

request_logger = logging.getLogger("ordertracker.requests")
logger = logging.getLogger(__name__)


def _lifespan(settings: Settings):
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_global_exception_handler()
        logger.info("Starting order tracker API (%s)...", settings.environment)

        engine = build_engine(settings)
        await init_models(engine)
        services = build_services(settings, build_session_factory(engine))
        app.state.engine = engine
        app.state.services = services
        services.start()

        routes = [r.path for r in app.routes if hasattr(r, "path")]
        logger.info("Application started with %d routes", len(routes))
        try:
            yield
        finally:
            logger.info("Shutting down application...")
            await services.stop()
            await engine.dispose()
            logger.info("Application shut down complete")

    return lifespan


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)

    docs_enabled = settings.api_docs_enabled
    app = FastAPI(
        title="Order Tracker API",
        version=__version__,
        lifespan=_lifespan(settings),
        docs_url="/docs" if docs_enabled else None,
        redoc_url="/redoc" if docs_enabled else None,
        openapi_url="/openapi.json" if docs_enabled else None,
    )
    app.state.settings = settings

    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(settings.cors_origins),
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.include_router(system.router)
    app.include_router(customers.router)
    app.include_router(meals.router)
    app.include_router(orders.router)
    app.include_router(statistics.router)
    app.include_router(logs.router)

    @app.middleware("http")
    async def count_visits(request: Request, call_next):
        services = getattr(request.app.state, "services", None)
        if services is not None:
            services.visits.increment(request.url.path)
        return await call_next(request)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            duration = (time.perf_counter() - start) * 1000
            request_logger.exception(
                "HTTP %s %s failed (%.1f ms)",
                request.method,
                request.url.path,
                duration,
            )
            raise
        duration = (time.perf_counter() - start) * 1000
        request_logger.info(
            "HTTP %s %s -> %s (%.1f ms)",
            request.method,
            request.url.path,
            response.status_code,
            duration,
        )
        return response

    return app


__all__ = ["create_app"]
