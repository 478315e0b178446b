from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional

from ordertracker.core.env import load_env


PROJECT_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_USER_DATA_DIR = Path.home() / ".ordertracker" / "data"

DEFAULT_CACHE_MAX_BYTES = 100 * 1024 * 1024
DEFAULT_CACHE_SWEEP_INTERVAL_SECONDS = 30 * 60
INVALIDATION_MODES = {"coarse", "precise"}


@dataclass(frozen=True)
class Settings:
    environment: str  # development, production, staging, test
    data_dir: Path
    database_url_async: str
    sql_echo: bool
    db_pool_size: int
    db_max_overflow: int
    db_pool_timeout: int
    db_pool_recycle: int
    log_level: str
    log_json: bool
    log_file: str
    cache_max_bytes: int
    cache_sweep_interval_seconds: float
    order_cache_invalidation: str
    cors_origins: tuple[str, ...]
    api_docs_enabled: bool

    @property
    def is_sqlite(self) -> bool:
        return self.database_url_async.startswith("sqlite")


def _get_int(name: str, default: int, *, minimum: Optional[int] = None) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw.strip())
    except (TypeError, ValueError):
        return default
    if minimum is not None and value < minimum:
        return default
    return value


def _get_float(name: str, default: float, *, minimum: Optional[float] = None) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = float(raw.strip())
    except (TypeError, ValueError):
        return default
    if not math.isfinite(value):
        return default
    if minimum is not None and value < minimum:
        return default
    return value


def _get_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _get_choice(name: str, default: str, choices: set[str]) -> str:
    raw = (os.getenv(name) or "").strip().lower()
    if raw not in choices:
        if raw:
            logging.warning("Ignoring %s=%r, expected one of %s", name, raw, sorted(choices))
        return default
    return raw


def _get_list(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = os.getenv(name)
    if raw is None:
        return default
    return tuple(item.strip() for item in raw.split(",") if item.strip())


load_env()


def _default_data_dir() -> Path:
    env_dir = os.getenv("DATA_DIR")
    if env_dir and env_dir.strip():
        return Path(env_dir).expanduser()
    return DEFAULT_USER_DATA_DIR


def _normalize_sqlite_url(url: str) -> str:
    # Plain sqlite URLs get the async driver; the path part is kept as is.
    if url.startswith("sqlite:"):
        return "sqlite+aiosqlite:" + url[len("sqlite:"):]
    return url


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    environment = os.getenv("ENVIRONMENT", "development").strip().lower()
    if environment not in {"development", "production", "staging", "test"}:
        environment = "development"

    data_dir = _default_data_dir()
    data_dir.mkdir(parents=True, exist_ok=True)

    db_url_env = (os.getenv("DATABASE_URL") or "").strip()
    if db_url_env:
        database_url = _normalize_sqlite_url(db_url_env)
    else:
        database_url = f"sqlite+aiosqlite:///{data_dir / 'ordertracker.db'}"

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO"
    log_file = os.getenv("LOG_FILE", "").strip()
    if not log_file:
        log_dir = data_dir / "logs"
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = str(log_dir / "ordertracker.log")

    return Settings(
        environment=environment,
        data_dir=data_dir,
        database_url_async=database_url,
        sql_echo=_get_bool("SQL_ECHO"),
        db_pool_size=_get_int("DB_POOL_SIZE", 20, minimum=1),
        db_max_overflow=_get_int("DB_MAX_OVERFLOW", 10, minimum=0),
        db_pool_timeout=_get_int("DB_POOL_TIMEOUT", 30, minimum=1),
        db_pool_recycle=_get_int("DB_POOL_RECYCLE", 3600, minimum=60),
        log_level=log_level,
        log_json=_get_bool("LOG_JSON"),
        log_file=log_file,
        cache_max_bytes=_get_int("CACHE_MAX_BYTES", DEFAULT_CACHE_MAX_BYTES, minimum=0),
        cache_sweep_interval_seconds=_get_float(
            "CACHE_SWEEP_INTERVAL_SECONDS",
            float(DEFAULT_CACHE_SWEEP_INTERVAL_SECONDS),
            minimum=0.01,
        ),
        order_cache_invalidation=_get_choice(
            "ORDER_CACHE_INVALIDATION", "coarse", INVALIDATION_MODES
        ),
        cors_origins=_get_list("CORS_ORIGINS", ("http://localhost:5173",)),
        api_docs_enabled=_get_bool("API_DOCS_ENABLED", default=environment != "production"),
    )


__all__ = ["Settings", "get_settings"]
