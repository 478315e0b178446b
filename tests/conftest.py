import dataclasses
import os
import tempfile
from pathlib import Path
from typing import Any, Optional

import pytest

_TEST_DATA_DIR = Path(tempfile.mkdtemp(prefix="ordertracker-tests-"))

TEST_ENV = {
    "ENVIRONMENT": "test",
    "DATA_DIR": str(_TEST_DATA_DIR),
    "DATABASE_URL": "",
    "LOG_LEVEL": "INFO",
    "LOG_JSON": "false",
    "CACHE_MAX_BYTES": str(100 * 1024 * 1024),
    "CACHE_SWEEP_INTERVAL_SECONDS": "1800",
    "ORDER_CACHE_INVALIDATION": "coarse",
}

for key, value in TEST_ENV.items():
    os.environ[key] = value

from ordertracker.core.db import build_engine, build_session_factory, init_models  # noqa: E402
from ordertracker.core.result import NotFoundError, failure, success  # noqa: E402
from ordertracker.core.settings import get_settings  # noqa: E402
from ordertracker.services import build_services  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def _set_test_env():
    """Force deterministic env for tests and reset cached settings."""
    for key, value in TEST_ENV.items():
        os.environ[key] = value
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at a per-test SQLite database and log file."""
    return dataclasses.replace(
        get_settings(),
        data_dir=tmp_path,
        database_url_async=f"sqlite+aiosqlite:///{tmp_path / 'ordertracker.db'}",
        log_file=str(tmp_path / "logs" / "ordertracker.log"),
    )


@pytest.fixture
async def engine(settings):
    engine = build_engine(settings)
    await init_models(engine)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
async def services(settings, session_factory):
    services = build_services(settings, session_factory)
    try:
        yield services
    finally:
        await services.stop()


@dataclasses.dataclass
class Item:
    id: Optional[int]
    name: str


class FakeStore:
    """In-memory ``EntityStore`` that counts calls."""

    def __init__(self, *items: Item) -> None:
        self.rows: dict[int, Item] = {item.id: item for item in items}
        self.calls: dict[str, int] = {"find_by_id": 0, "find_all": 0, "save": 0, "delete": 0}
        self.fail_with: Optional[Any] = None
        self._next_id = max(self.rows, default=0) + 1

    async def find_by_id(self, id: int):
        self.calls["find_by_id"] += 1
        if self.fail_with is not None:
            return failure(self.fail_with)
        item = self.rows.get(id)
        if item is None:
            return failure(NotFoundError(entity_type="Item", entity_id=id))
        return success(item)

    async def find_all(self):
        self.calls["find_all"] += 1
        if self.fail_with is not None:
            return failure(self.fail_with)
        return success(list(self.rows.values()))

    async def save(self, entity: Item):
        self.calls["save"] += 1
        if self.fail_with is not None:
            return failure(self.fail_with)
        if entity.id is None:
            entity = dataclasses.replace(entity, id=self._next_id)
            self._next_id += 1
        self.rows[entity.id] = entity
        return success(entity)

    async def delete(self, id: int):
        self.calls["delete"] += 1
        if self.fail_with is not None:
            return failure(self.fail_with)
        return success(self.rows.pop(id, None) is not None)


@pytest.fixture
def item_store():
    return FakeStore(Item(id=5, name="V"))
