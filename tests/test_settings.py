import os
from pathlib import Path

import pytest

from ordertracker.core import settings as settings_module
from ordertracker.core.env import load_env


@pytest.fixture
def fresh_settings(monkeypatch, tmp_path):
    monkeypatch.setenv("DATA_DIR", str(tmp_path))
    settings_module.get_settings.cache_clear()
    yield settings_module.get_settings
    settings_module.get_settings.cache_clear()


def test_defaults_point_into_data_dir(fresh_settings, monkeypatch, tmp_path):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("LOG_FILE", raising=False)

    settings = fresh_settings()

    assert settings.data_dir == tmp_path
    assert settings.database_url_async == f"sqlite+aiosqlite:///{tmp_path / 'ordertracker.db'}"
    assert Path(settings.log_file).parent == tmp_path / "logs"
    assert settings.is_sqlite


def test_cache_settings_are_read_from_env(fresh_settings, monkeypatch):
    monkeypatch.setenv("CACHE_MAX_BYTES", "2048")
    monkeypatch.setenv("CACHE_SWEEP_INTERVAL_SECONDS", "2.5")
    monkeypatch.setenv("ORDER_CACHE_INVALIDATION", "PRECISE")

    settings = fresh_settings()

    assert settings.cache_max_bytes == 2048
    assert settings.cache_sweep_interval_seconds == 2.5
    assert settings.order_cache_invalidation == "precise"


def test_invalid_values_fall_back_to_defaults(fresh_settings, monkeypatch):
    monkeypatch.setenv("CACHE_MAX_BYTES", "lots")
    monkeypatch.setenv("CACHE_SWEEP_INTERVAL_SECONDS", "-1")
    monkeypatch.setenv("ORDER_CACHE_INVALIDATION", "sometimes")
    monkeypatch.setenv("ENVIRONMENT", "moon")

    settings = fresh_settings()

    assert settings.cache_max_bytes == settings_module.DEFAULT_CACHE_MAX_BYTES
    assert settings.cache_sweep_interval_seconds == settings_module.DEFAULT_CACHE_SWEEP_INTERVAL_SECONDS
    assert settings.order_cache_invalidation == "coarse"
    assert settings.environment == "development"


@pytest.mark.parametrize("raw", ["nan", "inf", "-inf"])
def test_sweep_interval_must_be_finite(fresh_settings, monkeypatch, raw):
    monkeypatch.setenv("CACHE_SWEEP_INTERVAL_SECONDS", raw)

    settings = fresh_settings()

    assert settings.cache_sweep_interval_seconds == settings_module.DEFAULT_CACHE_SWEEP_INTERVAL_SECONDS


def test_plain_sqlite_url_gets_async_driver(fresh_settings, monkeypatch, tmp_path):
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'x.db'}")
    assert fresh_settings().database_url_async == f"sqlite+aiosqlite:///{tmp_path / 'x.db'}"


def test_cors_origins_list(fresh_settings, monkeypatch):
    monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test,,")
    assert fresh_settings().cors_origins == ("http://a.test", "http://b.test")


def test_docs_disabled_in_production_by_default(fresh_settings, monkeypatch):
    monkeypatch.setenv("ENVIRONMENT", "production")
    monkeypatch.delenv("API_DOCS_ENABLED", raising=False)
    assert fresh_settings().api_docs_enabled is False


def test_load_env_keeps_shell_values(monkeypatch, tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text(
        "# comment\nORDERTRACKER_FROM_FILE='from file'\nexport ORDERTRACKER_SHELL=file\n",
        encoding="utf-8",
    )
    monkeypatch.delenv("ORDERTRACKER_FROM_FILE", raising=False)
    monkeypatch.setenv("ORDERTRACKER_SHELL", "shell")

    load_env(env_file)

    assert os.environ["ORDERTRACKER_FROM_FILE"] == "from file"
    assert os.environ["ORDERTRACKER_SHELL"] == "shell"
    os.environ.pop("ORDERTRACKER_FROM_FILE", None)
