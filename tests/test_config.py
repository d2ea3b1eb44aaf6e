"""Tests for configuration module."""

from __future__ import annotations

import pytest

from fitcoach.config import Settings, get_database_url, get_settings, _ENV_PROFILES


@pytest.fixture(autouse=True)
def _fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_settings_dataclass():
    s = Settings(database_url="postgres://localhost/test")
    assert s.database_url == "postgres://localhost/test"
    assert s.app_env == "dev"
    assert s.sql_echo is False
    assert s.max_set_number == 20
    assert s.max_notes_length == 2000


def test_settings_frozen():
    s = Settings(database_url="x")
    with pytest.raises(AttributeError):
        s.database_url = "y"


def test_settings_is_production():
    s = Settings(database_url="x", app_env="production")
    assert s.is_production is True
    assert s.is_dev is False


def test_settings_is_dev():
    s = Settings(database_url="x", app_env="dev")
    assert s.is_dev is True
    assert s.is_production is False


def test_get_database_url_from_env(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgres://from-env/db")
    assert get_database_url() == "postgres://from-env/db"


def test_get_database_url_default(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    assert get_database_url().startswith("postgresql")


def test_get_settings_uses_env(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgres://test/db")
    monkeypatch.setenv("APP_ENV", "production")
    monkeypatch.setenv("MAX_NOTES_LENGTH", "500")
    s = get_settings()
    assert s.database_url == "postgres://test/db"
    assert s.app_env == "production"
    assert s.max_notes_length == 500


def test_get_settings_is_cached(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgres://test/db")
    assert get_settings() is get_settings()


def test_env_profiles_exist():
    for name in ("dev", "staging", "test", "production"):
        assert name in _ENV_PROFILES


def test_production_profile_has_tighter_set_limit():
    assert _ENV_PROFILES["production"]["max_set_number"] == 12


def test_dev_profile_debug_logging():
    assert _ENV_PROFILES["dev"]["log_level"] == "DEBUG"


def test_unknown_env_falls_back_to_dev_profile(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgres://test/db")
    monkeypatch.setenv("APP_ENV", "sandbox")
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    s = get_settings()
    assert s.app_env == "sandbox"
    assert s.log_level == "DEBUG"


def test_settings_profile_defaults(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgres://test/db")
    monkeypatch.setenv("APP_ENV", "production")
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.delenv("MAX_SET_NUMBER", raising=False)
    s = get_settings()
    assert s.log_level == "WARNING"
    assert s.max_set_number == 12


def test_env_overrides_profile(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgres://test/db")
    monkeypatch.setenv("APP_ENV", "production")
    monkeypatch.setenv("MAX_SET_NUMBER", "30")
    monkeypatch.setenv("SQL_ECHO", "yes")
    s = get_settings()
    assert s.max_set_number == 30
    assert s.sql_echo is True
