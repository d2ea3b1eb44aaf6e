"""Application configuration with environment-specific profiles.

Supports dev, staging, test and production environments via APP_ENV.
All values can be overridden by environment variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


@dataclass(frozen=True)
class Settings:
    """Immutable application settings resolved from environment."""

    database_url: str
    app_env: str = "dev"
    log_level: str = "INFO"
    sql_echo: bool = False

    # Ledger input limits
    max_set_number: int = 20
    max_notes_length: int = 2000

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def is_dev(self) -> bool:
        return self.app_env == "dev"


# -- Environment profiles --

_ENV_PROFILES: dict[str, dict] = {
    "dev": {
        "log_level": "DEBUG",
        "sql_echo": False,
    },
    "staging": {
        "log_level": "INFO",
    },
    "test": {
        "log_level": "WARNING",
    },
    "production": {
        "log_level": "WARNING",
        "max_set_number": 12,
    },
}


def get_database_url() -> str:
    """Resolve database URL from the DATABASE_URL env var or a local default."""
    env_url = os.getenv("DATABASE_URL")
    if env_url:
        return env_url
    return "postgresql+psycopg2://localhost:5432/fitcoach"


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build Settings by merging environment profile with env-var overrides."""
    app_env = os.getenv("APP_ENV", "dev")
    profile = _ENV_PROFILES.get(app_env, _ENV_PROFILES["dev"])

    return Settings(
        database_url=get_database_url(),
        app_env=app_env,
        log_level=os.getenv("LOG_LEVEL", profile.get("log_level", "INFO")),
        sql_echo=_env_flag("SQL_ECHO", bool(profile.get("sql_echo", False))),
        max_set_number=int(os.getenv("MAX_SET_NUMBER", str(profile.get("max_set_number", 20)))),
        max_notes_length=int(os.getenv("MAX_NOTES_LENGTH", "2000")),
    )
