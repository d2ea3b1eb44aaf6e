"""Structured JSON logging for fitcoach.

Ledger and facade events are logged as short event names with ``ctx_*``
extras; the formatter nests those under ``context`` with the prefix
stripped, and stamps every line with the app environment.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Optional

from fitcoach.config import Settings, get_settings

CONTEXT_PREFIX = "ctx_"


class JSONFormatter(logging.Formatter):
    """One JSON object per line."""

    def __init__(self, app_env: str = "dev") -> None:
        super().__init__()
        self.app_env = app_env

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "event": record.getMessage(),
            "app_env": self.app_env,
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = {
                "type": type(record.exc_info[1]).__name__,
                "message": str(record.exc_info[1]),
            }
        context = {
            k[len(CONTEXT_PREFIX):]: v for k, v in record.__dict__.items() if k.startswith(CONTEXT_PREFIX)
        }
        if context:
            log_entry["context"] = context
        return json.dumps(log_entry, default=str)


def _json_handler(root: logging.Logger) -> Optional[logging.Handler]:
    for handler in root.handlers:
        if isinstance(handler.formatter, JSONFormatter):
            return handler
    return None


def setup_logging(settings: Optional[Settings] = None) -> logging.Handler:
    """Install the JSON stdout handler once and apply the profile's levels.

    Levels are re-applied on every call, so a changed ``LOG_LEVEL`` or
    ``APP_ENV`` takes effect after ``get_settings.cache_clear()``.
    """
    settings = settings or get_settings()
    root = logging.getLogger()
    handler = _json_handler(root)
    if handler is None:
        handler = logging.StreamHandler(sys.stdout)
        root.addHandler(handler)
    handler.setFormatter(JSONFormatter(settings.app_env))
    root.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))

    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if settings.sql_echo else logging.WARNING)
    logging.getLogger("alembic").setLevel(logging.WARNING)
    return handler
