"""
Environment-backed settings.

Every setting is read lazily through a small accessor so tests can patch the
environment without reloading modules.
"""

from __future__ import annotations

import logging
import os


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def host() -> str:
    return os.environ.get("HOST", "0.0.0.0").strip() or "0.0.0.0"


def port() -> int:
    return _env_int("PORT", 8080)


def log_level() -> int:
    name = os.environ.get("LOG_LEVEL", "INFO").strip().upper() or "INFO"
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def project_root_override() -> str:
    return os.environ.get("PROJECT_ROOT", "").strip()


def database_url() -> str:
    # Optional: when set, the app connects at startup.
    return os.environ.get("DATABASE_URL", "").strip()


def maintenance_database() -> str:
    return os.environ.get("DB_MAINTENANCE_DB", "postgres").strip() or "postgres"


def db_pool_min_size() -> int:
    return max(0, _env_int("DB_POOL_MIN_SIZE", 1))


def db_pool_max_size() -> int:
    return max(1, _env_int("DB_POOL_MAX_SIZE", 10))
