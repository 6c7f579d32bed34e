# src/todo_store/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Nothing required at import time; every variable has a default.
- Paths derive from data_dir unless overridden individually.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TODO"

STORAGE_BACKENDS = ("file", "sqlite", "memory")

# Local .env wins over nothing, never over the real environment.
load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Connector flags ----
    console_enabled: bool

    # ---- Storage ----
    data_dir: Path
    storage_backend: str
    storage_path: Path
    storage_quota_bytes: int

    # ---- Recycle bin ----
    retention_days: int
    cleanup_on_start: bool

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "todo").strip() or "todo"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        console_enabled = _env_bool(_k("CONSOLE_ENABLED"), True)

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/todo"))

        storage_backend = _env(_k("STORAGE_BACKEND"), "file").strip().lower()
        if storage_backend not in STORAGE_BACKENDS:
            storage_backend = "file"
        default_name = "storage.sqlite3" if storage_backend == "sqlite" else "storage.json"
        storage_path = _env_path(_k("STORAGE_PATH"), data_dir / default_name)
        storage_quota_bytes = max(0, _env_int(_k("STORAGE_QUOTA_BYTES"), 0))

        retention_days = _env_int(_k("RETENTION_DAYS"), 30)
        if retention_days <= 0:
            retention_days = 30
        cleanup_on_start = _env_bool(_k("CLEANUP_ON_START"), True)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            console_enabled=console_enabled,
            data_dir=data_dir,
            storage_backend=storage_backend,
            storage_path=storage_path,
            storage_quota_bytes=storage_quota_bytes,
            retention_days=retention_days,
            cleanup_on_start=cleanup_on_start,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
