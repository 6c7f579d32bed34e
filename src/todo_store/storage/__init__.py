# src/todo_store/storage/__init__.py

"""
Key-value backends implementing core.ports.KeyValueStorage.

open_storage() picks one from Settings:
- "memory": process-local dict (tests, throwaway sessions)
- "file": a single JSON object file on disk
- "sqlite": a kv table in a SQLite database
"""

from __future__ import annotations

import logging
from pathlib import Path

from ..core.ports import KeyValueStorage
from .json_file import JsonFileStorage
from .memory import MemoryStorage
from .sqlite import SqliteStorage

logger = logging.getLogger(__name__)

BACKENDS = ("file", "sqlite", "memory")


def open_storage(settings) -> KeyValueStorage:
    """Build the backend named by settings.storage_backend."""
    backend = str(getattr(settings, "storage_backend", "file")).strip().lower()
    quota = int(getattr(settings, "storage_quota_bytes", 0) or 0)
    quota_bytes = quota if quota > 0 else None

    if backend == "memory":
        logger.info("Using in-memory storage (nothing is persisted).")
        return MemoryStorage(quota_bytes=quota_bytes)

    path = Path(settings.storage_path)
    if backend == "sqlite":
        return SqliteStorage(path, quota_bytes=quota_bytes)
    if backend == "file":
        return JsonFileStorage(path, quota_bytes=quota_bytes)

    raise ValueError(f"unknown storage backend {backend!r}; expected one of {', '.join(BACKENDS)}")


__all__ = ["BACKENDS", "JsonFileStorage", "MemoryStorage", "SqliteStorage", "open_storage"]
