# src/todo_store/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- opens the configured key-value backend and wires TaskStore into AppState,
- ages the recycle bin once at start-up (optional).
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.state import AppState
from ..storage import open_storage
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    if settings.storage_backend != "memory":
        settings.storage_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    storage = open_storage(settings)
    task_store = TaskStore(storage, retention_days=settings.retention_days)

    state = AppState(settings=settings, storage=storage, task_store=task_store)

    if getattr(settings, "cleanup_on_start", True):
        purged = task_store.cleanup_recycle_bin()
        if purged:
            logger.info("Start-up cleanup removed %d expired task(s) from the recycle bin.", purged)

    logger.info(
        "State ready backend=%s active=%d recycled=%d",
        settings.storage_backend,
        len(task_store.get_tasks()),
        len(task_store.get_recycled_tasks()),
    )
    return state
