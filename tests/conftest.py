# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from todo_store.core.state import AppState
from todo_store.tasks.task_store import TaskStore

from .fakes import FailingStorage, FixedClock


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture()
def storage() -> FailingStorage:
    """In-memory backend; switch failures on per key via fail_reads / fail_writes."""
    return FailingStorage()


@pytest.fixture()
def store(storage: FailingStorage, clock: FixedClock) -> TaskStore:
    return TaskStore(storage, clock=clock)


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="todo-test",
        log_level="DEBUG",
        console_enabled=False,
        data_dir=tmp_path,
        storage_backend="file",
        storage_path=tmp_path / "storage.json",
        storage_quota_bytes=0,
        retention_days=30,
        cleanup_on_start=True,
    )


@pytest.fixture()
def state(settings: SimpleNamespace, storage: FailingStorage, store: TaskStore) -> AppState:
    """AppState wired to the in-memory backend and fixed clock."""
    return AppState(settings=settings, storage=storage, task_store=store)
