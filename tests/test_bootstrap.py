# tests/test_bootstrap.py

from __future__ import annotations

import json
from types import SimpleNamespace

from todo_store.cli.bootstrap import create_initial_state
from todo_store.storage import JsonFileStorage
from todo_store.tasks.task_store import RECYCLED_TASKS_KEY


def _seed_bin(settings: SimpleNamespace, deleted_at: list[str]) -> None:
    entries = [{"id": str(i), "completed": False, "deletedAt": ts} for i, ts in enumerate(deleted_at)]
    JsonFileStorage(settings.storage_path).set(RECYCLED_TASKS_KEY, json.dumps(entries))


def test_create_initial_state_wires_file_backend(settings: SimpleNamespace) -> None:
    state = create_initial_state(settings=settings)

    assert isinstance(state.storage, JsonFileStorage)
    assert state.task_store.get_tasks() == []
    assert state.task_store.retention_days == 30


def test_start_up_cleanup_purges_expired_entries(settings: SimpleNamespace) -> None:
    _seed_bin(settings, ["2000-01-01T00:00:00.000Z", "2999-01-01T00:00:00.000Z"])

    state = create_initial_state(settings=settings)

    assert [t.id for t in state.task_store.get_recycled_tasks()] == ["1"]


def test_start_up_cleanup_can_be_disabled(settings: SimpleNamespace) -> None:
    settings.cleanup_on_start = False
    _seed_bin(settings, ["2000-01-01T00:00:00.000Z"])

    state = create_initial_state(settings=settings)

    assert [t.id for t in state.task_store.get_recycled_tasks()] == ["0"]
