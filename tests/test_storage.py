# tests/test_storage.py

from __future__ import annotations

import json
from pathlib import Path
from types import SimpleNamespace

import pytest

from todo_store.core.errors import StorageQuotaExceeded, StorageUnavailable
from todo_store.storage import JsonFileStorage, MemoryStorage, SqliteStorage, open_storage
from todo_store.tasks.task_models import Task
from todo_store.tasks.task_store import RECYCLED_TASKS_KEY, TASKS_KEY, TaskStore


@pytest.fixture(params=["memory", "file", "sqlite"])
def backend(request, tmp_path: Path):
    if request.param == "memory":
        return MemoryStorage()
    if request.param == "file":
        return JsonFileStorage(tmp_path / "storage.json")
    return SqliteStorage(tmp_path / "storage.sqlite3")


def test_get_set_overwrites(backend) -> None:
    assert backend.get("k") is None

    backend.set("k", "v1")
    backend.set("k", "v2")
    backend.set("other", "ü")
    assert backend.get("k") == "v2"
    assert backend.get("other") == "ü"


def test_lone_surrogate_titles_round_trip_through_every_backend(tmp_path: Path) -> None:
    for backend in (
        MemoryStorage(quota_bytes=4096),
        JsonFileStorage(tmp_path / "s.json"),
        SqliteStorage(tmp_path / "s.sqlite3"),
    ):
        store = TaskStore(backend)

        assert store.add_task(Task(id="1", extra={"title": "\ud800"}))
        assert store.delete_task("1")
        assert store.restore_task("1")
        assert [t.title for t in store.get_tasks()] == ["\ud800"]


@pytest.mark.parametrize("kind", ["file", "sqlite"])
def test_unencodable_value_is_unavailable_not_a_crash(kind: str, tmp_path: Path) -> None:
    backend = JsonFileStorage(tmp_path / "s.json") if kind == "file" else SqliteStorage(tmp_path / "s.sqlite3")
    backend.set("k", "fine")

    with pytest.raises(StorageUnavailable):
        backend.set("k", "bad \udc80 value")

    assert backend.get("k") == "fine"


def test_quota_counts_utf8_bytes_and_ignores_replaced_value(tmp_path: Path) -> None:
    for backend in (
        MemoryStorage(quota_bytes=10),
        JsonFileStorage(tmp_path / "q.json", quota_bytes=10),
        SqliteStorage(tmp_path / "q.sqlite3", quota_bytes=10),
    ):
        backend.set("k", "123456789")  # 1 + 9 bytes
        backend.set("k", "987654321")  # replaces, still 10
        with pytest.raises(StorageQuotaExceeded):
            backend.set("k", "12345678é")  # é is 2 bytes -> 11
        with pytest.raises(StorageQuotaExceeded):
            backend.set("x", "")
        assert backend.get("k") == "987654321"


def test_quota_exceeded_is_a_failed_save() -> None:
    store = TaskStore(MemoryStorage(quota_bytes=64))

    assert store.add_task(Task(id="1"))
    assert store.add_task(Task(id="2", extra={"title": "x" * 100})) is False
    assert [t.id for t in store.get_tasks()] == ["1"]


def test_json_file_storage_persists_across_instances(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "storage.json"
    JsonFileStorage(path).set("k", "v")

    assert JsonFileStorage(path).get("k") == "v"
    assert json.loads(path.read_text("utf-8")) == {"k": "v"}
    assert not path.with_suffix(".json.tmp").exists()


def test_json_file_storage_corrupt_file_is_unavailable(tmp_path: Path) -> None:
    path = tmp_path / "storage.json"
    path.write_text("[1, 2", "utf-8")
    backend = JsonFileStorage(path)

    with pytest.raises(StorageUnavailable):
        backend.get("k")

    store = TaskStore(backend)
    assert store.get_tasks() == []
    assert store.save_tasks([Task(id="1")]) is False


def test_json_file_storage_undecodable_bytes_are_unavailable(tmp_path: Path) -> None:
    path = tmp_path / "storage.json"
    path.write_bytes(b'{"todo_tasks": "[]", "x": "\xff\xfe"}')
    backend = JsonFileStorage(path)

    with pytest.raises(StorageUnavailable):
        backend.get(TASKS_KEY)

    store = TaskStore(backend)
    assert store.get_tasks() == []
    assert store.save_tasks([Task(id="1")]) is False


def test_json_file_storage_deeply_nested_file_is_unavailable(tmp_path: Path) -> None:
    path = tmp_path / "storage.json"
    path.write_text("[" * 200_000, "utf-8")

    with pytest.raises(StorageUnavailable):
        JsonFileStorage(path).get(TASKS_KEY)


def test_json_file_storage_empty_file_reads_as_empty(tmp_path: Path) -> None:
    path = tmp_path / "storage.json"
    path.write_text("", "utf-8")
    assert JsonFileStorage(path).get("k") is None


def test_sqlite_storage_persists_across_instances(tmp_path: Path) -> None:
    db = tmp_path / "storage.sqlite3"
    store = TaskStore(SqliteStorage(db))
    store.add_task(Task(id="1", due_date="2024-01-05"))
    store.delete_task("1")

    reopened = SqliteStorage(db)
    assert reopened.get(RECYCLED_TASKS_KEY)
    assert [t.id for t in TaskStore(reopened).get_recycled_tasks()] == ["1"]
    assert json.loads(reopened.get(TASKS_KEY) or "") == []


def test_open_storage_picks_backend(tmp_path: Path) -> None:
    def settings(backend: str, name: str = "s") -> SimpleNamespace:
        return SimpleNamespace(
            storage_backend=backend, storage_path=tmp_path / name, storage_quota_bytes=0
        )

    assert isinstance(open_storage(settings("memory")), MemoryStorage)
    assert isinstance(open_storage(settings("file", "s.json")), JsonFileStorage)
    assert isinstance(open_storage(settings("SQLite", "s.sqlite3")), SqliteStorage)
    with pytest.raises(ValueError):
        open_storage(settings("redis"))
