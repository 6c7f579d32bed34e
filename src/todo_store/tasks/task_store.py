# src/todo_store/tasks/task_store.py

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from datetime import UTC, datetime, timedelta
from typing import Any

from ..core.errors import SerializationError, StorageError, TaskValidationError
from ..core.ports import Clock, KeyValueStorage
from .task_models import Task, format_timestamp, parse_timestamp

logger = logging.getLogger(__name__)

TASKS_KEY = "todo_tasks"
RECYCLED_TASKS_KEY = "todo_recycled_tasks"
RECYCLED_DAYS = 30  # days a task stays in the recycle bin

_ONE_DAY = timedelta(days=1)


def _utc_now() -> datetime:
    return datetime.now(UTC)


class TaskStore:
    """
    Task list + recycle bin persisted as two JSON arrays in a key-value store.

    Every operation is a full read-modify-write of the collection(s) it touches:
    no partial updates, no caching, last write wins.

    Failure policy:
    - storage and JSON errors are caught here, logged, and turned into
      [] (reads) or False (writes); nothing storage-related escapes to callers
    - entries that fail the Task schema are hidden from callers with a warning,
      but written back verbatim so a later write does not erase them
      (empty_recycle_bin is the one write that drops them)

    Write ordering (moving a task between collections):
    - the destination collection is written first, the source second
    - if the first write fails, the source is left untouched
    so an interrupted move leaves the task in both collections, never in neither.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        *,
        tasks_key: str = TASKS_KEY,
        recycled_key: str = RECYCLED_TASKS_KEY,
        retention_days: int = RECYCLED_DAYS,
        clock: Clock | None = None,
    ) -> None:
        if tasks_key == recycled_key:
            raise ValueError("tasks_key and recycled_key must differ")
        self._storage = storage
        self._tasks_key = tasks_key
        self._recycled_key = recycled_key
        self._retention_days = int(retention_days)
        self._clock = clock or _utc_now
        # Raw entries from the last read of each key that failed the Task schema;
        # appended unchanged on the next write of that key.
        self._rejected: dict[str, list[Any]] = {}
        logger.debug(
            "TaskStore ready storage=%s keys=(%s, %s) retention_days=%s",
            type(storage).__name__,
            tasks_key,
            recycled_key,
            self._retention_days,
        )

    @property
    def retention_days(self) -> int:
        return self._retention_days

    # ---- low-level helpers ----

    def _now(self) -> datetime:
        now = self._clock()
        return now if now.tzinfo is not None else now.replace(tzinfo=UTC)

    @staticmethod
    def _decode(raw: str) -> tuple[list[Task], list[Any]]:
        """Parse a stored array into (valid tasks, raw entries that failed the schema)."""
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, RecursionError) as e:
            raise SerializationError(f"stored value is not valid JSON: {e}") from e
        if not isinstance(data, list):
            raise SerializationError(f"stored value is not a JSON array (got {type(data).__name__})")

        tasks: list[Task] = []
        rejected: list[Any] = []
        for pos, entry in enumerate(data):
            try:
                tasks.append(Task.from_dict(entry))
            except TaskValidationError as e:
                logger.warning("Skipping invalid task entry #%d (kept in storage): %s", pos, e)
                rejected.append(entry)
        return tasks, rejected

    @staticmethod
    def _encode(tasks: Iterable[Task], rejected: Iterable[Any] = ()) -> str:
        # ASCII output: lone surrogates in opaque fields become \ud800 escapes
        # instead of failing the backend's UTF-8 encode.
        try:
            return json.dumps([t.to_dict() for t in tasks] + list(rejected))
        except (TypeError, ValueError, RecursionError) as e:
            raise SerializationError(f"cannot encode tasks: {e}") from e

    def _load(self, key: str) -> list[Task]:
        self._rejected[key] = []
        try:
            raw = self._storage.get(key)
            if not raw:
                return []
            tasks, self._rejected[key] = self._decode(raw)
            return tasks
        except (StorageError, SerializationError):
            logger.exception("Error getting %s from storage.", key)
            return []

    def _save(self, key: str, tasks: Iterable[Task], *, keep_rejected: bool = True) -> bool:
        rejected = self._rejected.get(key, []) if keep_rejected else []
        try:
            self._storage.set(key, self._encode(tasks, rejected))
        except (StorageError, SerializationError):
            logger.exception("Error saving %s to storage.", key)
            return False
        if not keep_rejected:
            self._rejected[key] = []
        return True

    @staticmethod
    def _index_of(tasks: list[Task], task_id: str) -> int:
        for i, t in enumerate(tasks):
            if t.id == task_id:
                return i
        return -1

    # ---- active tasks ----

    def get_tasks(self) -> list[Task]:
        """Active tasks in display order ([] if storage is missing, corrupt or unreadable)."""
        return self._load(self._tasks_key)

    def save_tasks(self, tasks: Iterable[Task]) -> bool:
        return self._save(self._tasks_key, tasks)

    def add_task(self, task: Task) -> bool:
        """Append to the active list. Refuses (False) an id that already exists in either collection."""
        tasks = self.get_tasks()
        if self._index_of(tasks, task.id) != -1 or self._index_of(self.get_recycled_tasks(), task.id) != -1:
            logger.warning("add_task: id=%s already exists; not added.", task.id)
            return False
        tasks.append(task)
        ok = self.save_tasks(tasks)
        if ok:
            logger.debug("Task added id=%s due=%s", task.id, task.due_date)
        return ok

    def update_task(self, task_id: str, updated_task: Task) -> bool:
        """Replace the active task with this id at its current position. Unknown id -> False, no write."""
        tasks = self.get_tasks()
        index = self._index_of(tasks, task_id)
        if index == -1:
            return False
        tasks[index] = updated_task
        ok = self.save_tasks(tasks)
        if ok:
            logger.debug("Task updated id=%s", task_id)
        return ok

    def toggle_task_status(self, task_id: str) -> bool:
        tasks = self.get_tasks()
        index = self._index_of(tasks, task_id)
        if index == -1:
            return False
        task = tasks[index]
        task.completed = not task.completed
        ok = self.save_tasks(tasks)
        if ok:
            logger.debug("Task toggled id=%s completed=%s", task_id, task.completed)
        return ok

    def delete_task(self, task_id: str) -> bool:
        """
        Move an active task into the recycle bin, stamped with deletedAt = now.

        The bin is written before the active list. If the bin write fails
        the active list is not touched and False is returned.
        """
        tasks = self.get_tasks()
        index = self._index_of(tasks, task_id)
        if index == -1:
            return False

        task = tasks.pop(index)
        task.deleted_at = format_timestamp(self._now())

        recycled = [t for t in self.get_recycled_tasks() if t.id != task_id]
        recycled.append(task)
        if not self.save_recycled_tasks(recycled):
            logger.error("delete_task: recycle bin write failed; id=%s kept in active tasks.", task_id)
            return False

        ok = self.save_tasks(tasks)
        if ok:
            logger.debug("Task moved to recycle bin id=%s deleted_at=%s", task_id, task.deleted_at)
        else:
            logger.error("delete_task: active list write failed; id=%s is now in both collections.", task_id)
        return ok

    # ---- recycle bin ----

    def get_recycled_tasks(self) -> list[Task]:
        return self._load(self._recycled_key)

    def save_recycled_tasks(self, tasks: Iterable[Task]) -> bool:
        return self._save(self._recycled_key, tasks)

    def restore_task(self, task_id: str) -> bool:
        """
        Move a recycled task back to the end of the active list, clearing deletedAt.

        The active list is written before the bin. If an active task with the
        same id already exists (left by an interrupted delete) only the bin copy is dropped.
        """
        recycled = self.get_recycled_tasks()
        index = self._index_of(recycled, task_id)
        if index == -1:
            return False

        task = recycled.pop(index)
        task.deleted_at = None

        tasks = self.get_tasks()
        if self._index_of(tasks, task_id) == -1:
            tasks.append(task)
            if not self.save_tasks(tasks):
                logger.error("restore_task: active list write failed; id=%s kept in recycle bin.", task_id)
                return False
        else:
            logger.warning("restore_task: id=%s already active; dropping recycle bin copy.", task_id)

        ok = self.save_recycled_tasks(recycled)
        if ok:
            logger.debug("Task restored id=%s", task_id)
        return ok

    def permanently_delete_task(self, task_id: str) -> bool:
        recycled = self.get_recycled_tasks()
        index = self._index_of(recycled, task_id)
        if index == -1:
            return False
        recycled.pop(index)
        ok = self.save_recycled_tasks(recycled)
        if ok:
            logger.debug("Task permanently deleted id=%s", task_id)
        return ok

    def empty_recycle_bin(self) -> bool:
        return self._save(self._recycled_key, [], keep_rejected=False)

    def days_in_bin(self, task: Task, now: datetime | None = None) -> int | None:
        """Whole days since deletion (floored); None when deletedAt is missing or unparseable."""
        deleted_at = parse_timestamp(task.deleted_at)
        if deleted_at is None:
            return None
        if now is None:
            now = self._now()
        return (now - deleted_at) // _ONE_DAY

    def cleanup_recycle_bin(self) -> int:
        """
        Purge recycled tasks that have spent retention_days or more in the bin.

        Elapsed days are floored, so a task deleted 29 days 23 hours ago is kept.
        Tasks with a missing or unparseable deletedAt are purged.
        Writes only if something was removed. Returns the number purged.
        """
        recycled = self.get_recycled_tasks()
        now = self._now()

        kept: list[Task] = []
        for task in recycled:
            days = self.days_in_bin(task, now)
            if days is not None and days < self._retention_days:
                kept.append(task)

        removed = len(recycled) - len(kept)
        if not removed:
            return 0
        if not self.save_recycled_tasks(kept):
            return 0
        logger.info("Recycle bin cleanup: purged %d task(s) older than %d days.", removed, self._retention_days)
        return removed

    # ---- date queries ----

    def get_dates_with_tasks(self) -> list[str]:
        """Distinct non-empty due dates of active tasks (no particular order)."""
        return list({t.due_date for t in self.get_tasks() if t.due_date})

    def get_tasks_by_date(self, date_string: str) -> list[Task]:
        return [t for t in self.get_tasks() if t.due_date == date_string]
