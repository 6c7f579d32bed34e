# src/todo_store/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import Any

from ..core.errors import TaskValidationError

# Wire names of the fields the store understands. Everything else is opaque.
ID_KEY = "id"
COMPLETED_KEY = "completed"
DUE_DATE_KEY = "dueDate"
DELETED_AT_KEY = "deletedAt"

_KNOWN_KEYS = frozenset({ID_KEY, COMPLETED_KEY, DUE_DATE_KEY, DELETED_AT_KEY})


def format_timestamp(ts: datetime) -> str:
    """UTC ISO-8601 with milliseconds and a Z suffix: 2024-01-05T12:00:00.000Z."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=UTC)
    return ts.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(raw: str | None) -> datetime | None:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC. None if unparseable."""
    if not raw:
        return None
    try:
        ts = datetime.fromisoformat(raw.strip())
    except ValueError:
        return None
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=UTC)
    return ts


@dataclass(slots=True)
class Task:
    """
    A task as stored in either collection.

    Fields:
        id: unique across active and recycled tasks.
        completed: done flag.
        due_date: optional "YYYY-MM-DD" (stored as dueDate).
        deleted_at: ISO-8601 timestamp, set only while the task sits in the recycle bin
            (stored as deletedAt).
        extra: every other stored key (title, description, createdAt, ...), written back verbatim.
    """

    id: str
    completed: bool = False
    due_date: str | None = None
    deleted_at: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def title(self) -> str:
        return str(self.extra.get("title") or "")

    def with_changes(self, **changes: Any) -> Task:
        """Copy with fields replaced; extra is copied, never shared."""
        changes.setdefault("extra", dict(self.extra))
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {ID_KEY: self.id, COMPLETED_KEY: self.completed}
        out.update(self.extra)
        if self.due_date is not None:
            out[DUE_DATE_KEY] = self.due_date
        if self.deleted_at is not None:
            out[DELETED_AT_KEY] = self.deleted_at
        return out

    @classmethod
    def from_dict(cls, data: Any) -> Task:
        """Validate one stored entry. Raises TaskValidationError."""
        if not isinstance(data, dict):
            raise TaskValidationError(f"task entry must be an object, got {type(data).__name__}")

        task_id = data.get(ID_KEY)
        if not isinstance(task_id, str) or not task_id:
            raise TaskValidationError(f"task entry has no string id: {task_id!r}")

        completed = data.get(COMPLETED_KEY, False)
        if not isinstance(completed, bool):
            raise TaskValidationError(f"task {task_id}: completed must be a bool, got {completed!r}")

        due_date = data.get(DUE_DATE_KEY)
        if due_date is not None and not isinstance(due_date, str):
            raise TaskValidationError(f"task {task_id}: dueDate must be a string, got {due_date!r}")

        deleted_at = data.get(DELETED_AT_KEY)
        if deleted_at is not None and not isinstance(deleted_at, str):
            raise TaskValidationError(f"task {task_id}: deletedAt must be a string, got {deleted_at!r}")

        return cls(
            id=task_id,
            completed=completed,
            due_date=due_date,
            deleted_at=deleted_at,
            extra={k: v for k, v in data.items() if k not in _KNOWN_KEYS},
        )
