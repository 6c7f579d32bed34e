# src/todo_store/tasks/task_api.py

from __future__ import annotations

import logging
import re
import uuid
from datetime import UTC, date, datetime

from ..core.state import AppState
from .task_models import Task, format_timestamp

logger = logging.getLogger(__name__)

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def is_valid_date(value: str) -> bool:
    """True for a real calendar date in YYYY-MM-DD form."""
    if not DATE_RE.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def new_task(
    title: str,
    *,
    due_date: str | None = None,
    description: str = "",
    priority: str = "medium",
    created_at: str | None = None,
) -> Task:
    """
    Convenience helper: build a fresh (not yet stored) task.
    The id is a random hex string; createdAt defaults to now (UTC).
    """
    title = title.strip()
    if not title:
        raise ValueError("title is required")
    if due_date is not None and not is_valid_date(due_date):
        raise ValueError(f"due date must be YYYY-MM-DD, got {due_date!r}")

    return Task(
        id=uuid.uuid4().hex,
        completed=False,
        due_date=due_date,
        extra={
            "title": title,
            "description": description,
            "priority": priority,
            "createdAt": created_at or format_timestamp(datetime.now(UTC)),
        },
    )


def add_simple_task(state: AppState, title: str, *, due_date: str | None = None) -> Task | None:
    """Create and store a task. Returns it, or None if the store refused the write."""
    task = new_task(title, due_date=due_date)
    if not state.task_store.add_task(task):
        logger.warning("add_simple_task: store rejected task title=%r", title)
        return None
    return task


def resolve_task_id(tasks: list[Task], ref: str) -> str | None:
    """
    Resolve a user-typed reference to a task id.

    Accepts the full id, a unique id prefix, or a 1-based position in `tasks`.
    """
    ref = ref.strip()
    if not ref:
        return None
    for t in tasks:
        if t.id == ref:
            return t.id
    if ref.isdigit():
        pos = int(ref)
        if 1 <= pos <= len(tasks):
            return tasks[pos - 1].id
    matches = [t.id for t in tasks if t.id.startswith(ref)]
    if len(matches) == 1:
        return matches[0]
    return None
