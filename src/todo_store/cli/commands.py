# src/todo_store/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from typing import cast

from ..core.state import AppState
from ..tasks.task_api import add_simple_task, is_valid_date, resolve_task_id
from ..tasks.task_models import Task

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except Exception:
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def format_task(pos: int, task: Task) -> str:
    mark = "x" if task.completed else " "
    due = f" (due {task.due_date})" if task.due_date else ""
    deleted = f" [deleted {task.deleted_at}]" if task.deleted_at else ""
    return f"{pos}. [{mark}] {task.title or '(untitled)'}{due}{deleted}  #{task.id[:8]}"


def format_listing(header: str, tasks: list[Task], empty: str) -> str:
    if not tasks:
        return empty
    lines = [header]
    lines.extend(format_task(i, t) for i, t in enumerate(tasks, start=1))
    return "\n".join(lines)


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    s = state.settings
    store = state.task_store
    return (
        "Status:\n"
        f"  Backend: {getattr(s, 'storage_backend', '?')} ({getattr(s, 'storage_path', '-')})\n"
        f"  Active tasks: {len(store.get_tasks())}\n"
        f"  Recycle bin: {len(store.get_recycled_tasks())} (kept {store.retention_days} days)"
    )


def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add buy milk            -> task without a due date
    /add buy milk @2024-01-05 -> task due on that date
    """
    due_date: str | None = None
    words: list[str] = []
    for a in args:
        if a.startswith("@") and len(a) > 1:
            due_date = a[1:]
        else:
            words.append(a)

    title = " ".join(words).strip()
    if not title:
        return "Usage: /add <title> [@YYYY-MM-DD]"
    if due_date is not None and not is_valid_date(due_date):
        return f"Invalid date: {due_date}. Use YYYY-MM-DD."

    task = add_simple_task(state, title, due_date=due_date)
    if task is None:
        return "Could not save the task (see log)."
    return f"Added: {title}  #{task.id[:8]}"


def cmd_list(state: AppState, args: list[str]) -> str:
    return format_listing("Tasks:", state.task_store.get_tasks(), "No tasks.")


def _resolve_active(state: AppState, args: list[str]) -> str | None:
    if not args:
        return None
    return resolve_task_id(state.task_store.get_tasks(), args[0])


def _resolve_recycled(state: AppState, args: list[str]) -> str | None:
    if not args:
        return None
    return resolve_task_id(state.task_store.get_recycled_tasks(), args[0])


def cmd_done(state: AppState, args: list[str]) -> str:
    task_id = _resolve_active(state, args)
    if task_id is None:
        return "Usage: /done <n|id>  (no such task)"
    if not state.task_store.toggle_task_status(task_id):
        return "Could not update the task."
    return "Toggled."


def cmd_edit(state: AppState, args: list[str]) -> str:
    task_id = _resolve_active(state, args)
    title = " ".join(args[1:]).strip()
    if task_id is None or not title:
        return "Usage: /edit <n|id> <new title>"
    current = next(t for t in state.task_store.get_tasks() if t.id == task_id)
    extra = dict(current.extra)
    extra["title"] = title
    if not state.task_store.update_task(task_id, current.with_changes(extra=extra)):
        return "Could not update the task."
    return "Updated."


def cmd_due(state: AppState, args: list[str]) -> str:
    """
    /due <n|id> 2024-01-05 -> set due date
    /due <n|id> -          -> clear due date
    """
    task_id = _resolve_active(state, args)
    if task_id is None or len(args) < 2:
        return "Usage: /due <n|id> <YYYY-MM-DD|->"
    raw = args[1]
    due_date = None if raw == "-" else raw
    if due_date is not None and not is_valid_date(due_date):
        return f"Invalid date: {raw}. Use YYYY-MM-DD."
    current = next(t for t in state.task_store.get_tasks() if t.id == task_id)
    if not state.task_store.update_task(task_id, current.with_changes(due_date=due_date)):
        return "Could not update the task."
    return "Due date cleared." if due_date is None else f"Due {due_date}."


def cmd_del(state: AppState, args: list[str]) -> str:
    task_id = _resolve_active(state, args)
    if task_id is None:
        return "Usage: /del <n|id>  (no such task)"
    if not state.task_store.delete_task(task_id):
        return "Could not delete the task (see log)."
    return f"Moved to recycle bin. Restore within {state.task_store.retention_days} days with /restore."


def cmd_bin(state: AppState, args: list[str]) -> str:
    return format_listing("Recycle bin:", state.task_store.get_recycled_tasks(), "Recycle bin is empty.")


def cmd_restore(state: AppState, args: list[str]) -> str:
    task_id = _resolve_recycled(state, args)
    if task_id is None:
        return "Usage: /restore <n|id>  (no such task in the recycle bin)"
    if not state.task_store.restore_task(task_id):
        return "Could not restore the task (see log)."
    return "Restored."


def cmd_purge(state: AppState, args: list[str]) -> str:
    task_id = _resolve_recycled(state, args)
    if task_id is None:
        return "Usage: /purge <n|id>  (no such task in the recycle bin)"
    if not state.task_store.permanently_delete_task(task_id):
        return "Could not delete the task (see log)."
    return "Permanently deleted."


def cmd_empty(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    count = len(state.task_store.get_recycled_tasks())
    if not count:
        return "Recycle bin is already empty."
    if emit:
        emit(f"Emptying recycle bin ({count} task(s))...")
    if not state.task_store.empty_recycle_bin():
        return "Could not empty the recycle bin (see log)."
    return "Recycle bin emptied."


def cmd_cleanup(state: AppState, args: list[str]) -> str:
    purged = state.task_store.cleanup_recycle_bin()
    return f"Removed {purged} expired task(s) from the recycle bin."


def cmd_dates(state: AppState, args: list[str]) -> str:
    dates = sorted(state.task_store.get_dates_with_tasks())
    if not dates:
        return "No tasks have a due date."
    return "Dates with tasks:\n" + "\n".join(f"  {d}" for d in dates)


def cmd_on(state: AppState, args: list[str]) -> str:
    if not args or not is_valid_date(args[0]):
        return "Usage: /on <YYYY-MM-DD>"
    day = args[0]
    return format_listing(f"Tasks due {day}:", state.task_store.get_tasks_by_date(day), f"No tasks due {day}.")


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show backend and collection sizes.")
registry.register("add", cmd_add, help_text="Add a task: /add <title> [@YYYY-MM-DD].", aliases=["a"])
registry.register("list", cmd_list, help_text="List active tasks.", aliases=["ls", "l"])
registry.register("done", cmd_done, help_text="Toggle completion: /done <n|id>.", aliases=["x"])
registry.register("edit", cmd_edit, help_text="Rename a task: /edit <n|id> <title>.")
registry.register("due", cmd_due, help_text="Set or clear a due date: /due <n|id> <YYYY-MM-DD|->.")
registry.register("del", cmd_del, help_text="Move a task to the recycle bin: /del <n|id>.", aliases=["rm"])
registry.register("bin", cmd_bin, help_text="List the recycle bin.")
registry.register("restore", cmd_restore, help_text="Restore from the recycle bin: /restore <n|id>.")
registry.register("purge", cmd_purge, help_text="Delete from the recycle bin for good: /purge <n|id>.")
registry.register("empty", cmd_empty, help_text="Empty the recycle bin.")
registry.register("cleanup", cmd_cleanup, help_text="Drop recycle bin entries past the retention window.")
registry.register("dates", cmd_dates, help_text="List dates that have tasks.")
registry.register("on", cmd_on, help_text="List tasks due on a date: /on <YYYY-MM-DD>.")
