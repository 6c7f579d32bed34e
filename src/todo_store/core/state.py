# src/todo_store/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..tasks.task_store import TaskStore
from .ports import KeyValueStorage


@dataclass
class AppState:
    # Store Settings on the state for easy access in commands/connectors.
    settings: Any

    storage: KeyValueStorage
    task_store: TaskStore
