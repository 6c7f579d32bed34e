# src/todo_store/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

TaskStore depends on the KeyValueStorage Protocol instead of a concrete backend.
This keeps backends swappable and lets tests inject in-memory doubles.
"""

from collections.abc import Callable
from datetime import datetime
from typing import Protocol

Clock = Callable[[], datetime]
# Returns an aware "now"; TaskStore stamps deletions and ages the recycle bin with it.


class KeyValueStorage(Protocol):
    """
    Synchronous string key-value store (browser localStorage shaped).

    Contract:
    - get() returns None for a missing key
    - set() replaces the whole value
    - failures raise StorageError subclasses (StorageUnavailable, StorageQuotaExceeded)
    """

    def get(self, key: str) -> str | None: ...
    def set(self, key: str, value: str) -> None: ...
