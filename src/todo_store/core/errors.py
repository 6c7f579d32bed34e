# src/todo_store/core/errors.py

"""
Error types raised by storage backends and the task schema.

Backends raise these; TaskStore catches them at the point of storage access
and turns them into empty collections or False results.
"""

from __future__ import annotations


class StorageError(Exception):
    """Base class for key-value backend failures."""


class StorageUnavailable(StorageError):
    """The backend could not be read or written."""


class StorageQuotaExceeded(StorageUnavailable):
    """A write would push the backend over its configured byte quota."""

    def __init__(self, key: str, needed: int, quota: int) -> None:
        super().__init__(f"quota exceeded writing key={key!r}: {needed} > {quota} bytes")
        self.key = key
        self.needed = needed
        self.quota = quota


class SerializationError(ValueError):
    """A stored collection is not valid JSON, or a collection cannot be encoded."""


class TaskValidationError(ValueError):
    """A single stored entry does not match the Task schema."""
