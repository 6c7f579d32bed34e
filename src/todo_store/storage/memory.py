# src/todo_store/storage/memory.py

from __future__ import annotations

from ..core.errors import StorageQuotaExceeded


def entry_size(key: str, value: str) -> int:
    """Bytes an entry counts against a quota (UTF-8 key + value; lone surrogates count as 3)."""
    return len(key.encode("utf-8", "surrogatepass")) + len(value.encode("utf-8", "surrogatepass"))


class MemoryStorage:
    """Dict-backed KeyValueStorage. Nothing survives the process."""

    def __init__(self, initial: dict[str, str] | None = None, *, quota_bytes: int | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})
        self._quota_bytes = quota_bytes

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if self._quota_bytes is not None:
            used = sum(entry_size(k, v) for k, v in self._data.items() if k != key)
            needed = used + entry_size(key, value)
            if needed > self._quota_bytes:
                raise StorageQuotaExceeded(key, needed, self._quota_bytes)
        self._data[key] = value

