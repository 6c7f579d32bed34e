# src/todo_store/storage/json_file.py

from __future__ import annotations

import contextlib
import json
import logging
import os
from pathlib import Path

from ..core.errors import StorageQuotaExceeded, StorageUnavailable
from .memory import entry_size

logger = logging.getLogger(__name__)


class JsonFileStorage:
    """
    KeyValueStorage persisted as one JSON object file ({key: value, ...}).

    Every call re-reads the file, so two processes sharing a path see each
    other's writes (last write wins, no locking).

    Writes go to a sibling .tmp file and are moved into place with os.replace,
    so a crash mid-write leaves the previous file intact.
    """

    def __init__(self, path: str | Path, *, quota_bytes: int | None = None) -> None:
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._quota_bytes = quota_bytes
        logger.info("JsonFileStorage ready path=%s quota=%s", self._path, quota_bytes)

    @property
    def path(self) -> Path:
        return self._path

    # ---- low-level helpers ----

    def _read_all(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            raw = self._path.read_text("utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise StorageUnavailable(f"cannot read {self._path}: {e}") from e
        if not raw.strip():
            return {}
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, RecursionError) as e:
            raise StorageUnavailable(f"storage file {self._path} is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise StorageUnavailable(f"storage file {self._path} does not hold a JSON object")
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _write_all(self, data: dict[str, str]) -> None:
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        try:
            tmp.write_text(json.dumps(data, ensure_ascii=False, indent=2), "utf-8")
            os.replace(tmp, self._path)
        except (OSError, UnicodeEncodeError) as e:
            raise StorageUnavailable(f"cannot write {self._path}: {e}") from e
        with contextlib.suppress(Exception):
            # Task lists may be personal; keep the file private on disk.
            os.chmod(self._path, 0o600)

    # ---- KeyValueStorage ----

    def get(self, key: str) -> str | None:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read_all()
        if self._quota_bytes is not None:
            used = sum(entry_size(k, v) for k, v in data.items() if k != key)
            needed = used + entry_size(key, value)
            if needed > self._quota_bytes:
                raise StorageQuotaExceeded(key, needed, self._quota_bytes)
        data[key] = value
        self._write_all(data)
