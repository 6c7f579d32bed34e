# src/todo_store/storage/sqlite.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
from pathlib import Path

from ..core.errors import StorageQuotaExceeded, StorageUnavailable

logger = logging.getLogger(__name__)


class SqliteStorage:
    """
    KeyValueStorage backed by a single SQLite table:

        kv(key TEXT PRIMARY KEY, value TEXT NOT NULL)

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path = "storage.sqlite3", *, quota_bytes: int | None = None) -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._quota_bytes = quota_bytes
        self._ensure_schema()
        logger.info("SqliteStorage ready db=%s quota=%s", self._db_path, quota_bytes)

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        try:
            conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        except sqlite3.Error as e:
            raise StorageUnavailable(f"cannot open {self._db_path}: {e}") from e
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(Exception):
            conn.execute("PRAGMA journal_mode=WAL")

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
                """
            )
            conn.commit()
        except sqlite3.Error as e:
            raise StorageUnavailable(f"cannot create schema in {self._db_path}: {e}") from e
        finally:
            conn.close()

    # ---- KeyValueStorage ----

    def get(self, key: str) -> str | None:
        conn = self._get_conn()
        try:
            cur = conn.execute("SELECT value FROM kv WHERE key = ?", (key,))
            row = cur.fetchone()
            return None if row is None else str(row[0])
        except sqlite3.Error as e:
            raise StorageUnavailable(f"cannot read key={key!r}: {e}") from e
        finally:
            conn.close()

    def set(self, key: str, value: str) -> None:
        conn = self._get_conn()
        try:
            if self._quota_bytes is not None:
                cur = conn.execute(
                    "SELECT COALESCE(SUM(LENGTH(CAST(key AS BLOB)) + LENGTH(CAST(value AS BLOB))), 0) "
                    "FROM kv WHERE key != ?",
                    (key,),
                )
                (used,) = cur.fetchone()
                needed = int(used) + len(key.encode("utf-8")) + len(value.encode("utf-8"))
                if needed > self._quota_bytes:
                    raise StorageQuotaExceeded(key, needed, self._quota_bytes)
            conn.execute(
                "INSERT INTO kv(key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (key, value),
            )
            conn.commit()
        except (sqlite3.Error, UnicodeEncodeError) as e:
            raise StorageUnavailable(f"cannot write key={key!r}: {e}") from e
        finally:
            conn.close()

