# src/todo_store/logging_setup.py

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_FILE_NAME = "todo.log"

# Loggers whose INFO/DEBUG lines describe backend plumbing, not user actions.
_QUIET_ON_CONSOLE = ("todo_store.storage.", "todo_store.cli.bootstrap")

# Set on handlers installed here so a second setup_logging() replaces only them.
_HANDLER_MARK = "_todo_store_handler"


class _TaskConsoleFilter(logging.Filter):
    """
    Console shows what the user did to their tasks.

    Backend and bootstrap chatter needs WARNING, anything outside todo_store
    (py.warnings included) needs ERROR.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if not name.startswith("todo_store."):
            return record.levelno >= logging.ERROR
        if name.startswith(_QUIET_ON_CONSOLE):
            return record.levelno >= logging.WARNING
        return True


def _mark(handler: logging.Handler) -> logging.Handler:
    setattr(handler, _HANDLER_MARK, True)
    return handler


def setup_logging(
    *,
    log_dir: str | Path = ".local/todo",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
    max_bytes: int = 1_000_000,
    backup_count: int = 3,
) -> Path:
    """
    Install a filtered stderr handler and a rotating file handler on the root logger.

    Safe to call again (e.g. after settings change): handlers from an earlier
    call are closed and replaced, handlers installed by others are left alone.
    Returns the path of the log file.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(min(console_level, file_level))

    for h in list(root.handlers):
        if getattr(h, _HANDLER_MARK, False):
            root.removeHandler(h)
            h.close()

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = _mark(logging.StreamHandler(sys.stderr))
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(_TaskConsoleFilter())
    root.addHandler(console)

    file_handler = _mark(
        RotatingFileHandler(log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8")
    )
    file_handler.setLevel(file_level)
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    logging.captureWarnings(True)
    return log_file
