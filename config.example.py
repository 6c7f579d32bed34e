# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "TODO_APP_NAME": "App display name (default: todo).",
    "TODO_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    # Connectors
    "TODO_CONSOLE_ENABLED": "Run the interactive console (true/false, default: true).",
    # Storage (gitignored)
    "TODO_DATA_DIR": "Local data + log directory (default: .local/todo).",
    "TODO_STORAGE_BACKEND": "file | sqlite | memory (default: file).",
    "TODO_STORAGE_PATH": (
        "Backend path (default: <data_dir>/storage.json, or <data_dir>/storage.sqlite3 for sqlite)."
    ),
    "TODO_STORAGE_QUOTA_BYTES": "Byte quota across all keys; writes past it fail (default: 0 = off).",
    # Recycle bin
    "TODO_RETENTION_DAYS": "Days a deleted task stays in the recycle bin (default: 30).",
    "TODO_CLEANUP_ON_START": "Purge expired recycle bin entries at start-up (true/false, default: true).",
}
