# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Use:
- .env (local, gitignored)
- config_local.py (local safe overrides, gitignored)

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "TASKTRACK_APP_NAME": "App display name (default: tasktrack).",
    "TASKTRACK_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    # Remote API
    "TASKTRACK_API_BASE_URL": "Task server base URL (default: http://localhost:8088/api).",
    "TASKTRACK_REQUEST_TIMEOUT_SECONDS": "Per-request transport timeout (default: 10).",
    # Paths (gitignored)
    "TASKTRACK_DATA_DIR": "Local data directory (default: .local/tasktrack).",
    "TASKTRACK_LOCAL_STORE_PATH": (
        "SQLite file holding the access token and view preferences "
        "(default: <data_dir>/local_storage.sqlite3)."
    ),
    "TASKTRACK_LOG_DIR": "Directory for tasktrack.log (default: <data_dir>).",
    # Front end
    "TASKTRACK_CONSOLE_ENABLED": "Run the interactive console (true/false).",
}
