# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Do NOT commit real API tokens. Put them in .env (local, gitignored).

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "ASTERI_APP_NAME": "App display name (default: asteritime).",
    "ASTERI_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    "ASTERI_DATA_DIR": "Local data directory for the log file (default: .local/asteritime).",
    # Backend
    "ASTERI_API_BASE_URL": "Task backend base URL (default: http://localhost:8080/api).",
    "ASTERI_API_TOKEN": "Bearer token sent on every request (obtained by logging in elsewhere).",
    "ASTERI_HTTP_TIMEOUT_SECONDS": "Per-request timeout (default: 10, minimum 1).",
    # Lifecycle engine
    "ASTERI_RECONCILE_ENABLED": "Run automatic status transitions in the background (true/false).",
    "ASTERI_RECONCILE_INTERVAL_SECONDS": "Seconds between reconciliation ticks (default: 60, minimum 5).",
    "ASTERI_LOCK_DELAYED": "Refuse manual changes to DELAY tasks, like DONE/CANCEL (default: true).",
    # Console
    "ASTERI_CONSOLE_ENABLED": "Run the interactive console (true/false).",
}
