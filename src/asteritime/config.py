# src/asteritime/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- No secrets required at import time (the API token may be empty until first request).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "ASTERI"

# Real environment wins over .env.
load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    data_dir: Path

    # ---- Backend ----
    api_base_url: str
    api_token: str
    http_timeout_seconds: float

    # ---- Lifecycle engine ----
    reconcile_enabled: bool
    reconcile_interval_seconds: float
    lock_delayed: bool

    # ---- Console ----
    console_enabled: bool

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "asteritime").strip() or "asteritime"
        log_level = _env(_k("LOG_LEVEL"), "INFO")
        data_dir = _env_path(_k("DATA_DIR"), Path(".local/asteritime"))

        api_base_url = _env(_k("API_BASE_URL"), "http://localhost:8080/api").strip().rstrip("/")
        api_token = _env(_k("API_TOKEN"), "").strip()
        http_timeout_seconds = max(1.0, _env_float(_k("HTTP_TIMEOUT_SECONDS"), 10.0))

        reconcile_enabled = _env_bool(_k("RECONCILE_ENABLED"), True)
        # The backend is not meant to be hammered; clamp to one tick per 5 seconds.
        reconcile_interval_seconds = max(5.0, _env_float(_k("RECONCILE_INTERVAL_SECONDS"), 60.0))
        lock_delayed = _env_bool(_k("LOCK_DELAYED"), True)

        console_enabled = _env_bool(_k("CONSOLE_ENABLED"), True)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            api_base_url=api_base_url,
            api_token=api_token,
            http_timeout_seconds=http_timeout_seconds,
            reconcile_enabled=reconcile_enabled,
            reconcile_interval_seconds=reconcile_interval_seconds,
            lock_delayed=lock_delayed,
            console_enabled=console_enabled,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
