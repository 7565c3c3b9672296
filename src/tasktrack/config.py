# src/tasktrack/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

One Settings object for the whole client. Nothing here requires credentials:
the access token lives in local storage, not in the environment.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

ENV_PREFIX = "TASKTRACK"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    """Load .env locally if python-dotenv is installed. Safe no-op otherwise."""
    try:
        from dotenv import load_dotenv  # type: ignore
    except Exception:
        return
    load_dotenv(override=False)


_load_dotenv_if_available()


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

    # ---- Remote API ----
    api_base_url: str
    request_timeout_seconds: float

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    local_store_path: Path
    log_dir: Path

    # ---- Front end ----
    console_enabled: bool

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "tasktrack") or "tasktrack"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        api_base_url = _env(_k("API_BASE_URL"), "http://localhost:8088/api").strip().rstrip("/")
        request_timeout_seconds = _env_float(_k("REQUEST_TIMEOUT_SECONDS"), 10.0)
        if request_timeout_seconds <= 0:
            request_timeout_seconds = 10.0

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/tasktrack"))
        local_store_path = _env_path(_k("LOCAL_STORE_PATH"), data_dir / "local_storage.sqlite3")
        log_dir = _env_path(_k("LOG_DIR"), data_dir)

        console_enabled = _env_bool(_k("CONSOLE_ENABLED"), True)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            api_base_url=api_base_url,
            request_timeout_seconds=request_timeout_seconds,
            data_dir=data_dir,
            local_store_path=local_store_path,
            log_dir=log_dir,
            console_enabled=console_enabled,
        )


SETTINGS = Settings.from_env()


# ---- Optional local overrides (never committed) ----
# Prefer .env; use config_local.py only for safe overrides.
def _apply_local_overrides(settings: Settings) -> None:
    try:
        import config_local as _config_local  # type: ignore
    except ModuleNotFoundError as e:
        if e.name != "config_local":
            logger.warning("config_local.py failed to import; ignoring it", exc_info=True)
        return
    except Exception:
        logger.warning("config_local.py failed to load; ignoring it", exc_info=True)
        return

    if hasattr(_config_local, "API_BASE_URL"):
        object.__setattr__(settings, "api_base_url", str(_config_local.API_BASE_URL).rstrip("/"))  # type: ignore[misc]
    if hasattr(_config_local, "LOG_LEVEL"):
        object.__setattr__(settings, "log_level", str(_config_local.LOG_LEVEL))  # type: ignore[misc]


_apply_local_overrides(SETTINGS)


def get_settings() -> Settings:
    return SETTINGS
