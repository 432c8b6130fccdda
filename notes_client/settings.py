from __future__ import annotations

import os
from pathlib import Path

APP_NAME = "notes-client"
LOGGER_NAME = "notes_client"

# Form limits, shared by the editor and the store.
TITLE_MAX_LEN = 100
CONTENT_MAX_LEN = 2000

NOTES_STORAGE_KEY = "notes"


def get_app_home() -> Path:
    """Data directory (~/.notes-client or NOTES_CLIENT_HOME)."""
    if env_home := os.environ.get("NOTES_CLIENT_HOME"):
        return Path(env_home)
    return Path.home() / f".{APP_NAME}"


def get_log_dir() -> Path:
    return get_app_home() / "logs"


def get_log_path() -> Path:
    return get_log_dir() / f"{APP_NAME}.log"


def get_data_dir() -> Path:
    return get_app_home() / "data"


def get_recovery_dir() -> Path:
    return get_app_home() / "recovery"


def get_settings_path() -> Path:
    return get_app_home() / "settings.ini"
