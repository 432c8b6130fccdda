from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from PySide6.QtCore import QSettings

from notes_client.settings import get_data_dir, get_settings_path


@dataclass(frozen=True)
class SettingsKeys:
    STORAGE_BACKEND: str = "storage/backend"
    STORAGE_DIR: str = "storage/dir"
    STORAGE_STRICT: str = "storage/strict"
    LAST_NOTE: str = "nav/last_note"


BACKENDS = ("file", "qsettings")


@dataclass(frozen=True)
class AppConfig:
    backend: str
    data_dir: Path
    strict_persistence: bool = False


def open_settings(path: Path | None = None) -> QSettings:
    """QSettings backed by an INI file, so no QCoreApplication is required."""
    path = Path(path) if path is not None else get_settings_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    return QSettings(str(path), QSettings.Format.IniFormat)


def get_str(settings: QSettings, key: str, default: str) -> str:
    try:
        val = settings.value(key, default)
        return str(val) if val is not None else default
    except Exception:
        return default


def get_bool(settings: QSettings, key: str, default: bool) -> bool:
    # INI files hand booleans back as "true"/"false" strings.
    try:
        val = settings.value(key, default)
    except Exception:
        return default
    if isinstance(val, bool):
        return val
    if isinstance(val, str):
        lowered = val.strip().lower()
        if lowered in ("1", "true", "yes", "on"):
            return True
        if lowered in ("0", "false", "no", "off"):
            return False
        return default
    try:
        return bool(int(val))
    except Exception:
        return default


def normalize_backend(name: str) -> str:
    name = (name or "").strip().lower()
    return name if name in BACKENDS else "file"


def load_config(settings: QSettings) -> AppConfig:
    backend = normalize_backend(get_str(settings, SettingsKeys.STORAGE_BACKEND, "file"))
    data_dir = get_str(settings, SettingsKeys.STORAGE_DIR, "")
    return AppConfig(
        backend=backend,
        data_dir=Path(data_dir) if data_dir else get_data_dir(),
        strict_persistence=get_bool(settings, SettingsKeys.STORAGE_STRICT, False),
    )
