"""
Key/value text stores the gateway serializes into.

A backend only knows get(key) -> str | None and set(key, value); it has no
idea what a note is. Failures come out as PersistenceError.
get_raw(key) hands back the stored bytes untouched, for keeping a copy of
a value that get() could not decode.
"""
from __future__ import annotations

import re
from pathlib import Path

from PySide6.QtCore import QByteArray, QSettings

from notes_client.core.errors import PersistenceError
from notes_client.storage.filesystem import atomic_write_text

_KEY_RE = re.compile(r"^[A-Za-z0-9_.-]+$")


class StorageBackend:
    def get(self, key: str) -> str | None:
        raise NotImplementedError

    def get_raw(self, key: str) -> bytes | None:
        value = self.get(key)
        return None if value is None else value.encode("utf-8")

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError


class MemoryBackend(StorageBackend):
    def __init__(self, initial: dict[str, str] | None = None):
        self.data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value


class FileBackend(StorageBackend):
    """One <key>.json file per key inside directory."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        if not _KEY_RE.match(key or "") or key.startswith("."):
            raise PersistenceError(f"Invalid storage key: {key!r}")
        return self.directory / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise PersistenceError(f"Failed to read {path}: {exc}") from exc

    def get_raw(self, key: str) -> bytes | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_bytes()
        except OSError as exc:
            raise PersistenceError(f"Failed to read {path}: {exc}") from exc

    def set(self, key: str, value: str) -> None:
        path = self.path_for(key)
        try:
            atomic_write_text(path, value, encoding="utf-8")
        except OSError as exc:
            raise PersistenceError(f"Failed to write {path}: {exc}") from exc


class QSettingsBackend(StorageBackend):
    """Values live under a QSettings group (INI file or native store)."""

    def __init__(self, settings: QSettings, *, group: str = "storage/data"):
        self._settings = settings
        self._group = group.strip("/")

    def _qualified(self, key: str) -> str:
        return f"{self._group}/{key}" if self._group else key

    def get_raw(self, key: str) -> bytes | None:
        val = self._settings.value(self._qualified(key))
        if val is None:
            return None
        if isinstance(val, QByteArray):
            return val.data()
        if isinstance(val, (bytes, bytearray)):
            return bytes(val)
        return str(val).encode("utf-8")

    def get(self, key: str) -> str | None:
        raw = self.get_raw(key)
        if raw is None:
            return None
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise PersistenceError(f"Stored value for {key!r} is not UTF-8") from exc

    def set(self, key: str, value: str) -> None:
        # stored as a byte array so INI list/quoting rules never touch the JSON
        self._settings.setValue(self._qualified(key), QByteArray(value.encode("utf-8")))
        self._settings.sync()
        status = self._settings.status()
        if status != QSettings.Status.NoError:
            raise PersistenceError(
                f"QSettings write failed for {key!r}: {status} ({self._settings.fileName()})"
            )
