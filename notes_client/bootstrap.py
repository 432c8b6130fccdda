from __future__ import annotations

import logging
from dataclasses import dataclass

from PySide6.QtCore import QSettings

from notes_client.app_settings import AppConfig, SettingsKeys, get_str
from notes_client.core.models import Note
from notes_client.core.search import filter_notes
from notes_client.services.editor_session import EditorSession
from notes_client.services.note_store import NoteStore
from notes_client.services.selection import SelectionController
from notes_client.storage.backends import FileBackend, QSettingsBackend, StorageBackend
from notes_client.storage.gateway import JsonNotesGateway

log = logging.getLogger(__name__)


@dataclass
class Services:
    settings: QSettings
    store: NoteStore
    selection: SelectionController
    session: EditorSession

    def visible_notes(self, query: str = "") -> list[Note]:
        """What the note list shows for the current search box."""
        return filter_notes(self.store.list_notes(), query)


def safe_set_setting(settings: QSettings, key: str, value) -> None:
    """Best-effort QSettings write; preferences never break the app."""
    try:
        settings.setValue(key, value)
    except Exception:
        log.exception("Failed to write setting %s", key)


def build_backend(config: AppConfig, settings: QSettings) -> StorageBackend:
    if config.backend == "qsettings":
        return QSettingsBackend(settings)
    return FileBackend(config.data_dir)


def build_services(config: AppConfig, settings: QSettings, *, backend: StorageBackend | None = None) -> Services:
    backend = backend if backend is not None else build_backend(config, settings)
    log.info("Storage backend: %s", type(backend).__name__)

    store = NoteStore(
        JsonNotesGateway(backend),
        strict_persistence=config.strict_persistence,
    )
    selection = SelectionController(store)
    session = EditorSession(store, selection)

    # remember the last viewed note between runs
    last_note = get_str(settings, SettingsKeys.LAST_NOTE, "")
    if last_note and not selection.select(last_note):
        log.debug("Last note no longer exists: %s", last_note)
    selection.activeChanged.connect(
        lambda note_id: safe_set_setting(settings, SettingsKeys.LAST_NOTE, note_id or "")
    )

    return Services(settings=settings, store=store, selection=selection, session=session)
