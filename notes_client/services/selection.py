from __future__ import annotations

import logging

from PySide6.QtCore import QObject, Signal, Slot

from notes_client.core.models import Note
from notes_client.services.note_store import NoteStore

log = logging.getLogger(__name__)


class SelectionController(QObject):
    """
    Хранит id активной (просматриваемой) заметки.
    Не знает ничего про UI: только следит, чтобы id всегда ссылался на
    существующую заметку store.
    """

    activeChanged = Signal(object)  # str | None

    def __init__(self, store: NoteStore):
        super().__init__()
        self._store = store
        self._active_id: str | None = None

        store.noteDeleted.connect(self._on_note_deleted)
        store.notesReset.connect(self._on_notes_reset)

    @property
    def active_id(self) -> str | None:
        return self._active_id

    def active_note(self) -> Note | None:
        if self._active_id is None:
            return None
        return self._store.find_by_id(self._active_id)

    def select(self, note_id: str) -> bool:
        """
        Сделать заметку активной.
        Неизвестный id: no-op, возвращает False (состояние не меняется).
        """
        if self._store.find_by_id(note_id) is None:
            log.debug("Select ignored: unknown note id=%s", note_id)
            return False
        self._set_active(note_id)
        return True

    def clear(self) -> None:
        self._set_active(None)

    # ───────────────────────── internal ─────────────────────────

    def _set_active(self, note_id: str | None) -> None:
        if note_id == self._active_id:
            return
        self._active_id = note_id
        self.activeChanged.emit(note_id)

    @Slot(str)
    def _on_note_deleted(self, note_id: str) -> None:
        if note_id == self._active_id:
            log.debug("Active note deleted; clearing selection (id=%s)", note_id)
            self.clear()

    @Slot()
    def _on_notes_reset(self) -> None:
        if self._active_id is not None and self._store.find_by_id(self._active_id) is None:
            log.debug("Active note gone after reload; clearing selection (id=%s)", self._active_id)
            self.clear()
