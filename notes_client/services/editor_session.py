from __future__ import annotations

import enum
import logging

from PySide6.QtCore import QObject, Signal, Slot

from notes_client.core.errors import NotFoundError, PersistenceError, SessionStateError
from notes_client.core.models import Draft, ExistingNote, Note
from notes_client.core.validation import validate_note_fields
from notes_client.services.note_store import NoteStore
from notes_client.services.selection import SelectionController

log = logging.getLogger(__name__)

EDITABLE_FIELDS = ("title", "content")


class SessionMode(enum.Enum):
    IDLE = "idle"
    CREATING = "creating"
    EDITING = "editing"


class EditorSession(QObject):
    """
    Form state machine between the editor UI and the store.

      IDLE     -> CREATING   begin_create()
      any      -> EDITING    begin_edit(note_id)
      CREATING -> IDLE       save() / cancel()
      EDITING  -> IDLE       save() / cancel() / the edited note is deleted
      any      -> IDLE       view(note_id)

    Field edits only touch the draft; the store sees nothing until save().
    A failed validation leaves mode and draft exactly as they were.
    """

    modeChanged = Signal(object)  # SessionMode

    def __init__(self, store: NoteStore, selection: SelectionController):
        super().__init__()
        self._store = store
        self._selection = selection
        self._mode = SessionMode.IDLE
        self._draft: Draft | None = None

        store.noteDeleted.connect(self._on_note_deleted)
        store.notesReset.connect(self._on_notes_reset)

    # ───────────────────────── state ─────────────────────────

    @property
    def mode(self) -> SessionMode:
        return self._mode

    @property
    def draft(self) -> Draft | None:
        return self._draft

    @property
    def is_dirty(self) -> bool:
        return self._draft is not None and self._draft.is_dirty

    # ───────────────────────── transitions ─────────────────────────

    def begin_create(self) -> Draft:
        self._discard_open_draft(reason="new note")
        self._selection.clear()
        self._draft = Draft.blank()
        self._set_mode(SessionMode.CREATING)
        return self._draft

    def begin_edit(self, note_id: str) -> Draft:
        note = self._store.find_by_id(note_id)
        if note is None:
            raise NotFoundError(note_id)
        self._discard_open_draft(reason=f"edit {note_id}")
        self._selection.select(note.id)
        self._draft = Draft.from_note(note)
        self._set_mode(SessionMode.EDITING)
        return self._draft

    def view(self, note_id: str) -> bool:
        """
        Show a note read-only. An open draft is discarded only when the
        note actually exists.
        """
        if self._store.find_by_id(note_id) is None:
            log.debug("View ignored: unknown note id=%s", note_id)
            return False
        self._discard_open_draft(reason=f"view {note_id}")
        self._draft = None
        self._set_mode(SessionMode.IDLE)
        return self._selection.select(note_id)

    def on_field_change(self, field: str, value: str) -> None:
        draft = self._require_draft("edit a field")
        if field not in EDITABLE_FIELDS:
            raise ValueError(f"Unknown note field: {field!r}")
        setattr(draft, field, value)

    def cancel(self) -> None:
        if self._draft is None:
            return
        target = self._draft.target
        if self._draft.is_dirty:
            log.info("Edit cancelled with unsaved changes")
        self._draft = None
        self._set_mode(SessionMode.IDLE)
        if isinstance(target, ExistingNote):
            # back to viewing the note that was being edited
            self._selection.select(target.note_id)

    def save(self) -> Note:
        draft = self._require_draft("save")
        validate_note_fields(draft.title, draft.content)

        try:
            if isinstance(draft.target, ExistingNote):
                note = self._store.update(draft.target.note_id, draft.title, draft.content)
            else:
                note = self._store.create(draft.title, draft.content)
        except PersistenceError as exc:
            # the store kept the change; closing the form avoids a second create
            if exc.note_id is not None:
                self._close_on(exc.note_id)
            raise

        self._close_on(note.id)
        return note

    def delete_active(self) -> str:
        """
        Delete the note being edited, or else the selected one.
        Returns the deleted id.
        """
        if self._draft is not None and isinstance(self._draft.target, ExistingNote):
            note_id = self._draft.target.note_id
        elif self._selection.active_id is not None:
            note_id = self._selection.active_id
        else:
            raise SessionStateError("No active note to delete")
        # store signals bring session and selection back to IDLE
        self._store.delete(note_id)
        return note_id

    # ───────────────────────── internal ─────────────────────────

    def _close_on(self, note_id: str) -> None:
        self._draft = None
        self._set_mode(SessionMode.IDLE)
        self._selection.select(note_id)

    def _require_draft(self, action: str) -> Draft:
        if self._draft is None:
            raise SessionStateError(f"Cannot {action} while {self._mode.value}")
        return self._draft

    def _discard_open_draft(self, *, reason: str) -> None:
        if self._draft is not None and self._draft.is_dirty:
            log.info("Discarding unsaved draft (%s)", reason)

    def _set_mode(self, mode: SessionMode) -> None:
        if mode is self._mode:
            return
        log.debug("Editor mode: %s -> %s", self._mode.value, mode.value)
        self._mode = mode
        self.modeChanged.emit(mode)

    @Slot(str)
    def _on_note_deleted(self, note_id: str) -> None:
        # deleting some other note leaves an open draft alone
        if self._draft is not None and self._draft.target == ExistingNote(note_id):
            log.info("Edited note deleted; closing editor (id=%s)", note_id)
            self._draft = None
            self._set_mode(SessionMode.IDLE)

    @Slot()
    def _on_notes_reset(self) -> None:
        if self._draft is not None and isinstance(self._draft.target, ExistingNote):
            if self._store.find_by_id(self._draft.target.note_id) is None:
                log.info("Edited note vanished on reload; closing editor")
                self._draft = None
                self._set_mode(SessionMode.IDLE)
