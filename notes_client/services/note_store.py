from __future__ import annotations

import dataclasses
import logging
from pathlib import Path

from PySide6.QtCore import QObject, Signal

from notes_client.core.clock import (
    Clock,
    IdFactory,
    format_timestamp,
    generate_note_id,
    parse_timestamp,
    utc_now,
)
from notes_client.core.errors import NotesError, NotFoundError, PersistenceError
from notes_client.core.models import Note
from notes_client.core.validation import validate_note_fields
from notes_client.settings import NOTES_STORAGE_KEY
from notes_client.storage.filesystem import write_recovery_copy
from notes_client.storage.gateway import PersistenceGateway, serialize_notes

log = logging.getLogger(__name__)

MAX_ID_ATTEMPTS = 32


class NoteStore(QObject):
    """
    Owns the canonical, insertion-ordered note collection.

    Every mutation is validated, applied in memory, then written through to
    the gateway as a full snapshot. A failed write never reaches the caller
    unless strict_persistence is set: it is logged, a recovery copy is
    attempted and persistenceFailed is emitted. The in-memory collection
    stays authoritative for the session either way.
    """

    noteCreated = Signal(str)        # note_id
    noteUpdated = Signal(str)        # note_id
    noteDeleted = Signal(str)        # note_id
    notesReset = Signal()            # collection replaced by reload()
    persistenceFailed = Signal(str)  # error message

    def __init__(
        self,
        gateway: PersistenceGateway,
        *,
        clock: Clock = utc_now,
        id_factory: IdFactory = generate_note_id,
        strict_persistence: bool = False,
        recovery_dir: Path | None = None,
        load: bool = True,
    ):
        super().__init__()
        self._gateway = gateway
        self._clock = clock
        self._id_factory = id_factory
        self._strict = strict_persistence
        self._recovery_dir = recovery_dir
        self._notes: list[Note] = []
        if load:
            self._notes = list(gateway.load())

    # ───────────────────────── queries ─────────────────────────

    def list_notes(self) -> list[Note]:
        return list(self._notes)

    def find_by_id(self, note_id: str) -> Note | None:
        for note in self._notes:
            if note.id == note_id:
                return note
        return None

    def __len__(self) -> int:
        return len(self._notes)

    def __contains__(self, note_id: object) -> bool:
        return any(n.id == note_id for n in self._notes)

    # ───────────────────────── mutations ─────────────────────────

    def create(self, title: str, content: str) -> Note:
        validate_note_fields(title, content)

        now = format_timestamp(self._clock())
        note = Note(
            id=self._new_id(),
            title=title,
            content=content,
            created=now,
            updated=now,
        )
        self._notes.append(note)
        log.info("Note created: id=%s", note.id)

        self._commit(self.noteCreated, note.id)
        return note

    def update(self, note_id: str, title: str, content: str) -> Note:
        idx = self._index_of(note_id)
        validate_note_fields(title, content)

        old = self._notes[idx]
        # normalized to the stored precision before comparing
        now = parse_timestamp(format_timestamp(self._clock()))
        # clock going backwards must not make updated move backwards
        previous = parse_timestamp(old.updated)
        if now < previous:
            log.warning("Clock went backwards for note id=%s; keeping previous updated", note_id)
            now = previous

        note = dataclasses.replace(
            old,
            title=title,
            content=content,
            updated=format_timestamp(now),
        )
        self._notes[idx] = note
        log.info("Note updated: id=%s", note_id)

        self._commit(self.noteUpdated, note_id)
        return note

    def delete(self, note_id: str) -> None:
        idx = self._index_of(note_id)
        del self._notes[idx]
        log.info("Note deleted: id=%s", note_id)

        self._commit(self.noteDeleted, note_id)

    def reload(self) -> None:
        """Replace the in-memory collection with what the gateway holds."""
        self._notes = list(self._gateway.load())
        log.info("Notes reloaded: count=%d", len(self._notes))
        self.notesReset.emit()

    # ───────────────────────── internal ─────────────────────────

    def _index_of(self, note_id: str) -> int:
        for idx, note in enumerate(self._notes):
            if note.id == note_id:
                return idx
        raise NotFoundError(note_id)

    def _new_id(self) -> str:
        taken = {n.id for n in self._notes}
        for _ in range(MAX_ID_ATTEMPTS):
            candidate = self._id_factory()
            if candidate and candidate not in taken:
                return candidate
            log.debug("Id factory returned a taken or empty id: %r", candidate)
        raise NotesError(f"Could not generate a unique note id after {MAX_ID_ATTEMPTS} attempts")

    def _commit(self, signal, note_id: str) -> None:
        # listeners see the mutation even when strict mode re-raises below
        error = self._persist()
        signal.emit(note_id)
        if error is not None and self._strict:
            error.note_id = note_id
            raise error

    def _persist(self) -> PersistenceError | None:
        snapshot = list(self._notes)
        try:
            self._gateway.save(snapshot)
        except PersistenceError as exc:
            log.exception("Write-through failed (notes=%d)", len(snapshot))
            self._write_recovery(snapshot)
            self.persistenceFailed.emit(str(exc))
            return exc
        return None

    def _write_recovery(self, snapshot: list[Note]) -> None:
        try:
            rec_path = write_recovery_copy(
                NOTES_STORAGE_KEY,
                serialize_notes(snapshot),
                recovery_dir=self._recovery_dir,
            )
            log.critical("Recovery copy written: %s", rec_path)
        except Exception:
            log.exception("Failed to write recovery copy")
