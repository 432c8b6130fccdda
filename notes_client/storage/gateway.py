from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from pathlib import Path

from notes_client.core.errors import PersistenceError
from notes_client.core.models import Note
from notes_client.settings import NOTES_STORAGE_KEY, get_recovery_dir
from notes_client.storage.backends import StorageBackend
from notes_client.storage.filesystem import write_recovery_copy

log = logging.getLogger(__name__)


class PersistenceGateway:
    def load(self) -> list[Note]:
        raise NotImplementedError

    def save(self, notes: Sequence[Note]) -> None:
        raise NotImplementedError


def serialize_notes(notes: Sequence[Note]) -> str:
    return json.dumps([n.to_dict() for n in notes], ensure_ascii=False, indent=2)


def parse_notes(text: str) -> tuple[list[Note], bool]:
    """
    Parse a JSON array of note records.

    Returns (notes, intact). Unreadable blobs give an empty list. Individual
    records that are malformed or repeat an id already seen are skipped, so
    whatever comes back satisfies the collection invariants; intact is False
    whenever anything was dropped on the way.
    """
    try:
        raw = json.loads(text)
    except (TypeError, ValueError):
        log.warning("Stored notes are not valid JSON; starting empty")
        return [], False
    if not isinstance(raw, list):
        log.warning("Stored notes are %s, expected a list; starting empty", type(raw).__name__)
        return [], False

    out: list[Note] = []
    seen: set[str] = set()
    intact = True
    for idx, item in enumerate(raw):
        try:
            note = Note.from_dict(item)
        except (ValueError, OverflowError) as exc:
            log.warning("Skipping malformed note record #%d: %s", idx, exc)
            intact = False
            continue
        if note.id in seen:
            log.warning("Skipping duplicate note id=%s (record #%d)", note.id, idx)
            intact = False
            continue
        seen.add(note.id)
        out.append(note)
    return out, intact


def deserialize_notes(text: str) -> list[Note]:
    notes, _ = parse_notes(text)
    return notes


class JsonNotesGateway(PersistenceGateway):
    """
    Whole collection as one JSON blob under a single backend key.

    Whatever load() cannot take in full (undecodable bytes, broken JSON,
    skipped records) is copied into the recovery folder first, because the
    next save() replaces the blob with only what was understood.
    """

    def __init__(
        self,
        backend: StorageBackend,
        *,
        key: str = NOTES_STORAGE_KEY,
        recovery_dir: Path | None = None,
    ):
        self.backend = backend
        self.key = key
        self.recovery_dir = recovery_dir

    def load(self) -> list[Note]:
        try:
            text = self.backend.get(self.key)
        except PersistenceError:
            log.exception("Failed to read stored notes (key=%s); starting empty", self.key)
            self._preserve_unreadable()
            return []
        if text is None:
            return []
        notes, intact = parse_notes(text)
        if not intact:
            self._preserve_unreadable()
        log.debug("Loaded %d notes (key=%s)", len(notes), self.key)
        return notes

    def save(self, notes: Sequence[Note]) -> None:
        text = serialize_notes(notes)
        try:
            self.backend.set(self.key, text)
        except PersistenceError:
            raise
        except Exception as exc:
            raise PersistenceError(f"Failed to save notes (key={self.key}): {exc}") from exc
        log.debug("Saved %d notes (key=%s)", len(notes), self.key)

    # ───────────────────────── internal ─────────────────────────

    def _preserve_unreadable(self) -> None:
        try:
            # the bytes as stored, not the decoded text
            data = self.backend.get_raw(self.key)
            if data is None:
                return
            existing = self._find_recovery_copy(data)
            if existing is not None:
                log.warning("Unreadable notes already preserved at %s", existing)
                return
            rec_path = write_recovery_copy(self.key, data, recovery_dir=self.recovery_dir)
            log.critical("Unreadable notes preserved at %s", rec_path)
        except Exception:
            log.exception("Failed to preserve unreadable notes (key=%s)", self.key)

    def _find_recovery_copy(self, data: bytes) -> Path | None:
        # repeated loads of the same broken blob keep a single copy
        folder = Path(self.recovery_dir) if self.recovery_dir is not None else get_recovery_dir()
        if not folder.is_dir():
            return None
        for path in sorted(folder.glob(f"{self.key}.recovery.*.json")):
            if path.stat().st_size == len(data) and path.read_bytes() == data:
                return path
        return None
