from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TypeAlias

from notes_client.core.clock import parse_timestamp

NOTE_FIELDS = ("id", "title", "content", "created", "updated")


@dataclass(frozen=True)
class Note:
    """
    Stored note. Immutable: an edit produces a new Note with the same id.
    Timestamps are kept in their external ISO-8601 form.
    """
    id: str
    title: str
    content: str
    created: str
    updated: str

    def to_dict(self) -> dict[str, str]:
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "created": self.created,
            "updated": self.updated,
        }

    @classmethod
    def from_dict(cls, raw: Any) -> Note:
        """
        Strict parse of the external record.
        Raises ValueError on anything that is not a well-formed note.
        """
        if not isinstance(raw, dict):
            raise ValueError(f"note record must be an object, got {type(raw).__name__}")
        values: dict[str, str] = {}
        for name in NOTE_FIELDS:
            val = raw.get(name)
            if not isinstance(val, str):
                raise ValueError(f"note field {name!r} must be a string")
            values[name] = val
        if not values["id"]:
            raise ValueError("note id must not be empty")
        if parse_timestamp(values["created"]) > parse_timestamp(values["updated"]):
            raise ValueError(f"note {values['id']!r}: created is after updated")
        return cls(**values)


# ───────────────────────── draft ─────────────────────────


@dataclass(frozen=True)
class NewNote:
    """Draft target: the draft becomes a new note on save."""


@dataclass(frozen=True)
class ExistingNote:
    """Draft target: the draft overwrites note_id on save."""
    note_id: str


DraftTarget: TypeAlias = NewNote | ExistingNote


@dataclass
class Draft:
    """
    Mutable edit buffer behind the editor form.
    Never shared with the store: a save hands title/content to NoteStore.
    """
    target: DraftTarget
    title: str = ""
    content: str = ""
    # values the draft was opened with, for dirty tracking
    base_title: str = ""
    base_content: str = ""

    @classmethod
    def blank(cls) -> Draft:
        return cls(target=NewNote())

    @classmethod
    def from_note(cls, note: Note) -> Draft:
        return cls(
            target=ExistingNote(note.id),
            title=note.title,
            content=note.content,
            base_title=note.title,
            base_content=note.content,
        )

    @property
    def is_new(self) -> bool:
        return isinstance(self.target, NewNote)

    @property
    def is_dirty(self) -> bool:
        return self.title != self.base_title or self.content != self.base_content
