from __future__ import annotations


class NotesError(Exception):
    """Base class for every failure the notes core reports."""


class ValidationError(NotesError):
    """
    Title/content constraint violated.

    errors maps a field name ("title" / "content") to a human-readable
    message, so a form can show them next to the inputs.
    """

    def __init__(self, errors: dict[str, str]):
        self.errors = dict(errors)
        detail = "; ".join(f"{field}: {msg}" for field, msg in self.errors.items())
        super().__init__(detail or "invalid note")


class NotFoundError(NotesError):
    def __init__(self, note_id: str):
        self.note_id = note_id
        super().__init__(f"Note with id {note_id!r} not found")


class PersistenceError(NotesError):
    """
    Storage read/write failed.

    note_id is set when the failure followed an in-memory mutation of that
    note, which stays applied.
    """

    note_id: str | None = None


class SessionStateError(NotesError):
    """Editor operation is not valid in the current session mode."""
