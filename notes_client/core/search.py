from __future__ import annotations

from collections.abc import Iterable

from notes_client.core.models import Note


def matches(note: Note, query: str) -> bool:
    q = (query or "").casefold()
    if not q:
        return True
    return q in note.title.casefold() or q in note.content.casefold()


def filter_notes(notes: Iterable[Note], query: str) -> list[Note]:
    """
    Case-insensitive substring search over title and content.
    Keeps the input order; an empty query returns everything.
    """
    return [n for n in notes if matches(n, query)]
