from .editor_session import EditorSession, SessionMode
from .note_store import NoteStore
from .selection import SelectionController

__all__ = [
    "EditorSession",
    "SessionMode",
    "NoteStore",
    "SelectionController",
]
