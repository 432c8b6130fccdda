from .errors import NotesError, NotFoundError, PersistenceError, SessionStateError, ValidationError
from .models import Draft, DraftTarget, ExistingNote, NewNote, Note
from .search import filter_notes
from .validation import validate_note_fields

__all__ = ["NotesError",
           "NotFoundError",
           "PersistenceError",
           "SessionStateError",
           "ValidationError",
           "Draft",
           "DraftTarget",
           "ExistingNote",
           "NewNote",
           "Note",
           "filter_notes",
           "validate_note_fields",
           ]
