"""
notes-client: local single-user notes.

- NoteStore: the canonical note collection with write-through persistence
- EditorSession / SelectionController: form and selection state
- filter_notes: search over title and content
"""

__version__ = "0.1.0"
