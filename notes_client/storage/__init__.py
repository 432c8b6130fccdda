from .backends import FileBackend, MemoryBackend, QSettingsBackend, StorageBackend
from .filesystem import atomic_write_bytes, atomic_write_text, write_recovery_copy
from .gateway import JsonNotesGateway, PersistenceGateway, deserialize_notes, parse_notes, serialize_notes

__all__ = [
    "FileBackend",
    "MemoryBackend",
    "QSettingsBackend",
    "StorageBackend",
    "atomic_write_bytes",
    "atomic_write_text",
    "write_recovery_copy",
    "JsonNotesGateway",
    "PersistenceGateway",
    "deserialize_notes",
    "parse_notes",
    "serialize_notes",
]
