import json

import pytest
from PySide6.QtCore import QByteArray, QSettings

from notes_client.core.errors import PersistenceError
from notes_client.core.models import Note
from notes_client.services import NoteStore
from notes_client.storage import (
    FileBackend,
    JsonNotesGateway,
    MemoryBackend,
    QSettingsBackend,
    atomic_write_text,
)

from conftest import CountingIds, FakeClock

STAMP = "2024-01-01T00:00:00.000Z"
# valid ISO text, but the offset moves it before year 1 in UTC
EDGE = "0001-01-01T00:00:00+05:00"


def _note(note_id, title="T", content="C, with comma"):
    return Note(id=note_id, title=title, content=content, created=STAMP, updated=STAMP)


def test_load_empty_backend():
    assert JsonNotesGateway(MemoryBackend()).load() == []


@pytest.mark.parametrize("blob", ["not json", "{\"id\": 1}", "42", ""])
def test_load_malformed_blob_gives_empty(blob, tmp_path):
    gateway = JsonNotesGateway(MemoryBackend({"notes": blob}), recovery_dir=tmp_path)
    assert gateway.load() == []


def test_load_skips_bad_and_duplicate_records(tmp_path):
    good = _note("a").to_dict()
    out_of_range = dict(_note("x").to_dict(), created=EDGE, updated=EDGE)
    blob = json.dumps([good, {"id": "b"}, "junk", out_of_range, dict(good, title="again"), _note("c").to_dict()])
    gateway = JsonNotesGateway(MemoryBackend({"notes": blob}), recovery_dir=tmp_path)

    assert [n.id for n in gateway.load()] == ["a", "c"]
    assert gateway.load()[0].title == "T"


def test_unreadable_file_survives_next_save(tmp_path):
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    original = b'[{"id": "a", "title": "caf\xff"}]'
    (data_dir / "notes.json").write_bytes(original)
    store = NoteStore(
        JsonNotesGateway(FileBackend(data_dir), recovery_dir=tmp_path / "recovery"),
        clock=FakeClock(),
        id_factory=CountingIds(),
        recovery_dir=tmp_path / "recovery",
    )
    assert store.list_notes() == []

    store.create("New", "note")

    assert [n["id"] for n in json.loads((data_dir / "notes.json").read_text(encoding="utf-8"))] == ["n1"]
    copies = list((tmp_path / "recovery").glob("notes.recovery.*.json"))
    assert [p.read_bytes() for p in copies] == [original]


def test_partially_readable_blob_is_preserved_once(tmp_path):
    blob = json.dumps([_note("a").to_dict(), {"id": "b"}])
    gateway = JsonNotesGateway(MemoryBackend({"notes": blob}), recovery_dir=tmp_path)

    gateway.load()
    gateway.load()

    copies = list(tmp_path.glob("notes.recovery.*.json"))
    assert len(copies) == 1
    assert copies[0].read_text(encoding="utf-8") == blob


def test_clean_load_writes_no_recovery_copy(tmp_path):
    backend = MemoryBackend()
    JsonNotesGateway(backend).save([_note("a")])

    JsonNotesGateway(backend, recovery_dir=tmp_path).load()

    assert list(tmp_path.iterdir()) == []


def test_qsettings_backend_keeps_raw_bytes(tmp_path):
    settings = QSettings(str(tmp_path / "settings.ini"), QSettings.Format.IniFormat)
    settings.setValue("storage/data/notes", QByteArray(b"\xfe\xff not utf-8"))
    backend = QSettingsBackend(settings)

    with pytest.raises(PersistenceError):
        backend.get("notes")
    assert backend.get_raw("notes") == b"\xfe\xff not utf-8"


def test_saved_blob_has_exact_fields():
    backend = MemoryBackend()
    JsonNotesGateway(backend).save([_note("a")])

    raw = json.loads(backend.get("notes"))
    assert raw == [{"id": "a", "title": "T", "content": "C, with comma", "created": STAMP, "updated": STAMP}]


def test_file_backend_round_trip(tmp_path):
    gateway = JsonNotesGateway(FileBackend(tmp_path / "data"))
    notes = [_note("a"), _note("b", title="Ünïcode")]

    gateway.save(notes)

    assert (tmp_path / "data" / "notes.json").exists()
    assert JsonNotesGateway(FileBackend(tmp_path / "data")).load() == notes


def test_file_backend_rejects_odd_keys(tmp_path):
    backend = FileBackend(tmp_path)
    with pytest.raises(PersistenceError):
        backend.set("../escape", "x")


def test_file_backend_write_failure_is_persistence_error(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("x", encoding="utf-8")
    gateway = JsonNotesGateway(FileBackend(blocker))

    with pytest.raises(PersistenceError):
        gateway.save([_note("a")])


def test_qsettings_backend_round_trip(tmp_path):
    path = str(tmp_path / "settings.ini")
    settings = QSettings(path, QSettings.Format.IniFormat)
    JsonNotesGateway(QSettingsBackend(settings)).save([_note("a"), _note("b")])

    reopened = QSettings(path, QSettings.Format.IniFormat)
    loaded = JsonNotesGateway(QSettingsBackend(reopened)).load()

    assert [n.id for n in loaded] == ["a", "b"]
    assert loaded[0].content == "C, with comma"


def test_atomic_write_leaves_no_temp_files(tmp_path):
    target = tmp_path / "out.json"
    atomic_write_text(target, "one")
    atomic_write_text(target, "two")

    assert target.read_text(encoding="utf-8") == "two"
    assert [p.name for p in tmp_path.iterdir()] == ["out.json"]
