from notes_client.core.models import Note
from notes_client.core.search import filter_notes


def _note(note_id, title, content):
    stamp = "2024-01-01T00:00:00.000Z"
    return Note(id=note_id, title=title, content=content, created=stamp, updated=stamp)


NOTES = [
    _note("1", "Groceries", "Milk, eggs"),
    _note("2", "Ideas", "Build a MILK frother"),
    _note("3", "Trip", "Pack boots"),
    _note("4", "milkshake recipe", "Ice cream"),
]


def test_empty_query_returns_everything_in_order():
    assert filter_notes(NOTES, "") == NOTES


def test_case_insensitive_title_or_content():
    assert [n.id for n in filter_notes(NOTES, "Milk")] == ["1", "2", "4"]


def test_result_is_subsequence():
    result = filter_notes(NOTES, "e")
    positions = [NOTES.index(n) for n in result]
    assert positions == sorted(positions)


def test_no_match():
    assert filter_notes(NOTES, "zebra") == []


def test_casefold_matches_beyond_lower():
    note = _note("5", "Straße", "Weg")
    assert filter_notes([note], "STRASSE") == [note]


def test_does_not_mutate_input():
    notes = list(NOTES)
    filter_notes(notes, "trip")
    assert notes == NOTES
