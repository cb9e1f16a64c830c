from __future__ import annotations

import pytest

from notely.core.models import Note, SortOrder


def test_sort_order_parse_is_case_insensitive() -> None:
    assert SortOrder.parse(" Newest ") is SortOrder.NEWEST
    assert SortOrder.parse("ALPHABETICAL") is SortOrder.ALPHABETICAL


def test_sort_order_parse_rejects_unknown() -> None:
    with pytest.raises(ValueError, match="Invalid sort order"):
        SortOrder.parse("random")


def test_note_record_uses_storage_keys() -> None:
    note = Note(id="n1", title="T", content="C", created_at=1, updated_at=2)
    assert note.to_record() == {
        "id": "n1",
        "title": "T",
        "content": "C",
        "createdAt": 1,
        "updatedAt": 2,
    }
    assert Note.from_record(note.to_record()) == note


@pytest.mark.parametrize(
    "record",
    [
        "not a dict",
        {"title": "no id", "createdAt": 1, "updatedAt": 1},
        {"id": "x", "createdAt": "soon", "updatedAt": 1},
        {"id": "x", "createdAt": 5, "updatedAt": 1},
    ],
)
def test_note_from_record_rejects_malformed(record) -> None:
    with pytest.raises(ValueError):
        Note.from_record(record)


def test_note_matches_title_or_content() -> None:
    note = Note(id="n", title="Shopping", content="Buy MILK", created_at=0, updated_at=0)
    assert note.matches("")
    assert note.matches("shop")
    assert note.matches("milk")
    assert not note.matches("bread")
