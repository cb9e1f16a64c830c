"""Note records and sort preferences."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any


class SortOrder(str, Enum):
    NEWEST = "newest"
    OLDEST = "oldest"
    ALPHABETICAL = "alphabetical"

    @classmethod
    def parse(cls, value: str) -> SortOrder:
        normalized = value.strip().lower()
        for order in cls:
            if order.value == normalized:
                return order
        raise ValueError(f"Invalid sort order: {value}")


@dataclass(frozen=True)
class Note:
    id: str
    title: str
    content: str
    created_at: int
    updated_at: int

    def matches(self, term: str) -> bool:
        """Case-insensitive substring match on title or content."""
        if not term:
            return True
        needle = term.casefold()
        return needle in self.title.casefold() or needle in self.content.casefold()

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_record(cls, record: Any) -> Note:
        if not isinstance(record, dict):
            raise ValueError(f"Invalid note record: {record!r}")
        try:
            note = cls(
                id=str(record["id"]),
                title=str(record.get("title", "")),
                content=str(record.get("content", "")),
                created_at=int(record["createdAt"]),
                updated_at=int(record["updatedAt"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError(f"Invalid note record: {record!r}") from exc
        if note.created_at > note.updated_at:
            raise ValueError(f"Note updated before it was created: {record!r}")
        return note


def new_note_id() -> str:
    return str(uuid.uuid4())
