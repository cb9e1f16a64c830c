"""Reactive note store with write-through persistence."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import replace
from enum import Enum

from notely.bus.feed import ChangeFeed
from notely.core.models import Note, SortOrder, new_note_id
from notely.storage.gateway import PersistenceGateway
from notely.utils.time import now_ms

logger = logging.getLogger(__name__)

NOTES_KEY = "notes"
SORT_ORDER_KEY = "sortOrder"


class StoreState(str, Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"


class NoteStore:
    """Single source of truth for notes and the sort preference.

    Every mutation updates memory, awaits the gateway write, then publishes.
    A failed write restores the previous in-memory value and re-raises, so
    subscribers only ever see state that reached storage. Mutations are
    serialized with a lock; publishing happens after the lock is released so
    subscribers may call back into the store.
    """

    def __init__(
        self,
        gateway: PersistenceGateway,
        *,
        default_sort: SortOrder = SortOrder.NEWEST,
        clock: Callable[[], int] = now_ms,
        id_factory: Callable[[], str] = new_note_id,
    ) -> None:
        self._gateway = gateway
        self._default_sort = default_sort
        self._clock = clock
        self._id_factory = id_factory
        self._state = StoreState.UNINITIALIZED
        self._notes: list[Note] = []
        self._sort_order = default_sort
        self._lock = asyncio.Lock()
        self.notes_feed: ChangeFeed[tuple[Note, ...]] = ChangeFeed(())
        self.sort_order_feed: ChangeFeed[SortOrder] = ChangeFeed(default_sort)

    @property
    def state(self) -> StoreState:
        return self._state

    @property
    def notes(self) -> list[Note]:
        return list(self._notes)

    @property
    def sort_order(self) -> SortOrder:
        return self._sort_order

    async def init(self) -> None:
        async with self._lock:
            self._notes = await self._load_notes()
            self._sort_order = await self._load_sort_order()
            self._state = StoreState.READY
            notes = tuple(self._notes)
            sort_order = self._sort_order
        logger.debug("Loaded %d notes, sort order %s", len(notes), sort_order.value)
        await self.notes_feed.publish(notes)
        await self.sort_order_feed.publish(sort_order)

    async def add_note(self, title: str, content: str) -> Note:
        async with self._lock:
            ts = self._clock()
            note = Note(
                id=self._unique_id(),
                title=title,
                content=content,
                created_at=ts,
                updated_at=ts,
            )
            snapshot = await self._write_notes([*self._notes, note])
        logger.debug("Added note %s", note.id)
        await self.notes_feed.publish(snapshot)
        return note

    async def update_note(self, note: Note) -> Note:
        async with self._lock:
            now = self._clock()
            notes = list(self._notes)
            index = self._index_of(note.id)
            if index is None:
                updated = replace(note, updated_at=max(now, note.created_at))
                logger.debug("Update for unknown note %s ignored", note.id)
            else:
                stored = notes[index]
                updated = replace(
                    stored,
                    title=note.title,
                    content=note.content,
                    updated_at=max(now, stored.updated_at),
                )
                notes[index] = updated
            snapshot = await self._write_notes(notes)
        await self.notes_feed.publish(snapshot)
        return updated

    async def delete_note(self, note_id: str) -> None:
        async with self._lock:
            notes = [note for note in self._notes if note.id != note_id]
            if len(notes) == len(self._notes):
                logger.debug("Delete for unknown note %s ignored", note_id)
            snapshot = await self._write_notes(notes)
        await self.notes_feed.publish(snapshot)

    async def set_sort_order(self, order: SortOrder | str) -> None:
        if not isinstance(order, SortOrder):
            order = SortOrder.parse(order)
        async with self._lock:
            previous = self._sort_order
            self._sort_order = order
            try:
                await self._gateway.set(SORT_ORDER_KEY, order.value)
            except BaseException:
                self._sort_order = previous
                logger.error("Sort order write failed, rolled back", exc_info=True)
                raise
        await self.sort_order_feed.publish(order)

    def get_note(self, note_id: str) -> Note | None:
        index = self._index_of(note_id)
        if index is None:
            return None
        return self._notes[index]

    def get_sorted_notes(self, search_term: str = "") -> list[Note]:
        filtered = [note for note in self._notes if note.matches(search_term)]
        order = self._sort_order
        if order is SortOrder.NEWEST:
            return sorted(filtered, key=lambda note: note.created_at, reverse=True)
        if order is SortOrder.ALPHABETICAL:
            return sorted(filtered, key=lambda note: note.title.casefold())
        return sorted(filtered, key=lambda note: note.created_at)

    async def _write_notes(self, notes: list[Note]) -> tuple[Note, ...]:
        previous = self._notes
        self._notes = notes
        try:
            await self._gateway.set(NOTES_KEY, [note.to_record() for note in notes])
        except BaseException:
            self._notes = previous
            logger.error("Note write failed, rolled back", exc_info=True)
            raise
        return tuple(notes)

    async def _load_notes(self) -> list[Note]:
        try:
            raw = await self._gateway.get(NOTES_KEY)
        except Exception:
            logger.warning("Could not load notes, starting empty", exc_info=True)
            return []
        if raw is None:
            return []
        if not isinstance(raw, list):
            logger.warning("Stored notes are not a list, starting empty")
            return []
        notes: list[Note] = []
        seen: set[str] = set()
        for record in raw:
            try:
                note = Note.from_record(record)
            except ValueError:
                logger.warning("Skipping unreadable note record: %r", record)
                continue
            if note.id in seen:
                logger.warning("Skipping duplicate note id %s", note.id)
                continue
            seen.add(note.id)
            notes.append(note)
        return notes

    async def _load_sort_order(self) -> SortOrder:
        try:
            raw = await self._gateway.get(SORT_ORDER_KEY)
        except Exception:
            logger.warning("Could not load sort order, using default", exc_info=True)
            return self._default_sort
        if raw is None:
            return self._default_sort
        try:
            return SortOrder.parse(str(raw))
        except ValueError:
            logger.warning("Unknown stored sort order %r, using default", raw)
            return self._default_sort

    def _index_of(self, note_id: str) -> int | None:
        for index, note in enumerate(self._notes):
            if note.id == note_id:
                return index
        return None

    def _unique_id(self) -> str:
        existing = {note.id for note in self._notes}
        note_id = self._id_factory()
        while note_id in existing:
            note_id = self._id_factory()
        return note_id
