from __future__ import annotations

from contextlib import closing

import pytest

from notely.core.models import SortOrder
from notely.core.store import NoteStore
from notely.storage.gateway import PersistenceError
from notely.storage.kv import SQLiteGateway, create_schema, open_db


def _execute(path, sql: str, params: tuple = ()) -> None:
    with closing(open_db(path)) as conn, conn:
        conn.execute(sql, params)


def test_create_schema_creates_kv_table(tmp_path) -> None:
    path = tmp_path / "data" / "notely.db"
    create_schema(path)
    with closing(open_db(path)) as conn:
        tables = {
            row["name"]
            for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
        }
    assert "kv" in tables


def test_create_schema_is_repeatable(tmp_path) -> None:
    path = tmp_path / "notely.db"
    create_schema(path)
    create_schema(path)
    assert path.exists()


@pytest.mark.asyncio
async def test_get_missing_key_returns_none(tmp_path) -> None:
    gateway = SQLiteGateway(tmp_path / "notely.db")
    assert await gateway.get("notes") is None


@pytest.mark.asyncio
async def test_set_overwrites_value(tmp_path) -> None:
    gateway = SQLiteGateway(tmp_path / "notely.db")
    await gateway.set("sortOrder", "newest")
    await gateway.set("sortOrder", "oldest")
    assert await gateway.get("sortOrder") == "oldest"


@pytest.mark.asyncio
async def test_corrupt_value_raises_persistence_error(tmp_path) -> None:
    path = tmp_path / "notely.db"
    gateway = SQLiteGateway(path)
    _execute(
        path,
        "INSERT INTO kv (key, value, updated_at) VALUES (?, ?, ?)",
        ("notes", "{not json", 0),
    )
    with pytest.raises(PersistenceError):
        await gateway.get("notes")


@pytest.mark.asyncio
async def test_write_failure_raises_persistence_error(tmp_path) -> None:
    path = tmp_path / "notely.db"
    gateway = SQLiteGateway(path)
    _execute(path, "DROP TABLE kv")
    with pytest.raises(PersistenceError):
        await gateway.set("notes", [])


def test_unopenable_path_raises_persistence_error(tmp_path) -> None:
    blocker = tmp_path / "file"
    blocker.write_text("x", encoding="utf-8")
    with pytest.raises(PersistenceError):
        SQLiteGateway(blocker / "notely.db")


@pytest.mark.asyncio
async def test_store_round_trips_through_sqlite(tmp_path) -> None:
    path = tmp_path / "notely.db"
    store = NoteStore(SQLiteGateway(path))
    await store.init()
    note = await store.add_note("Title", "Body")
    await store.set_sort_order(SortOrder.OLDEST)

    reopened = NoteStore(SQLiteGateway(path))
    await reopened.init()
    assert reopened.notes == [note]
    assert reopened.sort_order is SortOrder.OLDEST


@pytest.mark.asyncio
async def test_store_falls_back_when_sqlite_value_is_corrupt(tmp_path) -> None:
    path = tmp_path / "notely.db"
    gateway = SQLiteGateway(path)
    _execute(path, "INSERT INTO kv (key, value, updated_at) VALUES ('notes', '[', 0)")
    store = NoteStore(gateway)
    await store.init()
    assert store.notes == []
