"""SQLite-backed key-value gateway."""

from __future__ import annotations

import asyncio
import json
import sqlite3
from pathlib import Path

from notely.core.settings import Settings
from notely.storage.gateway import PersistenceError
from notely.utils.time import now_ms

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"


def store_path(settings: Settings) -> Path:
    return settings.data_dir / settings.db_name


def open_db(path: Path) -> sqlite3.Connection:
    conn = sqlite3.connect(path)
    conn.row_factory = sqlite3.Row
    return conn


def create_schema(path: Path) -> None:
    """Create the data directory and apply every ``migrations/*.sql`` script."""
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = open_db(path)
    try:
        for script in sorted(MIGRATIONS_DIR.glob("*.sql")):
            conn.executescript(script.read_text(encoding="utf-8"))
        conn.commit()
    finally:
        conn.close()


class SQLiteGateway:
    """Stores JSON-encoded values in the ``kv`` table.

    Each call opens its own connection inside a worker thread.
    """

    def __init__(self, path: Path) -> None:
        self._path = path
        try:
            create_schema(path)
        except (OSError, sqlite3.Error) as exc:
            raise PersistenceError(f"Cannot initialize {path}: {exc}") from exc

    async def get(self, key: str) -> object | None:
        return await asyncio.to_thread(self._get_sync, key)

    async def set(self, key: str, value: object) -> None:
        await asyncio.to_thread(self._set_sync, key, value)

    def _get_sync(self, key: str) -> object | None:
        conn = self._open()
        try:
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        except sqlite3.Error as exc:
            raise PersistenceError(f"Failed to read {key!r}: {exc}") from exc
        finally:
            conn.close()
        if row is None:
            return None
        try:
            return json.loads(row["value"])
        except json.JSONDecodeError as exc:
            raise PersistenceError(f"Corrupt value stored under {key!r}") from exc

    def _set_sync(self, key: str, value: object) -> None:
        payload = json.dumps(value)
        conn = self._open()
        try:
            with conn:
                conn.execute(
                    "INSERT INTO kv (key, value, updated_at) VALUES (?, ?, ?) "
                    "ON CONFLICT(key) DO UPDATE SET value=excluded.value, "
                    "updated_at=excluded.updated_at",
                    (key, payload, now_ms()),
                )
        except sqlite3.Error as exc:
            raise PersistenceError(f"Failed to write {key!r}: {exc}") from exc
        finally:
            conn.close()

    def _open(self) -> sqlite3.Connection:
        try:
            return open_db(self._path)
        except sqlite3.Error as exc:
            raise PersistenceError(f"Cannot open {self._path}: {exc}") from exc
