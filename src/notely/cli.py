"""Typer CLI for Notely."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Awaitable, Callable
from dataclasses import replace
from pathlib import Path
from typing import NoReturn, TypeVar

import typer
from rich.console import Console
from rich.markup import escape

from notely.core.models import Note, SortOrder
from notely.core.settings import Settings, load_settings
from notely.core.store import NoteStore
from notely.logging_setup import setup_logging
from notely.storage.gateway import InMemoryGateway, PersistenceError, PersistenceGateway
from notely.storage.kv import SQLiteGateway, store_path
from notely.utils.time import format_ms

T = TypeVar("T")

app = typer.Typer(help="Notely notes CLI")
console = Console(soft_wrap=True)

config_app = typer.Typer(help="Configuration")
db_app = typer.Typer(help="Database operations")


@app.command("list")
def notes_list(
    search: str = typer.Option("", "--search", "-s", help="Filter by text"),
) -> None:
    """List notes in the current sort order."""

    async def _run(store: NoteStore) -> list[Note]:
        return store.get_sorted_notes(search)

    notes = _with_store(_run)
    if not notes:
        console.print("no notes")
        return
    for note in notes:
        console.print(
            f"{escape(note.id)} | {escape(note.title)} "
            f"| created={format_ms(note.created_at)} "
            f"| updated={format_ms(note.updated_at)}"
        )


@app.command("show")
def notes_show(note_id: str) -> None:
    async def _run(store: NoteStore) -> Note | None:
        return store.get_note(note_id)

    note = _with_store(_run)
    if note is None:
        _fail(f"no note with id {note_id}")
    console.print(f"[bold]{escape(note.title)}[/bold]")
    console.print(note.content, markup=False)
    console.print(
        f"created {format_ms(note.created_at)} | updated {format_ms(note.updated_at)}"
    )


@app.command("add")
def notes_add(title: str, content: str) -> None:
    _require_text(title, "title")
    _require_text(content, "content")

    async def _run(store: NoteStore) -> Note:
        return await store.add_note(title, content)

    note = _with_store(_run)
    console.print(f"created note {escape(note.id)}")


@app.command("edit")
def notes_edit(
    note_id: str,
    title: str | None = typer.Option(None, "--title", "-t"),
    content: str | None = typer.Option(None, "--content", "-c"),
) -> None:
    if title is None and content is None:
        _fail("nothing to change, pass --title and/or --content")
    if title is not None:
        _require_text(title, "title")
    if content is not None:
        _require_text(content, "content")

    async def _run(store: NoteStore) -> Note | None:
        note = store.get_note(note_id)
        if note is None:
            return None
        changed = replace(
            note,
            title=note.title if title is None else title,
            content=note.content if content is None else content,
        )
        return await store.update_note(changed)

    note = _with_store(_run)
    if note is None:
        _fail(f"no note with id {note_id}")
    console.print(f"updated note {escape(note.id)}")


@app.command("delete")
def notes_delete(
    note_id: str,
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    if not yes and not typer.confirm("Are you sure you want to delete this note?"):
        console.print("cancelled")
        return

    async def _run(store: NoteStore) -> bool:
        if store.get_note(note_id) is None:
            return False
        await store.delete_note(note_id)
        return True

    if not _with_store(_run):
        _fail(f"no note with id {note_id}")
    console.print(f"deleted note {escape(note_id)}")


@app.command("sort")
def notes_sort(order: str | None = typer.Argument(None)) -> None:
    """Show or set the sort order (newest, oldest, alphabetical)."""
    parsed: SortOrder | None = None
    if order is not None:
        try:
            parsed = SortOrder.parse(order)
        except ValueError as exc:
            _fail(str(exc))

    async def _run(store: NoteStore) -> SortOrder:
        if parsed is not None:
            await store.set_sort_order(parsed)
        return store.sort_order

    current = _with_store(_run)
    console.print(f"sort order: {current.value}")


@app.command("export")
def notes_export(out_path: Path | None = typer.Option(None, "--out", "-o")) -> None:
    async def _run(store: NoteStore) -> list[Note]:
        return store.notes

    notes = _with_store(_run)
    output = json.dumps([note.to_record() for note in notes], indent=2)
    if out_path is None:
        console.print(output, markup=False, highlight=False)
        return
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(output, encoding="utf-8")
    console.print(f"exported {len(notes)} notes to {escape(str(out_path))}")


@config_app.command("show")
def config_show() -> None:
    settings = _load_settings()
    console.print(f"data_dir={escape(str(settings.data_dir))}")
    console.print(f"db_name={escape(settings.db_name)}")
    console.print(f"backend={settings.backend}")
    console.print(f"log_level={settings.log_level}")
    console.print(f"log_file={escape(str(settings.log_file))}")
    console.print(f"default_sort={settings.default_sort.value}")


@db_app.command("init")
def db_init() -> None:
    settings = _load_settings()
    try:
        SQLiteGateway(store_path(settings))
    except PersistenceError as exc:
        _fail(f"storage error: {exc}")
    console.print("database initialized")


app.add_typer(config_app, name="config")
app.add_typer(db_app, name="db")


def build_gateway(settings: Settings) -> PersistenceGateway:
    if settings.backend == "memory":
        return InMemoryGateway()
    return SQLiteGateway(store_path(settings))


def _with_store(action: Callable[[NoteStore], Awaitable[T]]) -> T:
    settings = _load_settings()
    setup_logging(settings)

    async def _run() -> T:
        store = NoteStore(build_gateway(settings), default_sort=settings.default_sort)
        await store.init()
        return await action(store)

    try:
        return asyncio.run(_run())
    except PersistenceError as exc:
        _fail(f"storage error: {exc}")


def _require_text(value: str, name: str) -> None:
    if not value.strip():
        _fail(f"{name} must not be empty")


def _fail(message: str) -> NoReturn:
    console.print(f"[red]error:[/red] {escape(message)}")
    raise typer.Exit(code=1)


def _load_settings() -> Settings:
    try:
        return load_settings()
    except ValueError as exc:
        _fail(f"invalid configuration: {exc}")
