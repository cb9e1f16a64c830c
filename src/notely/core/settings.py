"""Settings loader for Notely."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, cast

from dotenv import find_dotenv, load_dotenv

from notely.core.models import SortOrder

Backend = Literal["sqlite", "memory"]


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    db_name: str
    backend: Backend
    log_level: int
    log_file: Path | None
    default_sort: SortOrder


def _parse_backend(value: str, name: str) -> Backend:
    normalized = value.strip().lower()
    if normalized not in {"sqlite", "memory"}:
        raise ValueError(f"Invalid backend for {name}: {value}")
    return cast(Backend, normalized)


def _parse_log_level(value: str, name: str) -> int:
    normalized = value.strip().upper()
    if normalized.isdigit():
        return int(normalized)
    level = logging.getLevelName(normalized)
    if not isinstance(level, int):
        raise ValueError(f"Invalid log level for {name}: {value}")
    return level


def _parse_sort(value: str, name: str) -> SortOrder:
    try:
        return SortOrder.parse(value)
    except ValueError as exc:
        raise ValueError(f"Invalid sort order for {name}: {value}") from exc


def load_settings() -> Settings:
    load_dotenv(find_dotenv(usecwd=True))
    data_dir = Path(os.environ.get("NOTELY_DATA_DIR", "~/.notely")).expanduser()
    db_name = os.environ.get("NOTELY_DB_NAME", "notely.db")
    backend = _parse_backend(
        os.environ.get("NOTELY_BACKEND", "sqlite"), "NOTELY_BACKEND"
    )
    log_level = _parse_log_level(
        os.environ.get("NOTELY_LOG_LEVEL", "WARNING"), "NOTELY_LOG_LEVEL"
    )
    log_file_value = os.environ.get("NOTELY_LOG_FILE") or None
    log_file = Path(log_file_value).expanduser() if log_file_value else None
    default_sort = _parse_sort(
        os.environ.get("NOTELY_DEFAULT_SORT", "newest"), "NOTELY_DEFAULT_SORT"
    )

    return Settings(
        data_dir=data_dir,
        db_name=db_name,
        backend=backend,
        log_level=log_level,
        log_file=log_file,
        default_sort=default_sort,
    )
