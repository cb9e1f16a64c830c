"""Persistence gateway interfaces."""

from __future__ import annotations

import copy
from typing import Protocol


class PersistenceError(RuntimeError):
    """The underlying storage medium failed."""


class PersistenceGateway(Protocol):
    async def get(self, key: str) -> object | None: ...

    async def set(self, key: str, value: object) -> None: ...


class InMemoryGateway:
    def __init__(self, initial: dict[str, object] | None = None) -> None:
        self._data: dict[str, object] = copy.deepcopy(initial or {})

    async def get(self, key: str) -> object | None:
        if key not in self._data:
            return None
        return copy.deepcopy(self._data[key])

    async def set(self, key: str, value: object) -> None:
        self._data[key] = copy.deepcopy(value)
