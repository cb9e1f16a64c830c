"""Latest-value change feeds."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

T = TypeVar("T")

Handler = Callable[[T], Awaitable[None]]
Unsubscribe = Callable[[], None]


class ChangeFeed(Generic[T]):
    """Multi-subscriber push channel that remembers the latest value.

    Nothing is replayed to late subscribers; they can read ``value`` instead.
    A publish that is overtaken by a newer one stops delivering, so the last
    value every subscriber receives is always the latest one.
    """

    def __init__(self, initial: T) -> None:
        self._value = initial
        self._generation = 0
        self._handlers: list[Handler[T]] = []

    @property
    def value(self) -> T:
        return self._value

    def subscribe(self, handler: Handler[T]) -> Unsubscribe:
        self._handlers.append(handler)

        def _unsubscribe() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return _unsubscribe

    async def publish(self, value: T) -> None:
        self._value = value
        self._generation += 1
        generation = self._generation
        handlers = list(self._handlers)
        for handler in handlers:
            if generation != self._generation:
                return
            await handler(value)

    def __len__(self) -> int:
        return len(self._handlers)
