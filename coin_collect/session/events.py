from __future__ import annotations

from collections.abc import Callable
from typing import Generic, TypeVar

import structlog

T = TypeVar("T")

logger = structlog.get_logger(__name__)


class Channel(Generic[T]):
    """Synchronous fan-out of values to registered listeners.

    ``subscribe`` returns a callable that removes the listener again. When
    ``replay_last`` is set, new listeners immediately receive the latest
    published value.
    """

    def __init__(self, name: str, *, replay_last: bool = False, initial: T | None = None) -> None:
        self.name = name
        self._listeners: list[Callable[[T], None]] = []
        self._replay_last = replay_last
        self._last: T | None = initial

    @property
    def last_value(self) -> T | None:
        return self._last

    def subscribe(self, listener: Callable[[T], None]) -> Callable[[], None]:
        self._listeners.append(listener)
        if self._replay_last and self._last is not None:
            listener(self._last)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def publish(self, value: T) -> None:
        self._last = value
        for listener in list(self._listeners):
            listener(value)

    def __len__(self) -> int:
        return len(self._listeners)
