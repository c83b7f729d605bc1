"""Single-writer observable value."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Generic, TypeVar

T = TypeVar("T")

_logger = logging.getLogger(__name__)


@dataclass
class Observable(Generic[T]):
    """Holds a value and notifies subscribers whenever it is replaced."""

    value: T
    _subscribers: list[Callable[[T], None]] = field(default_factory=list)

    def subscribe(self, callback: Callable[[T], None]) -> Callable[[], None]:
        """Register a callback and return a function that removes it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def set(self, value: T) -> None:
        """Replace the value and notify every subscriber."""
        self.value = value
        for callback in list(self._subscribers):
            try:
                callback(value)
            except Exception:
                _logger.exception("Observer %r failed", callback)
