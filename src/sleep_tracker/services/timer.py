"""Countdown timer that reports progress while a session is tracked."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

_logger = logging.getLogger(__name__)


class TimerListener(Protocol):
    """Receives countdown notifications."""

    def on_tick(self, milli_until_finished: int) -> None:
        """Called at each interval boundary with the time remaining."""

    def on_finish(self) -> None:
        """Called once when the countdown elapses."""


@dataclass
class SessionTimer:
    """Asyncio countdown emitting tick and finish notifications.

    Notifications are observational; the timer never touches persisted data.
    """

    duration_seconds: float = 45 * 60
    interval_seconds: float = 1.0
    time_left_milli: int | None = None
    _listeners: list[TimerListener] = field(default_factory=list)
    _task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def subscribe(self, listener: TimerListener) -> Callable[[], None]:
        """Register a listener and return a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def start(self) -> None:
        """Start counting down, replacing any run already in progress."""
        self.cancel()
        self.time_left_milli = round(self.duration_seconds * 1000)
        self._task = asyncio.get_running_loop().create_task(self._run())

    def cancel(self) -> None:
        """Stop the countdown; no notification fires afterwards."""
        if self._task is None:
            return
        self._task.cancel()
        self._task = None

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.duration_seconds
        remaining = self.duration_seconds
        while remaining > 0:
            self.time_left_milli = round(remaining * 1000)
            self._notify(lambda listener: listener.on_tick(self.time_left_milli))
            await asyncio.sleep(min(self.interval_seconds, remaining))
            remaining = deadline - loop.time()
        self.time_left_milli = 0
        self._notify(lambda listener: listener.on_finish())
        if self._task is asyncio.current_task():
            self._task = None

    def _notify(self, call: Callable[[TimerListener], None]) -> None:
        for listener in list(self._listeners):
            try:
                call(listener)
            except Exception:
                _logger.exception("Timer listener %r failed", listener)
