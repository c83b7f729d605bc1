"""Controller that owns the sleep session currently being tracked."""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field, replace
from typing import Protocol, TypeVar

from sleep_tracker.domain.errors import (
    InvariantViolation,
    SleepTrackerError,
    StoreUnavailable,
)
from sleep_tracker.domain.sessions import SessionRecord, SessionState
from sleep_tracker.services.formatting import format_nights, format_time_left
from sleep_tracker.services.observable import Observable
from sleep_tracker.services.timer import SessionTimer, TimerListener

T = TypeVar("T")

_logger = logging.getLogger(__name__)


class SleepNightRepository(Protocol):
    """Persistence interface for sleep records.

    Implementations may block; the controller calls them from a worker thread.
    """

    def get_all(self) -> list[SessionRecord]:
        """Return every record, most recent first."""

    def get_most_recent(self) -> SessionRecord | None:
        """Return the most recent record, if any."""

    def insert(self, record: SessionRecord) -> SessionRecord:
        """Persist a new record and return it with its assigned id."""

    def update(self, record: SessionRecord) -> None:
        """Replace the record with the same id."""

    def clear_all(self) -> None:
        """Delete every record."""


HistoryFormatter = Callable[[Sequence[SessionRecord]], str]


def current_time_milli() -> int:
    """Return wall-clock time in milliseconds since the epoch."""
    return time.time_ns() // 1_000_000


@dataclass
class TimerLogListener(TimerListener):
    """Logs countdown progress."""

    display_offset_hours: int = 3

    def on_tick(self, milli_until_finished: int) -> None:
        _logger.info(
            "Time left: %s",
            format_time_left(milli_until_finished, self.display_offset_hours),
        )

    def on_finish(self) -> None:
        _logger.info("Timer finished")


@dataclass
class SleepTrackerController:
    """Tracks one sleep session at a time.

    Commands return immediately with the scheduled task; results are published
    through ``state``. Store work is serialized in call order and every task is
    cancelled by ``shutdown``. Must be created inside a running event loop.
    """

    repository: SleepNightRepository
    timer: SessionTimer = field(default_factory=SessionTimer)
    formatter: HistoryFormatter = format_nights
    clock: Callable[[], int] = current_time_milli
    display_offset_hours: int = 3
    state: Observable[SessionState] = field(init=False)
    _lock: asyncio.Lock = field(init=False)
    _tasks: set[asyncio.Task[None]] = field(init=False)
    _closed: bool = field(init=False, default=False)

    def __post_init__(self) -> None:
        self.state = Observable(SessionState())
        self._lock = asyncio.Lock()
        self._tasks = set()
        self._unsubscribe_timer = self.timer.subscribe(
            TimerLogListener(self.display_offset_hours)
        )
        self.initialize()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def nights_text(self) -> str:
        """Return the history rendered by the injected formatter."""
        return self.formatter(self.state.value.nights)

    def initialize(self) -> asyncio.Task[None] | None:
        """Reload the current session from the store."""
        return self._launch("initialize", self._initialize)

    def start_tracking(self) -> asyncio.Task[None] | None:
        """Open a new session and start the countdown."""
        _logger.info("Start tracking")
        return self._launch("start_tracking", self._start_tracking)

    def stop_tracking(self) -> asyncio.Task[None] | None:
        """Close the current session, if there is one."""
        _logger.info("Stop tracking")
        return self._launch("stop_tracking", self._stop_tracking)

    def clear_history(self) -> asyncio.Task[None] | None:
        """Delete every stored session."""
        _logger.info("Clear history")
        return self._launch("clear_history", self._clear_history)

    async def shutdown(self) -> None:
        """Cancel outstanding work and the timer. Safe to call repeatedly."""
        if self._closed:
            return
        self._closed = True
        self.timer.cancel()
        self._unsubscribe_timer()
        current = asyncio.current_task()
        pending = [task for task in self._tasks if task is not current]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        _logger.info("Controller shut down, cancelled %s task(s)", len(pending))

    async def wait_idle(self) -> None:
        """Wait until every scheduled command has finished."""
        current = asyncio.current_task()
        pending = [task for task in self._tasks if task is not current]
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    async def __aenter__(self) -> "SleepTrackerController":
        return self

    async def __aexit__(self, *_exc_info: object) -> None:
        await self.shutdown()

    async def _initialize(self) -> SessionState:
        nights = await _io(self.repository.get_all)
        try:
            _ensure_single_open(nights)
        except InvariantViolation as exc:
            _logger.warning("Inconsistent sleep history: %s", exc)
        tonight = await _io(self._tonight_from_store)
        return SessionState(tonight=tonight, nights=tuple(nights))

    async def _start_tracking(self) -> SessionState:
        night = SessionRecord.open_at(self.clock())
        await _io(self.repository.insert, night)
        self.timer.start()
        _logger.info("Timer started")
        tonight = await _io(self._tonight_from_store)
        nights = await _io(self.repository.get_all)
        return SessionState(tonight=tonight, nights=tuple(nights))

    async def _stop_tracking(self) -> SessionState | None:
        tonight = self.state.value.tonight
        if tonight is None:
            return None
        # A stopped record must never look open again.
        end_time_milli = max(self.clock(), tonight.start_time_milli + 1)
        stopped = replace(tonight, end_time_milli=end_time_milli)
        await _io(self.repository.update, stopped)
        self.timer.cancel()
        _logger.info("Timer cancelled")
        nights = await _io(self.repository.get_all)
        return SessionState(tonight=stopped, nights=tuple(nights))

    async def _clear_history(self) -> SessionState:
        await _io(self.repository.clear_all)
        return SessionState()

    def _tonight_from_store(self) -> SessionRecord | None:
        night = self.repository.get_most_recent()
        if night is None or not night.is_open:
            return None
        return night

    def _launch(
        self, action: str, command: Callable[[], Awaitable[SessionState | None]]
    ) -> asyncio.Task[None] | None:
        if self._closed:
            _logger.warning("Ignoring %s after shutdown", action)
            return None
        task = asyncio.get_running_loop().create_task(self._run(action, command))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(
        self, action: str, command: Callable[[], Awaitable[SessionState | None]]
    ) -> None:
        async with self._lock:
            if self._closed:
                return
            try:
                new_state = await command()
            except Exception as exc:
                _logger.exception("Sleep tracker %s failed", action)
                self._publish(replace(self.state.value, error=_as_store_error(exc)))
                return
            if new_state is not None:
                self._publish(new_state)

    def _publish(self, new_state: SessionState) -> None:
        if self._closed:
            _logger.debug("Dropping state update after shutdown")
            return
        self.state.set(new_state)


async def _io(func: Callable[..., T], *args: object) -> T:
    """Run a blocking store call in a worker thread."""
    return await asyncio.to_thread(func, *args)


def _ensure_single_open(nights: Sequence[SessionRecord]) -> None:
    open_count = sum(1 for night in nights if night.is_open)
    if open_count > 1:
        raise InvariantViolation(
            f"{open_count} open sleep records found, using the most recent"
        )


def _as_store_error(exc: Exception) -> SleepTrackerError:
    if isinstance(exc, SleepTrackerError):
        return exc
    error = StoreUnavailable(str(exc) or type(exc).__name__)
    error.__cause__ = exc
    return error
