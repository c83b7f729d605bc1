"""Shared test fixtures."""

import threading
from dataclasses import dataclass, field, replace

import pytest

from sleep_tracker.config import Settings
from sleep_tracker.containers import AppContainer, build_container_for
from sleep_tracker.domain.errors import RecordNotFound, StoreUnavailable
from sleep_tracker.domain.sessions import SessionRecord
from sleep_tracker.services.sessions import SleepNightRepository


@dataclass
class InMemorySleepNightRepository(SleepNightRepository):
    """In-memory sleep record repository for tests."""

    nights: dict[int, SessionRecord] = field(default_factory=dict)
    next_id: int = 1

    def get_all(self) -> list[SessionRecord]:
        return sorted(self.nights.values(), key=lambda night: night.id, reverse=True)

    def get_most_recent(self) -> SessionRecord | None:
        nights = self.get_all()
        return nights[0] if nights else None

    def insert(self, record: SessionRecord) -> SessionRecord:
        night = replace(record, id=self.next_id)
        self.nights[night.id] = night
        self.next_id += 1
        return night

    def update(self, record: SessionRecord) -> None:
        if record.id not in self.nights:
            raise RecordNotFound(record.id)
        self.nights[record.id] = record

    def clear_all(self) -> None:
        self.nights.clear()


@dataclass
class FailingSleepNightRepository(InMemorySleepNightRepository):
    """Repository that raises on selected operations."""

    fail_on: set[str] = field(default_factory=set)
    error: Exception = field(default_factory=lambda: StoreUnavailable("db offline"))

    def get_all(self) -> list[SessionRecord]:
        self._maybe_fail("get_all")
        return super().get_all()

    def get_most_recent(self) -> SessionRecord | None:
        self._maybe_fail("get_most_recent")
        return super().get_most_recent()

    def insert(self, record: SessionRecord) -> SessionRecord:
        self._maybe_fail("insert")
        return super().insert(record)

    def update(self, record: SessionRecord) -> None:
        self._maybe_fail("update")
        super().update(record)

    def clear_all(self) -> None:
        self._maybe_fail("clear_all")
        super().clear_all()

    def _maybe_fail(self, operation: str) -> None:
        if operation in self.fail_on:
            raise self.error


@dataclass
class GatedSleepNightRepository(InMemorySleepNightRepository):
    """Repository whose reads block until the gate opens."""

    gate: threading.Event = field(default_factory=threading.Event)
    entered: threading.Event = field(default_factory=threading.Event)

    def get_all(self) -> list[SessionRecord]:
        self.entered.set()
        self.gate.wait(timeout=5)
        return super().get_all()


@dataclass
class FakeClock:
    """Clock returning a settable millisecond value."""

    now: int = 0
    step: int = 0

    def __call__(self) -> int:
        current = self.now
        self.now += self.step
        return current


@dataclass
class RecordingTimerListener:
    """Collects timer notifications."""

    ticks: list[int] = field(default_factory=list)
    finished: int = 0

    def on_tick(self, milli_until_finished: int) -> None:
        self.ticks.append(milli_until_finished)

    def on_finish(self) -> None:
        self.finished += 1


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
    )


@pytest.fixture
def sleep_repository() -> InMemorySleepNightRepository:
    return InMemorySleepNightRepository()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def container(
    settings: Settings,
    sleep_repository: InMemorySleepNightRepository,
    clock: FakeClock,
) -> AppContainer:
    return build_container_for(settings, sleep_repository, clock=clock)
