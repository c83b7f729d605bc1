"""Domain models for sleep sessions."""

from dataclasses import dataclass


@dataclass(frozen=True)
class SessionRecord:
    """Represents one persisted sleep session.

    A record is open while ``end_time_milli`` equals ``start_time_milli``.
    """

    id: int | None
    start_time_milli: int
    end_time_milli: int
    sleep_quality: int = -1

    @classmethod
    def open_at(cls, now_milli: int) -> "SessionRecord":
        """Return an unsaved record that starts and ends at ``now_milli``."""
        return cls(id=None, start_time_milli=now_milli, end_time_milli=now_milli)

    @property
    def is_open(self) -> bool:
        return self.end_time_milli == self.start_time_milli


@dataclass(frozen=True)
class SessionState:
    """Snapshot of what the controller currently knows."""

    tonight: SessionRecord | None = None
    nights: tuple[SessionRecord, ...] = ()
    error: Exception | None = None

    @property
    def start_enabled(self) -> bool:
        return self.tonight is None or not self.tonight.is_open

    @property
    def stop_enabled(self) -> bool:
        return self.tonight is not None and self.tonight.is_open

    @property
    def clear_enabled(self) -> bool:
        return bool(self.nights)
