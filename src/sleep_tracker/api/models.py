"""Pydantic models for sleep API responses."""

from pydantic import BaseModel, Field

from sleep_tracker.domain.sessions import SessionRecord


class SleepNightModel(BaseModel):
    """One stored sleep session."""

    id: int | None
    start_time_milli: int
    end_time_milli: int
    sleep_quality: int
    is_open: bool

    @classmethod
    def from_record(cls, record: SessionRecord) -> "SleepNightModel":
        return cls(
            id=record.id,
            start_time_milli=record.start_time_milli,
            end_time_milli=record.end_time_milli,
            sleep_quality=record.sleep_quality,
            is_open=record.is_open,
        )


class SleepStateResponse(BaseModel):
    """Controller state as seen by a client."""

    tonight: SleepNightModel | None = None
    nights: list[SleepNightModel] = Field(default_factory=list)
    nights_text: str = ""
    error: str | None = None
    start_enabled: bool = True
    stop_enabled: bool = False
    clear_enabled: bool = False
    timer_running: bool = False
    time_left: str | None = None
