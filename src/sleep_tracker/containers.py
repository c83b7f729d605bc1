"""Dependency container wiring for the application."""

from collections.abc import Callable
from dataclasses import dataclass

from supabase import create_client

from sleep_tracker.adapters.supabase_sleep_night_repository import (
    SupabaseSleepNightRepository,
)
from sleep_tracker.config import Settings
from sleep_tracker.services.formatting import format_nights
from sleep_tracker.services.sessions import (
    HistoryFormatter,
    SleepNightRepository,
    SleepTrackerController,
    current_time_milli,
)
from sleep_tracker.services.timer import SessionTimer


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    sleep_repository: SleepNightRepository
    formatter: HistoryFormatter
    create_controller: Callable[[], SleepTrackerController]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    sleep_repository = SupabaseSleepNightRepository(
        supabase_client, table=resolved_settings.sleep_table
    )
    return build_container_for(resolved_settings, sleep_repository)


def build_container_for(
    settings: Settings,
    sleep_repository: SleepNightRepository,
    formatter: HistoryFormatter = format_nights,
    clock: Callable[[], int] = current_time_milli,
) -> AppContainer:
    """Wire a container around an existing repository."""

    def create_controller() -> SleepTrackerController:
        timer = SessionTimer(
            duration_seconds=settings.timer_duration_seconds,
            interval_seconds=settings.timer_interval_seconds,
        )
        return SleepTrackerController(
            repository=sleep_repository,
            timer=timer,
            formatter=formatter,
            clock=clock,
            display_offset_hours=settings.timer_display_offset_hours,
        )

    return AppContainer(
        settings=settings,
        sleep_repository=sleep_repository,
        formatter=formatter,
        create_controller=create_controller,
    )
