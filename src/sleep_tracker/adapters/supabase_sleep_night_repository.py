"""Supabase-backed sleep record repository."""

from dataclasses import dataclass

from supabase import Client

from sleep_tracker.domain.errors import RecordNotFound, StoreUnavailable
from sleep_tracker.domain.sessions import SessionRecord
from sleep_tracker.services.sessions import SleepNightRepository

_COLUMNS = "night_id, start_time_milli, end_time_milli, quality_rating"


@dataclass
class SupabaseSleepNightRepository(SleepNightRepository):
    """Supabase implementation for sleep records."""

    client: Client
    table: str = "daily_sleep_quality_table"

    def get_all(self) -> list[SessionRecord]:
        """Return every record, newest first."""
        response = (
            self.client.table(self.table)
            .select(_COLUMNS)
            .order("night_id", desc=True)
            .execute()
        )
        return [_to_record(row) for row in response.data or []]

    def get_most_recent(self) -> SessionRecord | None:
        """Return the newest record, if present."""
        response = (
            self.client.table(self.table)
            .select(_COLUMNS)
            .order("night_id", desc=True)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _to_record(response.data[0])

    def insert(self, record: SessionRecord) -> SessionRecord:
        """Insert a record and return it with the assigned id."""
        response = (
            self.client.table(self.table)
            .insert(
                {
                    "start_time_milli": record.start_time_milli,
                    "end_time_milli": record.end_time_milli,
                    "quality_rating": record.sleep_quality,
                }
            )
            .execute()
        )
        if not response.data:
            raise StoreUnavailable("Failed to create sleep record")
        return _to_record(response.data[0])

    def update(self, record: SessionRecord) -> None:
        """Replace the stored fields of an existing record."""
        if record.id is None:
            raise RecordNotFound(None)
        response = (
            self.client.table(self.table)
            .update(
                {
                    "start_time_milli": record.start_time_milli,
                    "end_time_milli": record.end_time_milli,
                    "quality_rating": record.sleep_quality,
                }
            )
            .eq("night_id", record.id)
            .execute()
        )
        if not response.data:
            raise RecordNotFound(record.id)

    def clear_all(self) -> None:
        """Delete every record."""
        # PostgREST refuses an unfiltered delete.
        self.client.table(self.table).delete().gte("night_id", 0).execute()


def _to_record(row: dict[str, object]) -> SessionRecord:
    quality = row.get("quality_rating")
    return SessionRecord(
        id=int(row["night_id"]),
        start_time_milli=int(row["start_time_milli"]),
        end_time_milli=int(row["end_time_milli"]),
        sleep_quality=int(quality) if quality is not None else -1,
    )
