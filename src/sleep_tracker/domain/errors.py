"""Error types raised by the sleep store and controller."""


class SleepTrackerError(RuntimeError):
    """Base class for sleep tracker failures."""


class StoreUnavailable(SleepTrackerError):
    """The store could not be reached or rejected the operation."""


class RecordNotFound(SleepTrackerError):
    """An update targeted a record id that does not exist."""

    def __init__(self, night_id: int | None) -> None:
        super().__init__(f"Sleep record {night_id} not found")
        self.night_id = night_id


class InvariantViolation(SleepTrackerError):
    """More than one open record was found in the store."""
