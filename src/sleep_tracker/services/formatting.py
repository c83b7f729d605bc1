"""Text formatting for sleep history and the countdown display."""

import logging
from collections.abc import Iterable
from datetime import UTC, datetime, timedelta, timezone, tzinfo

from sleep_tracker.domain.sessions import SessionRecord

_QUALITY_LABELS = {
    0: "Very bad",
    1: "Poor",
    2: "So-so",
    3: "OK",
    4: "Pretty good",
    5: "Excellent",
}

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)

_logger = logging.getLogger(__name__)


def format_time_left(milli: int, display_offset_hours: int = 3) -> str:
    """Format remaining countdown milliseconds as ``HH:MM:SS``.

    The offset is subtracted from the instant and the result is rendered in a
    zone with that same fixed offset, so the output reads as a duration.
    """
    zone = timezone(timedelta(hours=display_offset_hours))
    instant = _EPOCH + timedelta(milliseconds=milli - display_offset_hours * 3_600_000)
    return instant.astimezone(zone).strftime("%H:%M:%S")


def format_quality(quality: int) -> str:
    return _QUALITY_LABELS.get(quality, "--")


def format_nights(nights: Iterable[SessionRecord], tz: tzinfo = UTC) -> str:
    """Render the history, most recent first, as plain text blocks."""
    try:
        blocks = [_format_night(night, tz) for night in nights]
    except (TypeError, AttributeError, ValueError, OverflowError):
        _logger.warning("Cannot format malformed sleep history")
        return ""
    return "\n\n".join(blocks)


def _format_night(night: SessionRecord, tz: tzinfo) -> str:
    lines = [f"Start: {_format_instant(night.start_time_milli, tz)}"]
    if not night.is_open:
        lines.append(f"End: {_format_instant(night.end_time_milli, tz)}")
    lines.append(f"Quality: {format_quality(night.sleep_quality)}")
    elapsed = timedelta(milliseconds=night.end_time_milli - night.start_time_milli)
    total_seconds = int(elapsed.total_seconds())
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    lines.append(f"Hours:Minutes:Seconds: {hours}:{minutes:02d}:{seconds:02d}")
    return "\n".join(lines)


def _format_instant(milli: int, tz: tzinfo) -> str:
    instant = (_EPOCH + timedelta(milliseconds=milli)).astimezone(tz)
    return instant.strftime("%A %b-%d-%Y Time: %H:%M")
