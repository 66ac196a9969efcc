"""Time formatting helpers for transcript output."""

import logging
from datetime import datetime, timezone

logger = logging.getLogger(__name__)


def format_ms(ms: int | float) -> str:
    """Format a millisecond offset as ``m:ss``.

    Minutes are not padded and may exceed 59; seconds are always two digits.

    Args:
        ms: Offset in milliseconds

    Returns:
        Formatted time, e.g. ``format_ms(65000) == "1:05"``
    """
    ms = int(ms)
    minutes = ms // 60000
    seconds = (ms % 60000) // 1000
    return f"{minutes}:{seconds:02d}"


def format_duration(seconds: int | float | None) -> str | None:
    """Format a call duration in seconds as ``<m>m <s>s``.

    Returns None when the duration is missing or zero.
    """
    if not seconds:
        return None
    seconds = int(seconds)
    return f"{seconds // 60}m {seconds % 60}s"


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO-8601 timestamp from Gong, treating naive values as UTC.

    Args:
        value: Timestamp string, e.g. ``2024-03-01T15:00:00-08:00``

    Returns:
        Timezone-aware datetime in UTC, or None if missing or unparseable
    """
    if not value:
        return None

    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        logger.debug("Unparseable timestamp", extra={"value": value})
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_call_date(value: str | None, date_only: bool = True) -> str | None:
    """Format a call start time for a transcript header.

    Args:
        value: ISO-8601 timestamp
        date_only: Return ``YYYY-MM-DD`` instead of the full UTC timestamp

    Returns:
        Formatted UTC date/time, or None if the value is missing or invalid
    """
    parsed = parse_timestamp(value)
    if parsed is None:
        return None
    if date_only:
        return parsed.date().isoformat()
    return parsed.isoformat(timespec="milliseconds").replace("+00:00", "Z")
