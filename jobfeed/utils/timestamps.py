"""Timestamp utilities for UTC handling and datetime parsing.

Stored job files use the JavaScript ``toISOString`` layout
(``2026-10-18T06:03:00.123Z``), so formatting here emits millisecond
precision with a ``Z`` suffix.
"""

from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Optional, Union


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Ensure a datetime is timezone-aware and in UTC.

    If the datetime is timezone-naive, it's treated as UTC.
    If the datetime has a different timezone, it's converted to UTC.

    Args:
        dt: Datetime to convert (can be None)

    Returns:
        Timezone-aware datetime in UTC, or None if input is None
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(timezone.utc)


def parse_iso_datetime(iso_string: Optional[str]) -> Optional[datetime]:
    """Parse an ISO 8601 datetime string to UTC datetime.

    Supports:
    - 2025-11-04T12:00:00.123Z
    - 2025-11-04T12:00:00+00:00
    - 2025-11-04T12:00:00
    - 2025-11-04

    Args:
        iso_string: ISO 8601 formatted datetime string

    Returns:
        Timezone-aware datetime in UTC, or None if parsing fails
    """
    if not iso_string or not iso_string.strip():
        return None

    cleaned = iso_string.strip()
    # fromisoformat only accepts 'Z' from Python 3.11 onwards
    if cleaned.endswith("Z") or cleaned.endswith("z"):
        cleaned = cleaned[:-1] + "+00:00"

    try:
        return ensure_utc(datetime.fromisoformat(cleaned))
    except ValueError:
        pass

    try:
        return ensure_utc(datetime.strptime(cleaned, "%Y-%m-%d"))
    except ValueError:
        return None


def parse_timestamp(value: Union[str, datetime, None]) -> Optional[datetime]:
    """Parse a feed or stored timestamp in any supported format.

    Accepts datetimes, ISO 8601 strings, and RFC 822 dates as used by RSS
    ``pubDate`` elements (``Sat, 18 Oct 2026 06:03:00 GMT``).

    Args:
        value: Timestamp value to parse

    Returns:
        Timezone-aware datetime in UTC, or None if the value is unparseable
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return ensure_utc(value)
    if not isinstance(value, str):
        return None

    parsed = parse_iso_datetime(value)
    if parsed is not None:
        return parsed

    try:
        return ensure_utc(parsedate_to_datetime(value.strip()))
    except (TypeError, ValueError, IndexError):
        return None


def format_timestamp(dt: datetime) -> str:
    """Format a datetime as ISO 8601 UTC with millisecond precision.

    Example:
        >>> from datetime import datetime, timezone
        >>> format_timestamp(datetime(2025, 11, 4, 12, 0, 0, 123456, tzinfo=timezone.utc))
        '2025-11-04T12:00:00.123Z'
    """
    dt_utc = ensure_utc(dt)
    if dt_utc is None:
        return ""
    return dt_utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt_utc.microsecond // 1000:03d}Z"
