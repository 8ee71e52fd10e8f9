"""
UTC datetime utilities for consistent timezone handling.

All datetime values in the system should be timezone-aware UTC.
Use these helpers instead of datetime.now() or datetime.utcnow().
"""

import math
from datetime import UTC, datetime

_SECONDS_PER_DAY = 86_400


def utc_now() -> datetime:
    """
    Return the current UTC datetime with timezone info.

    Use this instead of:
        - datetime.now() - naive, uses local timezone
        - datetime.utcnow() - naive, deprecated in Python 3.12
        - datetime.now(UTC) - correct but verbose

    Returns:
        Timezone-aware datetime in UTC
    """
    return datetime.now(UTC)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """
    Ensure a datetime is UTC-aware.

    - If None, returns None
    - If naive, assumes UTC and attaches timezone
    - If aware, converts to UTC

    Use at upstream/cache boundaries to normalize datetimes.

    Args:
        dt: A datetime that may be naive or aware

    Returns:
        UTC-aware datetime or None
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        # Naive datetime - assume it's UTC and attach timezone
        return dt.replace(tzinfo=UTC)

    # Aware datetime - convert to UTC
    return dt.astimezone(UTC)


def parse_datetime(value: object) -> datetime | None:
    """
    Parse an upstream timestamp into a UTC-aware datetime.

    Accepts ISO 8601 strings (with or without offset, "Z" suffix allowed)
    and datetime instances. Empty values and unparseable strings yield None.

    Args:
        value: Raw field value from an upstream record or cache payload

    Returns:
        UTC-aware datetime or None
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return ensure_utc(value)
    if not isinstance(value, str):
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return ensure_utc(datetime.fromisoformat(text))
    except ValueError:
        return None


def whole_days_between(start: datetime, end: datetime) -> int:
    """
    Return floor((end - start) in days).

    Negative when start lies after end (e.g. clock skew on the upstream).

    Args:
        start: Earlier instant (UTC-aware)
        end: Later instant (UTC-aware)

    Returns:
        Whole days, rounded toward negative infinity
    """
    return math.floor((end - start).total_seconds() / _SECONDS_PER_DAY)


def to_iso(dt: datetime | None) -> str | None:
    """Serialize a datetime as ISO 8601 (None passes through)."""
    return dt.isoformat() if dt is not None else None
