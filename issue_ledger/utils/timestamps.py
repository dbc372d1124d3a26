"""Timestamp helpers shared by the engine and the comment codec."""

from datetime import UTC, datetime


def ensure_utc(dt: datetime) -> datetime:
    """Return ``dt`` converted to UTC, treating naive values as UTC already."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def format_rfc3339(dt: datetime) -> str:
    """Format a datetime as a second-precision RFC 3339 UTC string.

    Example:
        >>> format_rfc3339(datetime(2024, 1, 15, 10, 30, tzinfo=UTC))
        '2024-01-15T10:30:00Z'
    """
    return ensure_utc(dt).strftime("%Y-%m-%dT%H:%M:%SZ")


def format_timestamp(dt: datetime) -> str:
    """Format a datetime as a full-precision RFC 3339 UTC string.

    Sub-second digits are kept, so the result parses back to an equal
    datetime.

    Example:
        >>> format_timestamp(datetime(2024, 1, 15, 10, 30, 0, 500000, tzinfo=UTC))
        '2024-01-15T10:30:00.500000Z'
    """
    return ensure_utc(dt).isoformat().replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime:
    """Parse an RFC 3339 timestamp into an aware UTC datetime.

    Accepts a ``Z`` suffix, a numeric offset, and fractional seconds.

    Args:
        value: Timestamp string

    Returns:
        Timezone-aware datetime in UTC

    Raises:
        ValueError: If the string is not a recognised timestamp or has no
            timezone designator
    """
    text = value.strip()
    # Handle ISO format with Z timezone
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        raise ValueError(f"Timestamp has no timezone: {value}")
    return parsed.astimezone(UTC)
