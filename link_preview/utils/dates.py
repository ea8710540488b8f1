"""ISO-8601 date parsing with timezone normalization."""

from __future__ import annotations

from datetime import UTC, datetime, tzinfo

from dateutil import parser as date_parser


def parse_iso8601(value: str | None, default_tz: tzinfo = UTC) -> datetime | None:
    """Parse an ISO-8601 timestamp and return a timezone-aware UTC datetime.

    Args:
        value: Date string taken from page metadata.
        default_tz: Applied when the parsed datetime is naive.

    Returns:
        A timezone-aware datetime normalized to UTC, or None if parsing fails.
    """
    if not value or not value.strip():
        return None

    try:
        parsed = date_parser.isoparse(value.strip())
    except (ValueError, OverflowError):
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=default_tz)
    return parsed.astimezone(UTC)
