"""UTC and chart-time helpers.

All times are UTC. Charts key indicator points by Unix seconds, so every
bar timestamp is converted with to_unix_seconds() at the indicator boundary.
"""

from __future__ import annotations

from datetime import UTC, datetime


def ensure_utc(dt: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def to_unix_seconds(dt: datetime) -> int:
    """Convert a datetime to whole Unix seconds (the chart time format)."""
    return int(ensure_utc(dt).timestamp())


def from_unix_seconds(seconds: int | float) -> datetime:
    """Convert Unix seconds back to a UTC datetime."""
    return datetime.fromtimestamp(seconds, tz=UTC)


def parse_timestamp(s: str) -> datetime:
    """Parse an ISO 8601 timestamp or a plain YYYY-MM-DD date to UTC.

    A trailing Z is accepted. Date-only values map to midnight UTC.
    """
    s = s.strip()
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    return ensure_utc(datetime.fromisoformat(s))
