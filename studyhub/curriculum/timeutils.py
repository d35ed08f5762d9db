"""Timestamp helpers shared by the scheduler and the persisted aggregate."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_aware(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    """Render a timestamp as UTC ISO-8601 with a ``Z`` suffix, keeping ``None`` as-is.

    Millisecond precision is used unless the value carries finer detail, so
    blobs written by the browser app (``2024-03-01T10:00:00.000Z``) keep their text.
    """
    if value is None:
        return None
    value = ensure_aware(value).astimezone(timezone.utc)
    timespec = "milliseconds" if value.microsecond % 1000 == 0 else "microseconds"
    return value.isoformat(timespec=timespec).replace("+00:00", "Z")


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp (``Z`` suffix included) into an aware datetime."""
    if not value:
        return None
    return ensure_aware(datetime.fromisoformat(value))
