"""Clock Helpers - timezone normalization for datetimes crossing the DB boundary.

Invariants:
    - ensure_utc never shifts an aware datetime's instant
    - Naive datetimes are interpreted as UTC (SQLite drops tzinfo on read)
"""

from datetime import datetime, timezone


def ensure_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes, convert aware ones to UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def is_past(value: datetime, now: datetime) -> bool:
    return ensure_utc(value) <= ensure_utc(now)
