"""Event Rules - scheduling and content checks for event creation and duplication.

Invariants:
    - endDate must be strictly after startDate
    - Events may not run longer than MAX_EVENT_DURATION_DAYS
    - startDate may not be in the past at creation time
    - Every check returns field-level detail dicts; an empty list means valid
    - Pure: `now` is always passed in
    - Completed and cancelled speaker participations are final

Design Decisions:
    - Field-shaped results ({field, message, type}) so the service can raise one
      ValidationError carrying every problem at once
"""

import re
from datetime import datetime, timedelta

from tradeconnect.core import messages
from tradeconnect.core.clock import ensure_utc


MAX_EVENT_DURATION_DAYS = 30
MIN_LOCATION_LENGTH = 5
MAX_TAGS = 10
MAX_TAG_LENGTH = 20
_HTTPS_URL = re.compile(r"^https://[^\s/$.?#].[^\s]*$", re.IGNORECASE)


def _detail(field: str, message: str, kind: str = "value_error") -> dict:
    return {"field": field, "message": message, "type": kind}


def check_schedule(
    start: datetime | None,
    end: datetime | None,
    now: datetime | None = None,
) -> list[dict]:
    """Date ordering, duration cap, and (when `now` given) no past start."""
    errors = []
    if start is None or end is None:
        return errors
    start, end = ensure_utc(start), ensure_utc(end)
    if now is not None and start < ensure_utc(now):
        errors.append(_detail("startDate", messages.START_IN_PAST))
    if end <= start:
        errors.append(_detail("endDate", messages.END_AFTER_START))
    elif end - start > timedelta(days=MAX_EVENT_DURATION_DAYS):
        errors.append(_detail(
            "endDate",
            messages.DURATION_TOO_LONG.format(max_days=MAX_EVENT_DURATION_DAYS),
        ))
    return errors


def check_location(
    is_virtual: bool, location: str | None, virtual_location: str | None,
) -> list[dict]:
    if is_virtual:
        if not virtual_location or not virtual_location.strip():
            return [_detail("virtualLocation", messages.VIRTUAL_LOCATION_REQUIRED)]
        if not _HTTPS_URL.match(virtual_location.strip()):
            return [_detail("virtualLocation", messages.VIRTUAL_LOCATION_INVALID)]
        return []
    if not location or not location.strip():
        return [_detail("location", messages.LOCATION_REQUIRED)]
    if len(location.strip()) < MIN_LOCATION_LENGTH:
        return [_detail("location", messages.LOCATION_TOO_SHORT)]
    return []


def check_tags(tags: list[str] | None) -> list[dict]:
    if not tags:
        return []
    if len(tags) > MAX_TAGS:
        return [_detail("tags", messages.TOO_MANY_TAGS)]
    if any(len(t) > MAX_TAG_LENGTH for t in tags):
        return [_detail("tags", messages.TAG_TOO_LONG)]
    return []


def check_age_range(min_age: int | None, max_age: int | None) -> list[dict]:
    if min_age is not None and max_age is not None and max_age < min_age:
        return [_detail("maxAge", messages.MAX_AGE_BELOW_MIN)]
    return []


def check_duplicate_dates(
    start: datetime | None, end: datetime | None,
) -> list[dict]:
    """Duplication overrides dates as a pair or not at all."""
    if start is not None and end is None:
        return [_detail("endDate", messages.DATES_TOGETHER_END)]
    if end is not None and start is None:
        return [_detail("startDate", messages.DATES_TOGETHER_START)]
    return []



# ─── Speaker participation ──────────────────────────────────────

FINAL_PARTICIPATION_STATUSES = frozenset({"completed", "cancelled"})


def can_change_participation(previous: str) -> bool:
    """Completed and cancelled participations are final."""
    return previous not in FINAL_PARTICIPATION_STATUSES
