"""Waitlist Queue - FIFO position rules for event waitlists.

Invariants:
    - Only ACTIVE and NOTIFIED entries hold a position
    - New entries go to max(position) + 1 (1 when the queue is empty)
    - Removing an entry at position p shifts every held position > p down by one
    - A NOTIFIED entry is confirmable only before its expiresAt
"""

from datetime import datetime, timedelta
from typing import Iterable

from tradeconnect.core.clock import ensure_utc
from tradeconnect.core.domain_types import WaitlistStatus


QUEUED_STATUSES: frozenset[WaitlistStatus] = frozenset({
    WaitlistStatus.ACTIVE, WaitlistStatus.NOTIFIED,
})


def next_position(held_positions: Iterable[int]) -> int:
    return max(held_positions, default=0) + 1


def positions_after_removal(
    positions: dict[int, int], removed_position: int,
) -> dict[int, int]:
    """Map entry_id -> new position for entries that must move up."""
    return {
        entry_id: pos - 1
        for entry_id, pos in positions.items()
        if pos > removed_position
    }


def notification_expiry(now: datetime, hours: int) -> datetime:
    return now + timedelta(hours=hours)


def is_notification_expired(expires_at: datetime | None, now: datetime) -> bool:
    if expires_at is None:
        return False
    return ensure_utc(expires_at) < ensure_utc(now)


def count_by_status(statuses: Iterable[str]) -> dict:
    """Per-status counts (every status present, zero-filled) plus total."""
    counts = {s.value.lower(): 0 for s in WaitlistStatus}
    total = 0
    for status in statuses:
        key = getattr(status, "value", status).lower()
        counts[key] = counts.get(key, 0) + 1
        total += 1
    counts["total"] = total
    return counts
