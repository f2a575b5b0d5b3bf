"""Availability Windows - overlap detection for speaker availability blocks.

Invariants:
    - A window is valid only when end > start (equal instants are rejected)
    - Overlap is INCLUSIVE: windows touching at a boundary instant conflict
    - Pure: blocks are duck-typed objects exposing start_date / end_date

Design Decisions:
    - Inclusive overlap matches the booking rule that a speaker cannot be
      released from one commitment and start another at the same instant
"""

from datetime import datetime
from typing import Iterable, Protocol, TypeVar

from tradeconnect.core.clock import ensure_utc


class TimeWindow(Protocol):
    start_date: datetime
    end_date: datetime


W = TypeVar("W", bound=TimeWindow)


def is_valid_window(start: datetime, end: datetime) -> bool:
    return ensure_utc(end) > ensure_utc(start)


def windows_overlap(
    a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime,
) -> bool:
    """Inclusive interval intersection test."""
    return (
        ensure_utc(a_start) <= ensure_utc(b_end)
        and ensure_utc(b_start) <= ensure_utc(a_end)
    )


def find_overlapping(
    blocks: Iterable[W], start: datetime, end: datetime,
) -> W | None:
    """Return the first block intersecting [start, end], or None."""
    for block in blocks:
        if windows_overlap(block.start_date, block.end_date, start, end):
            return block
    return None
