"""Capacity ORM - per-event seat configuration (one row per event).

Invariants:
    - event_id is unique: at most one capacity configuration per event
    - total_capacity > 0, overbooking_percentage 0-50, lock_timeout_minutes 5-60
    - The row is locked (SELECT ... FOR UPDATE) while a reservation is decided
"""

from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, JSON
from sqlalchemy.orm import Mapped, mapped_column

from tradeconnect.core.capacity_rules import DEFAULT_ALERT_THRESHOLDS
from tradeconnect.db.base import Base


class Capacity(Base):
    __tablename__ = "event_capacities"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    event_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("events.id", ondelete="CASCADE"),
        nullable=False, unique=True,
    )
    total_capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    overbooking_percentage: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
    )
    overbooking_enabled: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    waitlist_enabled: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True,
    )
    lock_timeout_minutes: Mapped[int] = mapped_column(
        Integer, nullable=False, default=15,
    )
    alert_thresholds: Mapped[dict] = mapped_column(
        JSON, nullable=False, default=lambda: dict(DEFAULT_ALERT_THRESHOLDS),
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True,
    )
    created_by: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
