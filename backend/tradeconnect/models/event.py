"""Event ORM - conferences, workshops and other bookable events.

Invariants:
    - end_date > start_date and duration <= 30 days (core/event_rules.py)
    - status transitions: draft -> published -> completed; any -> cancelled
    - cancelled_at is set exactly when status == cancelled
"""

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean, DateTime, Integer, JSON, Numeric, String, Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from tradeconnect.db.base import Base


class Event(Base):
    __tablename__ = "events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    short_description: Mapped[str | None] = mapped_column(
        String(200), nullable=True,
    )
    start_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True,
    )
    end_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    virtual_location: Mapped[str | None] = mapped_column(
        String(500), nullable=True,
    )
    is_virtual: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    price: Mapped[float] = mapped_column(
        Numeric(10, 2, asdecimal=False), nullable=False, default=0,
    )
    currency: Mapped[str] = mapped_column(
        String(3), nullable=False, default="GTQ",
    )
    capacity: Mapped[int | None] = mapped_column(Integer, nullable=True)
    min_age: Mapped[int | None] = mapped_column(Integer, nullable=True)
    max_age: Mapped[int | None] = mapped_column(Integer, nullable=True)
    tags: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    requirements: Mapped[str | None] = mapped_column(String(500), nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="draft",
    )
    created_by: Mapped[int] = mapped_column(Integer, nullable=False)
    cancelled_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    cancellation_reason: Mapped[str | None] = mapped_column(
        String(500), nullable=True,
    )
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
