"""AvailabilityBlock ORM - time windows during which a speaker cannot be booked.

Invariants:
    - end_date > start_date (checked in the service before insert)
    - No two blocks of the same speaker overlap (inclusive)
"""

from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tradeconnect.db.base import Base


class AvailabilityBlock(Base):
    __tablename__ = "speaker_availability_blocks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    speaker_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("speakers.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    start_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )
    end_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )
    reason: Mapped[str | None] = mapped_column(String(500), nullable=True)
    is_recurring: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    recurrence_pattern: Mapped[str | None] = mapped_column(
        String(10), nullable=True,
    )
    created_by: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    speaker: Mapped["Speaker"] = relationship(
        "Speaker", back_populates="availability_blocks",
    )
