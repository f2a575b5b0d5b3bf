"""SpeakerEvent ORM - a speaker's participation in an event.

Invariants:
    - (speaker_id, event_id) is unique: one participation per speaker per event
    - participation_end > participation_start
    - status transitions: tentative -> confirmed -> completed; tentative|confirmed -> cancelled
    - Only completed participations allow evaluations
"""

from datetime import datetime, timezone

from sqlalchemy import (
    DateTime, ForeignKey, Integer, String, Text, UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tradeconnect.db.base import Base


class SpeakerEvent(Base):
    __tablename__ = "speaker_events"
    __table_args__ = (
        UniqueConstraint("speaker_id", "event_id", name="uq_speaker_event"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    speaker_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("speakers.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    event_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("events.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default="keynote_speaker",
    )
    participation_start: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )
    participation_end: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )
    duration_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    modality: Mapped[str] = mapped_column(
        String(10), nullable=False, default="presential",
    )
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="tentative",
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    confirmed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    cancelled_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    cancellation_reason: Mapped[str | None] = mapped_column(
        String(500), nullable=True,
    )
    created_by: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    event: Mapped["Event"] = relationship("Event", lazy="selectin")
    speaker: Mapped["Speaker"] = relationship("Speaker", lazy="selectin")
