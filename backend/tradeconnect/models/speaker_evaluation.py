"""SpeakerEvaluation ORM - post-event ratings of a speaker's participation."""

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean, DateTime, ForeignKey, Integer, JSON, Numeric, String, Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from tradeconnect.db.base import Base


class SpeakerEvaluation(Base):
    __tablename__ = "speaker_evaluations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    speaker_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("speakers.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    event_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False,
    )
    evaluator_id: Mapped[int] = mapped_column(Integer, nullable=False)
    evaluator_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default="organizer",
    )
    overall_rating: Mapped[float] = mapped_column(
        Numeric(3, 2, asdecimal=False), nullable=False,
    )
    criteria_ratings: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    comments: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_public: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    evaluation_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
