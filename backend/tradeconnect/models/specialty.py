"""Specialty ORM - topic areas a speaker can cover (many-to-many with Speaker)."""

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean, Column, DateTime, ForeignKey, Integer, String, Table, Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from tradeconnect.db.base import Base


speaker_specialties = Table(
    "speaker_specialties",
    Base.metadata,
    Column(
        "speaker_id", Integer,
        ForeignKey("speakers.id", ondelete="CASCADE"), primary_key=True,
    ),
    Column(
        "specialty_id", Integer,
        ForeignKey("specialties.id", ondelete="CASCADE"), primary_key=True,
    ),
)


class Specialty(Base):
    __tablename__ = "specialties"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str | None] = mapped_column(String(50), nullable=True)
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
