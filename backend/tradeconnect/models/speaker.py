"""Speaker ORM - persists speaker profiles, rates and verification state.

Invariants:
    - email is unique across speakers (including soft-deleted rows)
    - rating is the mean of all evaluation overall ratings, 2 decimals, 0-5
    - deleted_at set = soft-deleted; such rows are invisible to every read path
    - modalities and languages are non-empty JSON lists of enum values

Design Decisions:
    - JSON columns for modalities/languages: small closed sets, filtered in Python
    - Specialties via association table, loaded with selectin (always shown)
"""

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean, DateTime, Integer, JSON, Numeric, String, Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tradeconnect.db.base import Base
from tradeconnect.models.specialty import speaker_specialties


class Speaker(Base):
    __tablename__ = "speakers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(
        String(255), nullable=False, unique=True, index=True,
    )
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    country: Mapped[str | None] = mapped_column(String(100), nullable=True)
    nit: Mapped[str | None] = mapped_column(String(20), nullable=True)
    cui: Mapped[str | None] = mapped_column(String(20), nullable=True)
    rtu: Mapped[str | None] = mapped_column(String(50), nullable=True)
    profile_image: Mapped[str | None] = mapped_column(String(500), nullable=True)
    short_bio: Mapped[str | None] = mapped_column(String(200), nullable=True)
    full_bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    linkedin_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    twitter_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    website_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    base_rate: Mapped[float] = mapped_column(
        Numeric(10, 2, asdecimal=False), nullable=False, default=0,
    )
    rate_type: Mapped[str] = mapped_column(
        String(10), nullable=False, default="hourly",
    )
    modalities: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    languages: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    cv_file: Mapped[str | None] = mapped_column(String(500), nullable=True)
    category: Mapped[str] = mapped_column(
        String(20), nullable=False, default="national",
    )
    rating: Mapped[float] = mapped_column(
        Numeric(3, 2, asdecimal=False), nullable=False, default=0,
    )
    total_events: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True,
    )
    verified_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    verified_by: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_by: Mapped[int] = mapped_column(Integer, nullable=False)
    updated_by: Mapped[int | None] = mapped_column(Integer, nullable=True)
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
    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )

    # Relationships
    specialties: Mapped[list["Specialty"]] = relationship(
        "Specialty", secondary=speaker_specialties, lazy="selectin",
    )
    availability_blocks: Mapped[list["AvailabilityBlock"]] = relationship(
        "AvailabilityBlock", back_populates="speaker",
        cascade="all, delete-orphan", lazy="selectin",
        order_by="AvailabilityBlock.start_date",
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
