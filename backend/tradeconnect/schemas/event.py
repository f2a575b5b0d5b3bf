"""Event Schemas - request validation and response shapes for /api/events.

Invariants:
    - EventCreate.title: stripped, 3-100 chars
    - Numeric bounds: price 0-10000, capacity 0-10000, ages 0-120
    - Cross-field rules (dates, duration, location, tags) are checked by
      core/event_rules.py in the service so every problem is reported together
"""

from datetime import datetime

from pydantic import Field, field_validator, ValidationInfo

from tradeconnect.core import messages
from tradeconnect.core.clock import ensure_utc
from tradeconnect.core.domain_types import (
    Modality, ParticipationStatus, SpeakerRole,
)
from tradeconnect.schemas.common import CamelModel, UtcDatetime, strip_optional


def _check_title(value: str | None, required: bool) -> str | None:
    if value is None:
        if required:
            raise ValueError(messages.TITLE_REQUIRED)
        return None
    value = value.strip()
    if not value:
        raise ValueError(messages.TITLE_REQUIRED)
    if len(value) < 3:
        raise ValueError(messages.TITLE_TOO_SHORT)
    if len(value) > 100:
        raise ValueError(messages.TITLE_TOO_LONG)
    return value


class EventCreate(CamelModel):
    title: str
    description: str | None = Field(None, max_length=2000)
    short_description: str | None = Field(None, max_length=200)
    start_date: datetime
    end_date: datetime
    location: str | None = Field(None, max_length=255)
    virtual_location: str | None = Field(None, max_length=500)
    is_virtual: bool = False
    price: float = Field(0, ge=0, le=10_000)
    currency: str = Field("GTQ", pattern=r"^(GTQ|USD)$")
    capacity: int | None = Field(None, ge=0, le=10_000)
    min_age: int | None = Field(None, ge=0, le=120)
    max_age: int | None = Field(None, ge=0, le=120)
    tags: list[str] = Field(default_factory=list)
    requirements: str | None = Field(None, max_length=500)

    @field_validator("title", mode="before")
    @classmethod
    def check_title(cls, v):
        return _check_title(v, required=True)

    @field_validator("short_description", "description", "requirements")
    @classmethod
    def strip_text(cls, v: str | None) -> str | None:
        return strip_optional(v)

    @field_validator("tags")
    @classmethod
    def strip_tags(cls, v: list[str]) -> list[str]:
        return [t.strip() for t in v if t and t.strip()]


class EventDuplicate(CamelModel):
    title: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    price: float | None = Field(None, ge=0, le=10_000)

    @field_validator("title", mode="before")
    @classmethod
    def check_title(cls, v):
        return _check_title(v, required=False)


class EventCancel(CamelModel):
    reason: str | None = Field(None, max_length=500)


class SpeakerAssignment(CamelModel):
    speaker_id: int = Field(ge=1)
    role: SpeakerRole = SpeakerRole.KEYNOTE_SPEAKER
    participation_start: datetime
    participation_end: datetime
    modality: Modality = Modality.PRESENTIAL
    order: int = Field(1, ge=1)
    notes: str | None = Field(None, max_length=1000)

    @field_validator("participation_end")
    @classmethod
    def end_after_start(cls, v: datetime, info: ValidationInfo) -> datetime:
        start = info.data.get("participation_start")
        if start is not None and ensure_utc(v) <= ensure_utc(start):
            raise ValueError(messages.END_AFTER_START)
        return v


class ParticipationUpdate(CamelModel):
    status: ParticipationStatus
    cancellation_reason: str | None = Field(None, max_length=500)
    notes: str | None = Field(None, max_length=1000)


# --- Responses ----------------------------------------------------------------

class EventResponse(CamelModel):
    id: int
    title: str
    description: str | None = None
    short_description: str | None = None
    start_date: UtcDatetime
    end_date: UtcDatetime
    location: str | None = None
    virtual_location: str | None = None
    is_virtual: bool
    price: float
    currency: str
    capacity: int | None = None
    min_age: int | None = None
    max_age: int | None = None
    tags: list[str] = Field(default_factory=list)
    requirements: str | None = None
    status: str
    created_by: int
    cancelled_at: UtcDatetime | None = None
    cancellation_reason: str | None = None
    created_at: UtcDatetime


class EventSummary(CamelModel):
    id: int
    title: str
    start_date: UtcDatetime
    end_date: UtcDatetime
    status: str


class SpeakerEventResponse(CamelModel):
    id: int
    speaker_id: int
    event_id: int
    role: str
    participation_start: UtcDatetime
    participation_end: UtcDatetime
    duration_minutes: int | None = None
    modality: str
    order: int
    status: str
    notes: str | None = None
    confirmed_at: UtcDatetime | None = None
    cancelled_at: UtcDatetime | None = None
    cancellation_reason: str | None = None
    event: EventSummary | None = None


class RegistrationResponse(CamelModel):
    id: int
    event_id: int
    user_id: int
    quantity: int
    status: str
    checked_in_at: UtcDatetime | None = None
    created_at: UtcDatetime
