"""Capacity & Waitlist Schemas - request bodies and response shapes.

Invariants:
    - ReserveRequest.quantity 1-50, sessionId required
    - Capacity config ranges are enforced by core/capacity_rules.py so the
      Spanish messages reach the client (schema only types the fields)
"""

from uuid import UUID

from pydantic import Field, model_validator

from tradeconnect.schemas.common import CamelModel, UtcDatetime


class AlertThresholds(CamelModel):
    low: int = Field(80, ge=0, le=100)
    medium: int = Field(90, ge=0, le=100)
    high: int = Field(95, ge=0, le=100)

    @model_validator(mode="after")
    def ordered(self):
        if not (self.low <= self.medium <= self.high):
            raise ValueError(
                "Los umbrales de alerta deben cumplir low <= medium <= high",
            )
        return self


class CapacityConfigure(CamelModel):
    total_capacity: int
    overbooking_percentage: int = 0
    overbooking_enabled: bool = False
    waitlist_enabled: bool = True
    lock_timeout_minutes: int | None = None
    alert_thresholds: AlertThresholds | None = None


class CapacityUpdate(CamelModel):
    total_capacity: int | None = None
    overbooking_percentage: int | None = None
    overbooking_enabled: bool | None = None
    waitlist_enabled: bool | None = None
    lock_timeout_minutes: int | None = None
    alert_thresholds: AlertThresholds | None = None


class ReserveRequest(CamelModel):
    quantity: int = Field(1, ge=1, le=50)
    session_id: str = Field(min_length=1, max_length=255)
    access_type_id: int | None = Field(None, ge=1)


class CapacityLockResponse(CamelModel):
    id: UUID
    event_id: int
    user_id: int
    session_id: str
    access_type_id: int | None = None
    quantity: int
    status: str
    expires_at: UtcDatetime
    confirmed_at: UtcDatetime | None = None
    released_at: UtcDatetime | None = None
    registration_id: int | None = None
    created_at: UtcDatetime


# --- Waitlist -----------------------------------------------------------------

class WaitlistJoin(CamelModel):
    access_type_id: int | None = Field(None, ge=1)


class WaitlistEntryResponse(CamelModel):
    id: int
    event_id: int
    access_type_id: int | None = None
    user_id: int
    position: int
    status: str
    notified_at: UtcDatetime | None = None
    expires_at: UtcDatetime | None = None
    confirmed_at: UtcDatetime | None = None
    cancelled_at: UtcDatetime | None = None
    created_at: UtcDatetime
