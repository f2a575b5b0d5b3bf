"""Event Routes - event lifecycle, speaker assignment and attendance.

Invariants:
    - Every route except GET /{id} requires an authenticated caller
    - Creation and duplication share the create/edit limiter
"""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from tradeconnect.api.dependencies import get_current_actor
from tradeconnect.api.rate_limiting import create_edit_limit
from tradeconnect.api.responses import success
from tradeconnect.core import messages
from tradeconnect.core.permissions import Actor
from tradeconnect.infrastructure.database import get_db
from tradeconnect.schemas.event import (
    EventCancel, EventCreate, EventDuplicate, EventResponse,
    ParticipationUpdate, RegistrationResponse, SpeakerAssignment,
    SpeakerEventResponse,
)
from tradeconnect.services.event_service import EventService

router = APIRouter(prefix="/api/events", tags=["events"])


@router.post("", status_code=status.HTTP_201_CREATED)
@create_edit_limit
async def create_event(
    request: Request,
    body: EventCreate,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    event = await EventService(db).create_event(body, actor)
    return success(
        messages.EVENT_CREATED, EventResponse.model_validate(event).to_wire(),
    )


@router.get("/{event_id}")
async def get_event(event_id: int, db: AsyncSession = Depends(get_db)):
    event = await EventService(db).get_event(event_id)
    return success(
        messages.EVENT_FETCHED, EventResponse.model_validate(event).to_wire(),
    )


@router.post("/{event_id}/duplicate", status_code=status.HTTP_201_CREATED)
@create_edit_limit
async def duplicate_event(
    request: Request,
    event_id: int,
    body: EventDuplicate,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    copy = await EventService(db).duplicate_event(event_id, body, actor)
    return success(
        messages.EVENT_DUPLICATED, EventResponse.model_validate(copy).to_wire(),
    )


@router.post("/{event_id}/cancel")
async def cancel_event(
    event_id: int,
    body: EventCancel | None = None,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    event = await EventService(db).cancel_event(
        event_id, body.reason if body else None, actor,
    )
    return success(
        messages.EVENT_CANCELLED, EventResponse.model_validate(event).to_wire(),
    )


@router.post("/{event_id}/speakers", status_code=status.HTTP_201_CREATED)
async def assign_speaker(
    event_id: int,
    body: SpeakerAssignment,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    participation = await EventService(db).assign_speaker(event_id, body, actor)
    return success(
        messages.SPEAKER_ASSIGNED,
        SpeakerEventResponse.model_validate(participation).to_wire(),
    )


@router.put("/{event_id}/speakers/{speaker_id}")
async def update_participation(
    event_id: int,
    speaker_id: int,
    body: ParticipationUpdate,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    participation = await EventService(db).update_participation(
        event_id, speaker_id, body, actor,
    )
    return success(
        messages.SPEAKER_EVENT_UPDATED,
        SpeakerEventResponse.model_validate(participation).to_wire(),
    )


@router.get("/{event_id}/attendance")
async def attendance_report(
    event_id: int,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    data = await EventService(db).attendance_report(event_id)
    return success(messages.ATTENDANCE_FETCHED, data)


@router.post("/{event_id}/registrations/{registration_id}/check-in")
async def check_in(
    event_id: int,
    registration_id: int,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    registration = await EventService(db).check_in(
        event_id, registration_id, actor,
    )
    return success(
        messages.CHECKED_IN,
        RegistrationResponse.model_validate(registration).to_wire(),
    )
