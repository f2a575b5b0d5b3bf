"""Waitlist Routes - join, leave, promote and confirm waitlist entries.

Invariants:
    - Notify-next and expiry processing are admin operations
    - Confirming an entry is reserved to its owner
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from tradeconnect.api.dependencies import get_current_actor, require_admin
from tradeconnect.api.responses import success
from tradeconnect.core import messages
from tradeconnect.core.permissions import Actor
from tradeconnect.infrastructure.database import get_db
from tradeconnect.schemas.capacity import WaitlistEntryResponse, WaitlistJoin
from tradeconnect.schemas.event import RegistrationResponse
from tradeconnect.services.waitlist_service import WaitlistService

router = APIRouter(prefix="/api/waitlist", tags=["waitlist"])


def _entry(entry) -> dict:
    return WaitlistEntryResponse.model_validate(entry).to_wire()


@router.post("/events/{event_id}", status_code=status.HTTP_201_CREATED)
async def join_waitlist(
    event_id: int,
    body: WaitlistJoin | None = None,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    access_type_id = body.access_type_id if body else None
    entry = await WaitlistService(db).join(event_id, access_type_id, actor)
    return success(
        messages.WAITLIST_JOINED.format(position=entry.position), _entry(entry),
    )


@router.get("/events/{event_id}")
async def list_waitlist(
    event_id: int,
    access_type_id: int | None = Query(None, alias="accessTypeId", ge=1),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    entries = await WaitlistService(db).list_queue(event_id, access_type_id)
    return success(messages.WAITLIST_FETCHED, [_entry(e) for e in entries])


@router.get("/events/{event_id}/position")
async def waitlist_position(
    event_id: int,
    access_type_id: int | None = Query(None, alias="accessTypeId", ge=1),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    data = await WaitlistService(db).position(
        event_id, actor.user_id, access_type_id,
    )
    message = messages.WAITLIST_POSITION_FETCHED if data else messages.WAITLIST_NOT_IN_QUEUE
    return {**success(message), "data": data}


@router.get("/events/{event_id}/stats")
async def waitlist_stats(
    event_id: int,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    data = await WaitlistService(db).stats(event_id)
    return success(messages.WAITLIST_STATS_FETCHED, data)


@router.post("/events/{event_id}/notify-next")
async def notify_next(
    event_id: int,
    access_type_id: int | None = Query(None, alias="accessTypeId", ge=1),
    actor: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    entry = await WaitlistService(db).notify_next(event_id, access_type_id, actor)
    if not entry:
        return {**success(messages.WAITLIST_EMPTY), "data": None}
    return success(messages.WAITLIST_NOTIFIED, _entry(entry))


@router.post("/process-expired")
async def process_expired_entries(
    actor: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    processed = await WaitlistService(db).process_expired()
    return success(
        messages.EXPIRED_ENTRIES_PROCESSED.format(count=processed),
        {"processed": processed},
    )


@router.post("/{entry_id}/confirm")
async def confirm_entry(
    entry_id: int,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    entry, registration = await WaitlistService(db).confirm(entry_id, actor)
    return success(messages.WAITLIST_CONFIRMED, {
        "entry": _entry(entry),
        "registration": RegistrationResponse.model_validate(registration).to_wire(),
    })


@router.delete("/{entry_id}")
async def leave_waitlist(
    entry_id: int,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    entry = await WaitlistService(db).leave(entry_id, actor)
    return success(messages.WAITLIST_LEFT, _entry(entry))
