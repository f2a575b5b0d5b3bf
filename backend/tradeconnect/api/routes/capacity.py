"""Capacity Routes - seat configuration, validation, reservations and reports.

Invariants:
    - Configure/update/reserve are behind the capacity create/edit limiter
    - Reservations are only confirmed or released by their owner or an admin
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from tradeconnect.api.dependencies import get_current_actor, require_admin
from tradeconnect.api.rate_limiting import capacity_limit
from tradeconnect.api.responses import success
from tradeconnect.core import messages
from tradeconnect.core.permissions import Actor
from tradeconnect.infrastructure.database import get_db
from tradeconnect.schemas.capacity import (
    CapacityConfigure, CapacityLockResponse, CapacityUpdate, ReserveRequest,
)
from tradeconnect.schemas.event import RegistrationResponse
from tradeconnect.services.capacity_service import CapacityService

router = APIRouter(prefix="/api/capacity", tags=["capacity"])


@router.get("/events/{event_id}")
async def capacity_status(event_id: int, db: AsyncSession = Depends(get_db)):
    data = await CapacityService(db).get_status(event_id)
    return success(messages.CAPACITY_STATUS_FETCHED, data)


@router.post("/events/{event_id}/configure", status_code=status.HTTP_201_CREATED)
@capacity_limit
async def configure_capacity(
    request: Request,
    event_id: int,
    body: CapacityConfigure,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    service = CapacityService(db)
    await service.configure(event_id, body, actor)
    return success(messages.CAPACITY_CONFIGURED, await service.get_status(event_id))


@router.put("/events/{event_id}/update")
@capacity_limit
async def update_capacity(
    request: Request,
    event_id: int,
    body: CapacityUpdate,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    service = CapacityService(db)
    await service.update(event_id, body, actor)
    return success(messages.CAPACITY_UPDATED, await service.get_status(event_id))


@router.get("/events/{event_id}/validate")
async def validate_capacity(
    event_id: int,
    quantity: int = Query(1, ge=1, le=50),
    db: AsyncSession = Depends(get_db),
):
    data = await CapacityService(db).validate(event_id, quantity)
    return success(messages.CAPACITY_VALIDATED, data)


@router.post("/events/{event_id}/reserve", status_code=status.HTTP_201_CREATED)
@capacity_limit
async def reserve_capacity(
    request: Request,
    event_id: int,
    body: ReserveRequest,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    lock, warnings = await CapacityService(db).reserve(event_id, body, actor)
    return success(messages.CAPACITY_RESERVED, {
        "lock": CapacityLockResponse.model_validate(lock).to_wire(),
        "warnings": warnings,
    })


@router.get("/events/{event_id}/locks")
async def active_locks(
    event_id: int,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    locks = await CapacityService(db).active_locks(event_id)
    return success(messages.LOCKS_FETCHED, [
        CapacityLockResponse.model_validate(lock).to_wire() for lock in locks
    ])


@router.get("/events/{event_id}/report")
async def capacity_report(
    event_id: int,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    data = await CapacityService(db).report(event_id)
    return success(messages.CAPACITY_REPORT_GENERATED, data)


@router.post("/reservations/process-expired")
async def process_expired_reservations(
    actor: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    released = await CapacityService(db).process_expired_locks()
    return success(
        messages.EXPIRED_RESERVATIONS_PROCESSED.format(count=released),
        {"released": released},
    )


@router.post("/reservations/{lock_id}/confirm")
async def confirm_reservation(
    lock_id: UUID,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    lock, registration = await CapacityService(db).confirm_reservation(
        lock_id, actor,
    )
    return success(messages.RESERVATION_CONFIRMED, {
        "lock": CapacityLockResponse.model_validate(lock).to_wire(),
        "registration": RegistrationResponse.model_validate(registration).to_wire(),
    })


@router.post("/reservations/{lock_id}/release")
async def release_reservation(
    lock_id: UUID,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    lock = await CapacityService(db).release_reservation(lock_id, actor)
    return success(
        messages.RESERVATION_RELEASED,
        CapacityLockResponse.model_validate(lock).to_wire(),
    )
