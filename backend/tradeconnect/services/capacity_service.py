"""Capacity Service - seat configuration, reservations and capacity reports.

Invariants:
    - Seats are counted from the database on every decision:
      confirmed = confirmed/attended registrations,
      blocked = pending registrations + LOCKED, unexpired capacity locks
    - reserve() decides and inserts under a per-event asyncio.Lock plus a
      row lock on the capacity row, so two concurrent reservations for the
      same event never both take the last seats
    - Locks expire lock_timeout_minutes after creation; expired locks are
      never confirmable
    - Releasing or expiring a lock (by the sweep or by a late confirm) offers
      the seat to the waitlist when the event's waitlist is enabled

Design Decisions:
    - infrastructure/locks.py supplies the per-event lock: SQLite ignores
      FOR UPDATE, so in-process serialization keeps check-then-insert atomic
    - Pure arithmetic lives in core/capacity_rules.py; this module only
      gathers counts and persists
"""

import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tradeconnect.config import get_settings
from tradeconnect.core import messages
from tradeconnect.core.capacity_rules import (
    CapacityFigures, build_recommendations, evaluate_request, lock_expiry,
    not_configured_result, validate_capacity_config,
)
from tradeconnect.core.clock import ensure_utc
from tradeconnect.core.domain_types import (
    AuditSeverity, LockStatus, RegistrationStatus,
)
from tradeconnect.core.errors import (
    CapacityNotConfiguredError, ConflictError, EventNotFoundError,
    InsufficientPermissionsError, ResourceNotFoundError, ValidationError,
)
from tradeconnect.core.permissions import SYSTEM_ACTOR, Actor, can_manage
from tradeconnect.infrastructure.locks import keyed_lock
from tradeconnect.models.capacity import Capacity
from tradeconnect.models.capacity_lock import CapacityLock
from tradeconnect.models.event import Event
from tradeconnect.models.event_registration import EventRegistration
from tradeconnect.schemas.capacity import (
    CapacityConfigure, CapacityUpdate, ReserveRequest,
)
from tradeconnect.services.audit_service import AuditService
from tradeconnect.services.waitlist_service import WaitlistService

logger = logging.getLogger(__name__)


def _capacity_snapshot(capacity: Capacity) -> dict:
    return {
        "totalCapacity": capacity.total_capacity,
        "overbookingPercentage": capacity.overbooking_percentage,
        "overbookingEnabled": capacity.overbooking_enabled,
        "waitlistEnabled": capacity.waitlist_enabled,
        "lockTimeoutMinutes": capacity.lock_timeout_minutes,
        "alertThresholds": capacity.alert_thresholds,
    }


class CapacityService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.audit = AuditService(db)

    async def get_capacity(
        self, event_id: int, for_update: bool = False,
    ) -> Capacity | None:
        """Active capacity row, or None. Raises when the event is unknown."""
        if not await self.db.get(Event, event_id):
            raise EventNotFoundError(event_id)
        stmt = select(Capacity).where(
            Capacity.event_id == event_id, Capacity.is_active.is_(True),
        )
        if for_update:
            stmt = stmt.with_for_update()
        return await self.db.scalar(stmt)

    async def compute_figures(self, capacity: Capacity) -> CapacityFigures:
        confirmed = await self.db.scalar(
            select(func.coalesce(func.sum(EventRegistration.quantity), 0)).where(
                EventRegistration.event_id == capacity.event_id,
                EventRegistration.status.in_([
                    RegistrationStatus.CONFIRMED.value,
                    RegistrationStatus.ATTENDED.value,
                ]),
            ),
        )
        pending = await self.db.scalar(
            select(func.coalesce(func.sum(EventRegistration.quantity), 0)).where(
                EventRegistration.event_id == capacity.event_id,
                EventRegistration.status == RegistrationStatus.PENDING.value,
            ),
        )
        locked = await self.db.scalar(
            select(func.coalesce(func.sum(CapacityLock.quantity), 0)).where(
                CapacityLock.event_id == capacity.event_id,
                CapacityLock.status == LockStatus.LOCKED.value,
                CapacityLock.expires_at > datetime.now(timezone.utc),
            ),
        )
        return CapacityFigures(
            total=capacity.total_capacity,
            confirmed=int(confirmed or 0),
            blocked=int(pending or 0) + int(locked or 0),
            overbooking_enabled=capacity.overbooking_enabled,
            overbooking_percentage=capacity.overbooking_percentage,
        )

    async def get_status(self, event_id: int) -> dict:
        capacity = await self.get_capacity(event_id)
        if not capacity:
            raise CapacityNotConfiguredError(event_id)
        figures = await self.compute_figures(capacity)
        waitlist_count = await WaitlistService(self.db).queued_count(event_id)
        return {
            "eventId": event_id,
            "totalCapacity": figures.total,
            "availableCapacity": figures.available,
            "blockedCapacity": figures.blocked,
            "confirmedCapacity": figures.confirmed,
            "waitlistCount": waitlist_count,
            "utilizationPercentage": round(figures.utilization, 2),
            "overbookingEnabled": capacity.overbooking_enabled,
            "overbookingPercentage": capacity.overbooking_percentage,
            "overbookingActive": figures.overbooking_in_use > 0,
            "overbookingCurrentPercentage": figures.overbooking_current_percentage,
            "waitlistEnabled": capacity.waitlist_enabled,
            "lockTimeoutMinutes": capacity.lock_timeout_minutes,
            "alertThresholds": capacity.alert_thresholds,
            "isFull": figures.is_full,
            "canAcceptOverbooking": (
                figures.overbooking_limit > 0
                and figures.available_with_overbooking > 0
            ),
            "lastUpdated": ensure_utc(capacity.updated_at).isoformat(),
        }

    # ─── Configuration ──────────────────────────────────────────

    async def configure(
        self, event_id: int, data: CapacityConfigure, actor: Actor,
    ) -> Capacity:
        """Create or replace the capacity configuration of an event."""
        await self._check_event_owner(event_id, actor)
        timeout = data.lock_timeout_minutes
        if timeout is None:
            timeout = get_settings().default_lock_timeout_minutes
        errors = validate_capacity_config(
            data.total_capacity, data.overbooking_percentage, timeout,
        )
        if errors:
            raise ValidationError(errors[0]["message"], details=errors)

        capacity = await self.db.scalar(
            select(Capacity).where(Capacity.event_id == event_id),
        )
        old_values = _capacity_snapshot(capacity) if capacity else None
        values = {
            "total_capacity": data.total_capacity,
            "overbooking_percentage": data.overbooking_percentage,
            "overbooking_enabled": data.overbooking_enabled,
            "waitlist_enabled": data.waitlist_enabled,
            "lock_timeout_minutes": timeout,
            "is_active": True,
        }
        if data.alert_thresholds:
            values["alert_thresholds"] = data.alert_thresholds.model_dump()

        if capacity:
            for key, value in values.items():
                setattr(capacity, key, value)
        else:
            capacity = Capacity(event_id=event_id, created_by=actor.user_id, **values)
            self.db.add(capacity)
        await self.db.flush()

        await self.audit.record(
            "capacity_updated" if old_values else "capacity_created",
            "capacity", actor, resource_id=event_id,
            old_values=old_values,
            new_values=_capacity_snapshot(capacity),
            severity=AuditSeverity.MEDIUM,
        )
        await self.db.commit()
        logger.info(
            f"Capacity configured: {capacity.total_capacity} seats",
            extra={"event_id": event_id},
        )
        return capacity

    async def update(
        self, event_id: int, data: CapacityUpdate, actor: Actor,
    ) -> Capacity:
        await self._check_event_owner(event_id, actor)
        capacity = await self.get_capacity(event_id)
        if not capacity:
            raise CapacityNotConfiguredError(event_id)

        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        errors = validate_capacity_config(
            changes.get("total_capacity"),
            changes.get("overbooking_percentage"),
            changes.get("lock_timeout_minutes"),
        )
        if errors:
            raise ValidationError(errors[0]["message"], details=errors)

        old_values = _capacity_snapshot(capacity)
        for key, value in changes.items():
            setattr(capacity, key, value)
        capacity.updated_at = datetime.now(timezone.utc)

        await self.audit.record(
            "capacity_updated", "capacity", actor, resource_id=event_id,
            old_values=old_values,
            new_values=_capacity_snapshot(capacity),
            severity=AuditSeverity.MEDIUM,
        )
        await self.db.commit()
        return capacity

    async def validate(self, event_id: int, quantity: int) -> dict:
        capacity = await self.get_capacity(event_id)
        if not capacity:
            return not_configured_result()
        figures = await self.compute_figures(capacity)
        return evaluate_request(figures, quantity, capacity.alert_thresholds)

    # ─── Reservations ───────────────────────────────────────────

    async def reserve(
        self, event_id: int, data: ReserveRequest, actor: Actor,
    ) -> tuple[CapacityLock, list[dict]]:
        """Hold `quantity` seats for the actor. Returns the lock and warnings."""
        async with keyed_lock("capacity", event_id):
            capacity = await self.get_capacity(event_id, for_update=True)
            if not capacity:
                raise CapacityNotConfiguredError(event_id)
            figures = await self.compute_figures(capacity)
            result = evaluate_request(
                figures, data.quantity, capacity.alert_thresholds,
            )
            if not result["isValid"]:
                await self.db.rollback()
                raise ConflictError(
                    "INSUFFICIENT_CAPACITY", result["errors"][0]["message"],
                    details=result["errors"],
                )

            now = datetime.now(timezone.utc)
            lock = CapacityLock(
                id=uuid.uuid4(),
                event_id=event_id,
                user_id=actor.user_id,
                session_id=data.session_id,
                access_type_id=data.access_type_id,
                quantity=data.quantity,
                status=LockStatus.LOCKED.value,
                expires_at=lock_expiry(now, capacity.lock_timeout_minutes),
                created_at=now,
            )
            self.db.add(lock)
            await self.audit.record(
                "capacity_reserved", "capacity_lock", actor, resource_id=lock.id,
                new_values={
                    "eventId": event_id,
                    "quantity": data.quantity,
                    "expiresAt": lock.expires_at.isoformat(),
                },
            )
            await self.db.commit()

        logger.info(
            f"Reserved {data.quantity} seats",
            extra={"event_id": event_id, "lock_id": str(lock.id)},
        )
        return lock, result["warnings"]

    async def active_locks(self, event_id: int) -> list[CapacityLock]:
        if not await self.db.get(Event, event_id):
            raise EventNotFoundError(event_id)
        result = await self.db.execute(
            select(CapacityLock)
            .where(
                CapacityLock.event_id == event_id,
                CapacityLock.status == LockStatus.LOCKED.value,
                CapacityLock.expires_at > datetime.now(timezone.utc),
            )
            .order_by(CapacityLock.created_at.asc()),
        )
        return list(result.scalars().all())

    async def confirm_reservation(
        self, lock_id: uuid.UUID, actor: Actor,
    ) -> tuple[CapacityLock, EventRegistration]:
        lock = await self._get_owned_lock(lock_id, actor)
        now = datetime.now(timezone.utc)
        if ensure_utc(lock.expires_at) <= now:
            lock.status = LockStatus.EXPIRED.value
            await self.audit.record(
                "reservation_expired", "capacity_lock", actor,
                resource_id=lock.id,
                old_values={"status": LockStatus.LOCKED.value},
                new_values={"status": lock.status},
            )
            await self._offer_to_waitlist(lock)
            await self.db.commit()
            raise ConflictError("LOCK_EXPIRED", messages.LOCK_EXPIRED)

        registration = EventRegistration(
            event_id=lock.event_id,
            user_id=lock.user_id,
            quantity=lock.quantity,
            status=RegistrationStatus.CONFIRMED.value,
            lock_id=lock.id,
        )
        self.db.add(registration)
        await self.db.flush()
        lock.status = LockStatus.CONFIRMED.value
        lock.confirmed_at = now
        lock.registration_id = registration.id
        await self.audit.record(
            "reservation_confirmed", "capacity_lock", actor, resource_id=lock.id,
            new_values={
                "status": lock.status,
                "registrationId": registration.id,
                "quantity": lock.quantity,
            },
        )
        await self.db.commit()
        return lock, registration

    async def release_reservation(
        self, lock_id: uuid.UUID, actor: Actor,
    ) -> CapacityLock:
        lock = await self._get_owned_lock(lock_id, actor)
        lock.status = LockStatus.RELEASED.value
        lock.released_at = datetime.now(timezone.utc)
        await self.audit.record(
            "reservation_released", "capacity_lock", actor, resource_id=lock.id,
            old_values={"status": LockStatus.LOCKED.value},
            new_values={"status": lock.status},
        )
        await self._offer_to_waitlist(lock)
        await self.db.commit()
        return lock

    async def process_expired_locks(self) -> int:
        """Mark overdue LOCKED holds as EXPIRED. Returns how many."""
        result = await self.db.execute(
            select(CapacityLock).where(
                CapacityLock.status == LockStatus.LOCKED.value,
                CapacityLock.expires_at <= datetime.now(timezone.utc),
            ),
        )
        expired = list(result.scalars().all())
        for lock in expired:
            lock.status = LockStatus.EXPIRED.value
            await self.audit.record(
                "reservation_expired", "capacity_lock", SYSTEM_ACTOR,
                resource_id=lock.id,
                old_values={"status": LockStatus.LOCKED.value},
                new_values={"status": lock.status},
            )
            await self._offer_to_waitlist(lock)
        await self.db.commit()
        if expired:
            logger.info(
                f"Expired {len(expired)} capacity locks",
                extra={"count": len(expired)},
            )
        return len(expired)

    async def report(self, event_id: int) -> dict:
        capacity = await self.get_capacity(event_id)
        if not capacity:
            raise CapacityNotConfiguredError(event_id)
        figures = await self.compute_figures(capacity)
        waitlist = await WaitlistService(self.db).stats(event_id)
        queued = waitlist.get("active", 0) + waitlist.get("notified", 0)
        active_locks = await self.active_locks(event_id)
        return {
            "eventId": event_id,
            "generatedAt": datetime.now(timezone.utc).isoformat(),
            "summary": {
                "totalCapacity": figures.total,
                "confirmedCount": figures.confirmed,
                "blockedCount": figures.blocked,
                "availableCount": figures.available,
                "utilizationPercentage": round(figures.utilization, 2),
                "isFull": figures.is_full,
                "overbookingLimit": figures.overbooking_limit,
                "overbookingInUse": figures.overbooking_in_use,
                "activeLocks": len(active_locks),
            },
            "waitlist": waitlist,
            "recommendations": build_recommendations(
                figures, queued, capacity.waitlist_enabled,
            ),
        }

    # ─── helpers ────────────────────────────────────────────────

    async def _check_event_owner(self, event_id: int, actor: Actor) -> Event:
        event = await self.db.get(Event, event_id)
        if not event:
            raise EventNotFoundError(event_id)
        if not can_manage(actor, event.created_by):
            raise InsufficientPermissionsError(messages.CAPACITY_FORBIDDEN)
        return event

    async def _get_owned_lock(
        self, lock_id: uuid.UUID, actor: Actor,
    ) -> CapacityLock:
        lock = await self.db.get(CapacityLock, lock_id)
        if not lock:
            raise ResourceNotFoundError(
                "LOCK_NOT_FOUND", messages.LOCK_NOT_FOUND, lock_id,
            )
        if not can_manage(actor, lock.user_id):
            raise InsufficientPermissionsError(messages.LOCK_FORBIDDEN)
        if lock.status != LockStatus.LOCKED.value:
            raise ConflictError("LOCK_NOT_ACTIVE", messages.LOCK_NOT_ACTIVE)
        return lock

    async def _offer_to_waitlist(self, lock: CapacityLock) -> None:
        capacity = await self.db.scalar(
            select(Capacity).where(Capacity.event_id == lock.event_id),
        )
        if capacity and capacity.waitlist_enabled:
            await WaitlistService(self.db).notify_next(
                lock.event_id, lock.access_type_id, commit=False,
            )
