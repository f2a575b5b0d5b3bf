"""Waitlist Service - FIFO queue of users waiting for a seat on a full event.

Invariants:
    - Queues are scoped by (event_id, access_type_id)
    - Joining requires configured capacity with the waitlist enabled, and no
      live registration or live waitlist entry for the same user
    - Leaving or confirming compacts the positions behind the entry
    - notify_next promotes the lowest ACTIVE position to NOTIFIED with a
      `waitlist_notification_hours` confirmation window
    - Confirming a NOTIFIED entry creates a confirmed registration

Design Decisions:
    - join() reads the last position and inserts under a per-event lock plus
      a row lock on the capacity row, so concurrent joins get distinct
      positions
    - notify_next(commit=False) lets capacity release/expiry promote the queue
      inside their own transaction
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tradeconnect.config import get_settings
from tradeconnect.core import messages
from tradeconnect.core.domain_types import (
    RegistrationStatus, WaitlistStatus,
)
from tradeconnect.core.errors import (
    CapacityNotConfiguredError, ConflictError, EventNotFoundError,
    InsufficientPermissionsError, ResourceNotFoundError,
)
from tradeconnect.core.permissions import SYSTEM_ACTOR, Actor, can_manage
from tradeconnect.infrastructure.locks import keyed_lock
from tradeconnect.core.waitlist_queue import (
    QUEUED_STATUSES, count_by_status, is_notification_expired,
    next_position, notification_expiry, positions_after_removal,
)
from tradeconnect.models.capacity import Capacity
from tradeconnect.models.event import Event
from tradeconnect.models.event_registration import EventRegistration
from tradeconnect.models.waitlist_entry import WaitlistEntry
from tradeconnect.services.audit_service import AuditService

logger = logging.getLogger(__name__)

_QUEUED = tuple(s.value for s in QUEUED_STATUSES)
_LIVE_REGISTRATION = (
    RegistrationStatus.PENDING.value,
    RegistrationStatus.CONFIRMED.value,
    RegistrationStatus.ATTENDED.value,
)


def _scope(event_id: int, access_type_id: int | None) -> list:
    conditions = [WaitlistEntry.event_id == event_id]
    if access_type_id is not None:
        conditions.append(WaitlistEntry.access_type_id == access_type_id)
    return conditions


class WaitlistService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.audit = AuditService(db)

    async def join(
        self, event_id: int, access_type_id: int | None, actor: Actor,
    ) -> WaitlistEntry:
        if not await self.db.get(Event, event_id):
            raise EventNotFoundError(event_id)
        async with keyed_lock("waitlist", event_id):
            capacity = await self.db.scalar(
                select(Capacity)
                .where(
                    Capacity.event_id == event_id, Capacity.is_active.is_(True),
                )
                .with_for_update(),
            )
            if not capacity:
                raise CapacityNotConfiguredError(event_id)
            if not capacity.waitlist_enabled:
                raise ConflictError(
                    "WAITLIST_DISABLED", messages.WAITLIST_DISABLED,
                )
            await self._ensure_not_enrolled(event_id, actor.user_id)

            held = await self.db.scalars(
                select(WaitlistEntry.position).where(
                    *_scope(event_id, access_type_id),
                    WaitlistEntry.status.in_(_QUEUED),
                ),
            )
            entry = WaitlistEntry(
                event_id=event_id,
                access_type_id=access_type_id,
                user_id=actor.user_id,
                position=next_position(held.all()),
                status=WaitlistStatus.ACTIVE.value,
            )
            self.db.add(entry)
            await self.db.flush()
            await self.audit.record(
                "waitlist_joined", "waitlist", actor, resource_id=entry.id,
                new_values={
                    "eventId": event_id,
                    "accessTypeId": access_type_id,
                    "position": entry.position,
                },
            )
            await self.db.commit()
        logger.info(
            f"User joined waitlist at position {entry.position}",
            extra={"event_id": event_id, "user_id": actor.user_id},
        )
        return entry

    async def leave(self, entry_id: int, actor: Actor) -> WaitlistEntry:
        entry = await self._get_entry(entry_id)
        if not can_manage(actor, entry.user_id):
            raise InsufficientPermissionsError(messages.WAITLIST_FORBIDDEN)
        if entry.status not in _QUEUED:
            raise ConflictError(
                "INVALID_WAITLIST_STATUS", messages.WAITLIST_INVALID_STATUS,
            )
        old_status = entry.status
        entry.status = WaitlistStatus.CANCELLED.value
        entry.cancelled_at = datetime.now(timezone.utc)
        await self._compact(entry)
        await self.audit.record(
            "waitlist_left", "waitlist", actor, resource_id=entry.id,
            old_values={"status": old_status, "position": entry.position},
            new_values={"status": entry.status},
        )
        await self.db.commit()
        return entry

    async def notify_next(
        self,
        event_id: int,
        access_type_id: int | None = None,
        actor: Actor | None = None,
        commit: bool = True,
    ) -> WaitlistEntry | None:
        """Promote the head of the queue. Returns None for an empty queue."""
        result = await self.db.execute(
            select(WaitlistEntry)
            .where(
                *_scope(event_id, access_type_id),
                WaitlistEntry.status == WaitlistStatus.ACTIVE.value,
            )
            .order_by(WaitlistEntry.position.asc())
            .limit(1),
        )
        entry = result.scalar_one_or_none()
        if not entry:
            return None

        now = datetime.now(timezone.utc)
        entry.status = WaitlistStatus.NOTIFIED.value
        entry.notified_at = now
        entry.expires_at = notification_expiry(
            now, get_settings().waitlist_notification_hours,
        )
        await self.audit.record(
            "waitlist_notified", "waitlist", actor or SYSTEM_ACTOR,
            resource_id=entry.id,
            new_values={
                "status": entry.status,
                "userId": entry.user_id,
                "expiresAt": entry.expires_at.isoformat(),
            },
        )
        if commit:
            await self.db.commit()
        logger.info(
            "Waitlist entry notified",
            extra={"event_id": event_id, "entry_id": entry.id},
        )
        return entry

    async def confirm(
        self, entry_id: int, actor: Actor,
    ) -> tuple[WaitlistEntry, EventRegistration]:
        entry = await self._get_entry(entry_id)
        if entry.user_id != actor.user_id:
            raise InsufficientPermissionsError(messages.WAITLIST_FORBIDDEN)
        if entry.status != WaitlistStatus.NOTIFIED.value:
            raise ConflictError(
                "INVALID_WAITLIST_STATUS", messages.WAITLIST_INVALID_STATUS,
            )

        now = datetime.now(timezone.utc)
        if is_notification_expired(entry.expires_at, now):
            entry.status = WaitlistStatus.EXPIRED.value
            await self._compact(entry)
            await self.db.commit()
            raise ConflictError("WAITLIST_EXPIRED", messages.WAITLIST_EXPIRED)

        entry.status = WaitlistStatus.CONFIRMED.value
        entry.confirmed_at = now
        registration = EventRegistration(
            event_id=entry.event_id,
            user_id=entry.user_id,
            quantity=1,
            status=RegistrationStatus.CONFIRMED.value,
        )
        self.db.add(registration)
        await self._compact(entry)
        await self.db.flush()
        await self.audit.record(
            "waitlist_confirmed", "waitlist", actor, resource_id=entry.id,
            new_values={
                "status": entry.status,
                "registrationId": registration.id,
            },
        )
        await self.db.commit()
        return entry, registration

    async def list_queue(
        self, event_id: int, access_type_id: int | None = None,
    ) -> list[WaitlistEntry]:
        result = await self.db.execute(
            select(WaitlistEntry)
            .where(
                *_scope(event_id, access_type_id),
                WaitlistEntry.status.in_(_QUEUED),
            )
            .order_by(WaitlistEntry.position.asc()),
        )
        return list(result.scalars().all())

    async def position(
        self, event_id: int, user_id: int, access_type_id: int | None = None,
    ) -> dict | None:
        entry = await self.db.scalar(
            select(WaitlistEntry).where(
                *_scope(event_id, access_type_id),
                WaitlistEntry.user_id == user_id,
                WaitlistEntry.status.in_(_QUEUED),
            ),
        )
        if not entry:
            return None
        total = await self.db.scalar(
            select(func.count(WaitlistEntry.id)).where(
                *_scope(event_id, access_type_id),
                WaitlistEntry.status.in_(_QUEUED),
            ),
        )
        return {
            "entryId": entry.id,
            "position": entry.position,
            "status": entry.status,
            "total": total or 0,
        }

    async def stats(self, event_id: int) -> dict:
        statuses = await self.db.scalars(
            select(WaitlistEntry.status).where(WaitlistEntry.event_id == event_id),
        )
        return {"eventId": event_id, **count_by_status(statuses.all())}

    async def queued_count(self, event_id: int) -> int:
        return await self.db.scalar(
            select(func.count(WaitlistEntry.id)).where(
                WaitlistEntry.event_id == event_id,
                WaitlistEntry.status.in_(_QUEUED),
            ),
        ) or 0

    async def process_expired(self) -> int:
        """Expire overdue notifications and promote the next in each queue."""
        now = datetime.now(timezone.utc)
        result = await self.db.execute(
            select(WaitlistEntry)
            .where(
                WaitlistEntry.status == WaitlistStatus.NOTIFIED.value,
                WaitlistEntry.expires_at < now,
            )
            .order_by(WaitlistEntry.event_id, WaitlistEntry.position),
        )
        expired = list(result.scalars().all())
        for entry in expired:
            entry.status = WaitlistStatus.EXPIRED.value
            await self._compact(entry)
            await self.audit.record(
                "waitlist_expired", "waitlist", SYSTEM_ACTOR,
                resource_id=entry.id,
                old_values={"status": WaitlistStatus.NOTIFIED.value},
                new_values={"status": entry.status},
            )
            await self.db.flush()
            await self.notify_next(
                entry.event_id, entry.access_type_id, commit=False,
            )
        await self.db.commit()
        if expired:
            logger.info(
                f"Expired {len(expired)} waitlist notifications",
                extra={"count": len(expired)},
            )
        return len(expired)

    # ─── helpers ────────────────────────────────────────────────

    async def _get_entry(self, entry_id: int) -> WaitlistEntry:
        entry = await self.db.get(WaitlistEntry, entry_id)
        if not entry:
            raise ResourceNotFoundError(
                "WAITLIST_ENTRY_NOT_FOUND", messages.WAITLIST_ENTRY_NOT_FOUND,
                entry_id,
            )
        return entry

    async def _compact(self, removed: WaitlistEntry) -> None:
        """Close the gap left by `removed` in its queue."""
        result = await self.db.execute(
            select(WaitlistEntry).where(
                *_scope(removed.event_id, removed.access_type_id),
                WaitlistEntry.status.in_(_QUEUED),
                WaitlistEntry.id != removed.id,
            ),
        )
        behind = {e.id: e for e in result.scalars().all()}
        moves = positions_after_removal(
            {e.id: e.position for e in behind.values()}, removed.position,
        )
        for entry_id, new_position in moves.items():
            behind[entry_id].position = new_position

    async def _ensure_not_enrolled(self, event_id: int, user_id: int) -> None:
        registered = await self.db.scalar(
            select(EventRegistration.id).where(
                EventRegistration.event_id == event_id,
                EventRegistration.user_id == user_id,
                EventRegistration.status.in_(_LIVE_REGISTRATION),
            ),
        )
        if registered:
            raise ConflictError("ALREADY_REGISTERED", messages.ALREADY_REGISTERED)

        queued = await self.db.scalar(
            select(WaitlistEntry.id).where(
                WaitlistEntry.event_id == event_id,
                WaitlistEntry.user_id == user_id,
                WaitlistEntry.status.in_(_QUEUED),
            ),
        )
        if queued:
            raise ConflictError(
                "ALREADY_IN_WAITLIST", messages.ALREADY_IN_WAITLIST,
            )
