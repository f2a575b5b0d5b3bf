"""Event Service - event lifecycle, speaker assignment and attendance.

Invariants:
    - New and duplicated events start as draft
    - Schedule rules (end > start, <= 30 days, no past start) hold for every
      created or re-dated event
    - Only the event creator or an admin may duplicate, cancel, assign speakers,
      change participation status or check attendees in
    - A participation reaching `completed` bumps the speaker's totalEvents once;
      completed and cancelled participations cannot change status again
    - Cancelling an event cancels its tentative/confirmed participations

Design Decisions:
    - All field problems are collected by core/event_rules.py and raised as one
      ValidationError whose message is the first problem found
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tradeconnect.core import messages
from tradeconnect.core.availability import find_overlapping
from tradeconnect.core.clock import ensure_utc
from tradeconnect.core.domain_types import (
    AuditSeverity, EventStatus, ParticipationStatus, RegistrationStatus,
)
from tradeconnect.core.errors import (
    ConflictError, EventNotFoundError, InsufficientPermissionsError,
    ResourceNotFoundError, ValidationError,
)
from tradeconnect.core.event_rules import (
    can_change_participation, check_age_range, check_duplicate_dates,
    check_location, check_schedule, check_tags,
)
from tradeconnect.core.permissions import Actor, can_manage
from tradeconnect.models.event import Event
from tradeconnect.models.event_registration import EventRegistration
from tradeconnect.models.speaker_event import SpeakerEvent
from tradeconnect.schemas.event import (
    EventCreate, EventDuplicate, EventResponse, ParticipationUpdate,
    SpeakerAssignment, SpeakerEventResponse,
)
from tradeconnect.services.audit_service import AuditService
from tradeconnect.services.speaker_service import SpeakerService

logger = logging.getLogger(__name__)

COPY_SUFFIX = " (Copia)"
_PENDING = (
    ParticipationStatus.TENTATIVE.value, ParticipationStatus.CONFIRMED.value,
)


def _raise_if_invalid(details: list[dict]) -> None:
    if details:
        raise ValidationError(details[0]["message"], details=details)


class EventService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.audit = AuditService(db)

    async def get_event(self, event_id: int) -> Event:
        event = await self.db.get(Event, event_id)
        if not event:
            raise EventNotFoundError(event_id)
        return event

    async def get_managed_event(self, event_id: int, actor: Actor) -> Event:
        """Event the actor is allowed to modify (creator or admin)."""
        event = await self.get_event(event_id)
        if not can_manage(actor, event.created_by):
            raise InsufficientPermissionsError(messages.EVENT_FORBIDDEN)
        return event

    async def create_event(self, data: EventCreate, actor: Actor) -> Event:
        now = datetime.now(timezone.utc)
        _raise_if_invalid(
            check_schedule(data.start_date, data.end_date, now)
            + check_location(data.is_virtual, data.location, data.virtual_location)
            + check_tags(data.tags)
            + check_age_range(data.min_age, data.max_age),
        )
        event = Event(
            **data.model_dump(exclude={"start_date", "end_date"}),
            start_date=ensure_utc(data.start_date),
            end_date=ensure_utc(data.end_date),
            status=EventStatus.DRAFT.value,
            created_by=actor.user_id,
        )
        self.db.add(event)
        await self.db.flush()
        await self.audit.record(
            "event_created", "event", actor, resource_id=event.id,
            new_values=EventResponse.model_validate(event).to_wire(),
        )
        await self.db.commit()
        logger.info(f"Event created: {event.title}", extra={"event_id": event.id})
        return event

    async def duplicate_event(
        self, event_id: int, data: EventDuplicate, actor: Actor,
    ) -> Event:
        source = await self.get_managed_event(event_id, actor)
        _raise_if_invalid(check_duplicate_dates(data.start_date, data.end_date))
        if data.start_date is not None:
            _raise_if_invalid(check_schedule(
                data.start_date, data.end_date, datetime.now(timezone.utc),
            ))
            start, end = ensure_utc(data.start_date), ensure_utc(data.end_date)
        else:
            start, end = source.start_date, source.end_date

        title = data.title or (source.title + COPY_SUFFIX)[:100]
        copy = Event(
            title=title,
            description=source.description,
            short_description=source.short_description,
            start_date=start,
            end_date=end,
            location=source.location,
            virtual_location=source.virtual_location,
            is_virtual=source.is_virtual,
            price=data.price if data.price is not None else source.price,
            currency=source.currency,
            capacity=source.capacity,
            min_age=source.min_age,
            max_age=source.max_age,
            tags=list(source.tags or []),
            requirements=source.requirements,
            status=EventStatus.DRAFT.value,
            created_by=actor.user_id,
        )
        self.db.add(copy)
        await self.db.flush()
        await self.audit.record(
            "event_duplicated", "event", actor, resource_id=copy.id,
            metadata={"sourceEventId": source.id},
        )
        await self.db.commit()
        return copy

    async def cancel_event(
        self, event_id: int, reason: str | None, actor: Actor,
    ) -> Event:
        event = await self.get_managed_event(event_id, actor)
        if event.status == EventStatus.CANCELLED.value:
            raise ConflictError(
                "EVENT_ALREADY_CANCELLED", messages.EVENT_ALREADY_CANCELLED,
            )
        now = datetime.now(timezone.utc)
        old_status = event.status
        event.status = EventStatus.CANCELLED.value
        event.cancelled_at = now
        event.cancellation_reason = reason

        result = await self.db.execute(
            select(SpeakerEvent).where(
                SpeakerEvent.event_id == event_id,
                SpeakerEvent.status.in_(_PENDING),
            ),
        )
        participations = list(result.scalars().all())
        for participation in participations:
            participation.status = ParticipationStatus.CANCELLED.value
            participation.cancelled_at = now
            participation.cancellation_reason = reason

        await self.audit.record(
            "event_cancelled", "event", actor, resource_id=event.id,
            old_values={"status": old_status},
            new_values={"status": event.status, "reason": reason},
            metadata={"cancelledParticipations": len(participations)},
            severity=AuditSeverity.HIGH,
        )
        await self.db.commit()
        logger.info("Event cancelled", extra={"event_id": event.id})
        return event

    # ─── Speakers ───────────────────────────────────────────────

    async def assign_speaker(
        self, event_id: int, data: SpeakerAssignment, actor: Actor,
    ) -> SpeakerEvent:
        event = await self.get_managed_event(event_id, actor)
        speaker = await SpeakerService(self.db).get_speaker(data.speaker_id)

        existing = await self.db.scalar(
            select(SpeakerEvent.id).where(
                SpeakerEvent.event_id == event.id,
                SpeakerEvent.speaker_id == speaker.id,
            ),
        )
        if existing:
            raise ConflictError(
                "SPEAKER_ALREADY_ASSIGNED", messages.SPEAKER_ALREADY_ASSIGNED,
            )

        start = ensure_utc(data.participation_start)
        end = ensure_utc(data.participation_end)
        if find_overlapping(speaker.availability_blocks, start, end):
            raise ConflictError(
                "AVAILABILITY_CONFLICT", messages.SPEAKER_UNAVAILABLE,
            )

        participation = SpeakerEvent(
            speaker_id=speaker.id,
            event_id=event.id,
            role=data.role.value,
            participation_start=start,
            participation_end=end,
            duration_minutes=int((end - start).total_seconds() // 60),
            modality=data.modality.value,
            order=data.order,
            status=ParticipationStatus.TENTATIVE.value,
            notes=data.notes,
            created_by=actor.user_id,
            event=event,
            speaker=speaker,
        )
        self.db.add(participation)
        await self.db.flush()
        await self.audit.record(
            "speaker_assigned", "event", actor, resource_id=event.id,
            new_values=SpeakerEventResponse.model_validate(participation).to_wire(),
        )
        await self.db.commit()
        logger.info(
            "Speaker assigned to event",
            extra={"event_id": event.id, "speaker_id": speaker.id},
        )
        return participation

    async def update_participation(
        self, event_id: int, speaker_id: int, data: ParticipationUpdate,
        actor: Actor,
    ) -> SpeakerEvent:
        event = await self.get_managed_event(event_id, actor)
        result = await self.db.execute(
            select(SpeakerEvent).where(
                SpeakerEvent.event_id == event.id,
                SpeakerEvent.speaker_id == speaker_id,
            ),
        )
        participation = result.scalar_one_or_none()
        if not participation:
            raise ConflictError(
                "SPEAKER_EVENT_NOT_FOUND", messages.SPEAKER_EVENT_NOT_FOUND,
            )

        previous = participation.status
        if not can_change_participation(previous):
            raise ConflictError(
                "INVALID_PARTICIPATION_STATUS", messages.PARTICIPATION_FINAL,
            )

        now = datetime.now(timezone.utc)
        participation.status = data.status.value
        if data.notes:
            participation.notes = data.notes
        if data.status == ParticipationStatus.CONFIRMED:
            participation.confirmed_at = now
        elif data.status == ParticipationStatus.CANCELLED:
            participation.cancelled_at = now
            participation.cancellation_reason = data.cancellation_reason
        elif data.status == ParticipationStatus.COMPLETED:
            participation.speaker.total_events += 1

        await self.audit.record(
            "speaker_event_status_updated", "event", actor,
            resource_id=event.id,
            old_values={"status": previous},
            new_values={"status": participation.status, "speakerId": speaker_id},
        )
        await self.db.commit()
        return participation

    # ─── Attendance ─────────────────────────────────────────────

    async def attendance_report(self, event_id: int) -> dict:
        event = await self.get_event(event_id)
        result = await self.db.execute(
            select(EventRegistration.status, func.sum(EventRegistration.quantity))
            .where(EventRegistration.event_id == event_id)
            .group_by(EventRegistration.status),
        )
        seats = {status: int(total or 0) for status, total in result.all()}
        confirmed = seats.get(RegistrationStatus.CONFIRMED.value, 0)
        attended = seats.get(RegistrationStatus.ATTENDED.value, 0)
        expected = confirmed + attended
        return {
            "eventId": event.id,
            "eventTitle": event.title,
            "registered": sum(seats.values()),
            "pending": seats.get(RegistrationStatus.PENDING.value, 0),
            "confirmed": confirmed,
            "attended": attended,
            "cancelled": seats.get(RegistrationStatus.CANCELLED.value, 0),
            "attendanceRate": round(attended / expected * 100, 2) if expected else 0.0,
            "generatedAt": datetime.now(timezone.utc).isoformat(),
        }

    async def check_in(
        self, event_id: int, registration_id: int, actor: Actor,
    ) -> EventRegistration:
        await self.get_managed_event(event_id, actor)
        registration = await self.db.get(EventRegistration, registration_id)
        if not registration or registration.event_id != event_id:
            raise ResourceNotFoundError(
                "REGISTRATION_NOT_FOUND", messages.REGISTRATION_NOT_FOUND,
                registration_id,
            )
        if registration.status != RegistrationStatus.CONFIRMED.value:
            raise ConflictError(
                "INVALID_REGISTRATION_STATUS",
                messages.REGISTRATION_NOT_CONFIRMED,
            )
        registration.status = RegistrationStatus.ATTENDED.value
        registration.checked_in_at = datetime.now(timezone.utc)
        await self.audit.record(
            "attendee_checked_in", "event_registration", actor,
            resource_id=registration.id, metadata={"eventId": event_id},
        )
        await self.db.commit()
        return registration
