"""Speaker Service - speaker catalog, availability, evaluations and dashboard stats.

Invariants:
    - Soft-deleted speakers are invisible: every lookup filters deleted_at IS NULL
    - Only the creator or an admin may update or delete a speaker
    - A speaker with future tentative/confirmed participations cannot be deleted
    - Availability blocks of one speaker never overlap (inclusive bounds)
    - Evaluations require a completed participation; rating = mean of all
      overall ratings, rounded to 2 decimals
    - Every mutation writes an audit row in the same transaction

Design Decisions:
    - JSON-array filters (modalities, languages, specialties) run in Python after
      the SQL scalar filters; pagination is applied afterwards so totals are exact
    - Private fields are exposed only to the creator or an admin
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from tradeconnect.core import messages
from tradeconnect.core.availability import find_overlapping
from tradeconnect.core.clock import ensure_utc
from tradeconnect.core.domain_types import (
    AuditSeverity, Modality, ParticipationStatus, SortOrder, SpeakerCategory,
    SpeakerLanguage, SpeakerRole, SpeakerSortField,
)
from tradeconnect.core.errors import (
    ConflictError, EventNotFoundError, InsufficientPermissionsError,
    SpeakerNotFoundError, ValidationError,
)
from tradeconnect.core.evaluation_stats import (
    average_rating, evaluation_summary, most_common, rating_distribution,
)
from tradeconnect.core.pagination import build_pagination, page_offset
from tradeconnect.core.permissions import Actor, can_manage
from tradeconnect.models.availability_block import AvailabilityBlock
from tradeconnect.models.event import Event
from tradeconnect.models.speaker import Speaker
from tradeconnect.models.speaker_evaluation import SpeakerEvaluation
from tradeconnect.models.speaker_event import SpeakerEvent
from tradeconnect.models.specialty import Specialty
from tradeconnect.schemas.event import SpeakerEventResponse
from tradeconnect.schemas.speaker import (
    AvailabilityBlockCreate, AvailabilityBlockResponse, EvaluationCreate,
    EvaluationResponse, SpeakerCreate, SpeakerPrivate, SpeakerPublic,
    SpeakerUpdate,
)
from tradeconnect.services.audit_service import AuditService

logger = logging.getLogger(__name__)

RECENT_EVALUATIONS = 5
PENDING_PARTICIPATION = (
    ParticipationStatus.TENTATIVE.value, ParticipationStatus.CONFIRMED.value,
)

_SORT_COLUMNS = {
    SpeakerSortField.FIRST_NAME: Speaker.first_name,
    SpeakerSortField.LAST_NAME: Speaker.last_name,
    SpeakerSortField.RATING: Speaker.rating,
    SpeakerSortField.TOTAL_EVENTS: Speaker.total_events,
    SpeakerSortField.BASE_RATE: Speaker.base_rate,
    SpeakerSortField.CREATED_AT: Speaker.created_at,
    SpeakerSortField.VERIFIED_AT: Speaker.verified_at,
}


@dataclass
class SpeakerFilters:
    page: int = 1
    limit: int = 20
    search: str | None = None
    category: SpeakerCategory | None = None
    min_rating: float | None = None
    min_rate: float | None = None
    max_rate: float | None = None
    modalities: list[Modality] = field(default_factory=list)
    languages: list[SpeakerLanguage] = field(default_factory=list)
    specialties: list[int] = field(default_factory=list)
    sort_by: SpeakerSortField = SpeakerSortField.RATING
    sort_order: SortOrder = SortOrder.DESC

    def applied(self) -> dict:
        """Echo of the filters that were actually set (camelCase keys)."""
        applied = {
            "search": self.search,
            "category": self.category.value if self.category else None,
            "minRating": self.min_rating,
            "minRate": self.min_rate,
            "maxRate": self.max_rate,
            "modalities": [m.value for m in self.modalities] or None,
            "languages": [lang.value for lang in self.languages] or None,
            "specialties": self.specialties or None,
        }
        applied = {k: v for k, v in applied.items() if v is not None}
        applied["sortBy"] = self.sort_by.value
        applied["sortOrder"] = self.sort_order.value
        return applied


def snapshot(speaker: Speaker) -> dict:
    return SpeakerPrivate.model_validate(speaker).to_wire()


class SpeakerService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.audit = AuditService(db)

    # ─── Queries ────────────────────────────────────────────────

    async def get_speaker(self, speaker_id: int) -> Speaker:
        result = await self.db.execute(
            select(Speaker).where(
                Speaker.id == speaker_id, Speaker.deleted_at.is_(None),
            ),
        )
        speaker = result.scalar_one_or_none()
        if not speaker:
            raise SpeakerNotFoundError(speaker_id)
        return speaker

    async def list_speakers(self, filters: SpeakerFilters) -> dict:
        query = select(Speaker).where(
            Speaker.deleted_at.is_(None), Speaker.is_active.is_(True),
        )
        if filters.search:
            pattern = f"%{filters.search.strip().lower()}%"
            query = query.where(or_(
                func.lower(Speaker.first_name).like(pattern),
                func.lower(Speaker.last_name).like(pattern),
                func.lower(Speaker.email).like(pattern),
                func.lower(Speaker.short_bio).like(pattern),
            ))
        if filters.category:
            query = query.where(Speaker.category == filters.category.value)
        if filters.min_rating is not None:
            query = query.where(Speaker.rating >= filters.min_rating)
        if filters.min_rate is not None:
            query = query.where(Speaker.base_rate >= filters.min_rate)
        if filters.max_rate is not None:
            query = query.where(Speaker.base_rate <= filters.max_rate)

        column = _SORT_COLUMNS[filters.sort_by]
        ordering = [column.asc() if filters.sort_order == SortOrder.ASC else column.desc()]
        if filters.sort_by == SpeakerSortField.RATING:
            ordering.append(Speaker.total_events.desc())
        ordering.append(Speaker.id.asc())
        result = await self.db.execute(query.order_by(*ordering))

        speakers = [s for s in result.scalars().all() if _matches_lists(s, filters)]
        total = len(speakers)
        start = page_offset(filters.page, filters.limit)
        page = speakers[start:start + filters.limit]
        return {
            "speakers": [SpeakerPublic.model_validate(s).to_wire() for s in page],
            "pagination": build_pagination(filters.page, filters.limit, total),
            "filters": filters.applied(),
        }

    async def get_speaker_detail(self, speaker_id: int, actor: Actor) -> dict:
        speaker = await self.get_speaker(speaker_id)
        schema = SpeakerPrivate if can_manage(actor, speaker.created_by) else SpeakerPublic
        data = schema.model_validate(speaker).to_wire()

        evaluations = await self._evaluations(speaker_id)
        data["availabilityBlocks"] = [
            AvailabilityBlockResponse.model_validate(b).to_wire()
            for b in speaker.availability_blocks
        ]
        data["recentEvaluations"] = [
            EvaluationResponse.model_validate(e).to_wire()
            for e in evaluations[:RECENT_EVALUATIONS]
        ]
        data["evaluationStats"] = evaluation_summary(
            [e.overall_rating for e in evaluations],
            [e.criteria_ratings for e in evaluations],
        )
        return data

    async def get_stats(self, speaker_id: int) -> dict:
        """Dashboard statistics for one speaker."""
        speaker = await self.get_speaker(speaker_id)
        now = datetime.now(timezone.utc)
        result = await self.db.execute(
            select(SpeakerEvent).where(SpeakerEvent.speaker_id == speaker_id),
        )
        participations = list(result.scalars().all())
        evaluations = await self._evaluations(speaker_id)
        ratings = [e.overall_rating for e in evaluations]

        def count(status: ParticipationStatus) -> int:
            return sum(1 for p in participations if p.status == status.value)

        upcoming = [
            p for p in participations
            if p.status in PENDING_PARTICIPATION
            and ensure_utc(p.participation_start) > now
        ]
        next_confirmed = min(
            (
                ensure_utc(p.participation_start) for p in upcoming
                if p.status == ParticipationStatus.CONFIRMED.value
            ),
            default=None,
        )
        last_completed = max(
            (
                ensure_utc(p.participation_end) for p in participations
                if p.status == ParticipationStatus.COMPLETED.value
            ),
            default=None,
        )
        return {
            "speakerId": speaker.id,
            "totalEvents": len(participations),
            "completedEvents": count(ParticipationStatus.COMPLETED),
            "confirmedEvents": count(ParticipationStatus.CONFIRMED),
            "tentativeEvents": count(ParticipationStatus.TENTATIVE),
            "cancelledEvents": count(ParticipationStatus.CANCELLED),
            "upcomingEvents": len(upcoming),
            "averageRating": average_rating(ratings),
            "totalEvaluations": len(ratings),
            "ratingDistribution": rating_distribution(ratings),
            "mostUsedModality": most_common(
                (p.modality for p in participations), Modality.VIRTUAL.value,
            ),
            "mostCommonRole": most_common(
                (p.role for p in participations),
                SpeakerRole.KEYNOTE_SPEAKER.value,
            ),
            "specialtiesCount": len(speaker.specialties),
            "lastEventDate": last_completed.isoformat() if last_completed else None,
            "nextEventDate": next_confirmed.isoformat() if next_confirmed else None,
        }

    async def get_assigned_events(
        self,
        speaker_id: int,
        status: ParticipationStatus | None = None,
        upcoming: bool = False,
        page: int = 1,
        limit: int = 20,
    ) -> dict:
        await self.get_speaker(speaker_id)
        conditions = [SpeakerEvent.speaker_id == speaker_id]
        if status:
            conditions.append(SpeakerEvent.status == status.value)
        if upcoming:
            conditions.append(
                SpeakerEvent.participation_start > datetime.now(timezone.utc),
            )
            conditions.append(SpeakerEvent.status.in_(PENDING_PARTICIPATION))

        total = await self.db.scalar(
            select(func.count(SpeakerEvent.id)).where(*conditions),
        ) or 0
        result = await self.db.execute(
            select(SpeakerEvent)
            .where(*conditions)
            .order_by(SpeakerEvent.participation_start.asc())
            .offset(page_offset(page, limit))
            .limit(limit),
        )
        return {
            "events": [
                SpeakerEventResponse.model_validate(se).to_wire()
                for se in result.scalars().all()
            ],
            "pagination": build_pagination(page, limit, total),
        }

    # ─── Commands ───────────────────────────────────────────────

    async def create_speaker(self, data: SpeakerCreate, actor: Actor) -> Speaker:
        await self._ensure_email_free(data.email)
        specialties = await self._load_specialties(data.specialty_ids)
        speaker = Speaker(
            **data.model_dump(exclude={"specialty_ids"}, mode="json"),
            created_by=actor.user_id,
            rating=0,
            total_events=0,
            is_active=True,
            specialties=specialties,
            availability_blocks=[],
        )
        self.db.add(speaker)
        await self.db.flush()
        await self.audit.record(
            "speaker_created", "speaker", actor,
            resource_id=speaker.id, new_values=snapshot(speaker),
        )
        await self.db.commit()
        logger.info(
            f"Speaker created: {speaker.full_name}",
            extra={"speaker_id": speaker.id, "user_id": actor.user_id},
        )
        return speaker

    async def update_speaker(
        self, speaker_id: int, data: SpeakerUpdate, actor: Actor,
    ) -> Speaker:
        speaker = await self.get_speaker(speaker_id)
        if not can_manage(actor, speaker.created_by):
            raise InsufficientPermissionsError(messages.SPEAKER_UPDATE_FORBIDDEN)

        changes = data.model_dump(exclude_unset=True, mode="json")
        if "email" in changes and changes["email"] != speaker.email:
            await self._ensure_email_free(changes["email"])
        old_values = snapshot(speaker)

        specialty_ids = changes.pop("specialty_ids", None)
        if specialty_ids is not None:
            speaker.specialties = await self._load_specialties(specialty_ids)
        for key, value in changes.items():
            setattr(speaker, key, value)
        speaker.updated_by = actor.user_id

        await self.db.flush()
        await self.audit.record(
            "speaker_updated", "speaker", actor, resource_id=speaker.id,
            old_values=old_values, new_values=snapshot(speaker),
        )
        await self.db.commit()
        logger.info("Speaker updated", extra={"speaker_id": speaker.id})
        return speaker

    async def delete_speaker(self, speaker_id: int, actor: Actor) -> None:
        speaker = await self.get_speaker(speaker_id)
        if not can_manage(actor, speaker.created_by):
            raise InsufficientPermissionsError(messages.SPEAKER_DELETE_FORBIDDEN)

        future = await self.db.scalar(
            select(func.count(SpeakerEvent.id)).where(
                SpeakerEvent.speaker_id == speaker_id,
                SpeakerEvent.status.in_(PENDING_PARTICIPATION),
                SpeakerEvent.participation_start > datetime.now(timezone.utc),
            ),
        )
        if future:
            raise ConflictError(
                "SPEAKER_HAS_FUTURE_EVENTS", messages.SPEAKER_HAS_FUTURE_EVENTS,
            )

        old_values = snapshot(speaker)
        speaker.deleted_at = datetime.now(timezone.utc)
        speaker.is_active = False
        speaker.updated_by = actor.user_id
        await self.audit.record(
            "speaker_deleted", "speaker", actor, resource_id=speaker.id,
            old_values=old_values, severity=AuditSeverity.MEDIUM,
        )
        await self.db.commit()
        logger.info("Speaker soft-deleted", extra={"speaker_id": speaker_id})

    async def verify_speaker(self, speaker_id: int, actor: Actor) -> Speaker:
        if not actor.is_admin:
            raise InsufficientPermissionsError()
        speaker = await self.get_speaker(speaker_id)
        speaker.verified_at = datetime.now(timezone.utc)
        speaker.verified_by = actor.user_id
        speaker.updated_by = actor.user_id
        await self.audit.record(
            "speaker_verified", "speaker", actor, resource_id=speaker.id,
            new_values={
                "verifiedAt": speaker.verified_at.isoformat(),
                "verifiedBy": actor.user_id,
            },
        )
        await self.db.commit()
        return speaker

    async def create_availability_block(
        self, speaker_id: int, data: AvailabilityBlockCreate, actor: Actor,
    ) -> AvailabilityBlock:
        speaker = await self.get_speaker(speaker_id)
        start, end = ensure_utc(data.start_date), ensure_utc(data.end_date)
        if end <= start:
            raise ValidationError(messages.END_AFTER_START, details=[{
                "field": "endDate",
                "message": messages.END_AFTER_START,
                "type": "value_error",
            }])

        if find_overlapping(speaker.availability_blocks, start, end):
            raise ConflictError(
                "AVAILABILITY_CONFLICT", messages.AVAILABILITY_CONFLICT,
            )

        block = AvailabilityBlock(
            speaker_id=speaker.id,
            start_date=start,
            end_date=end,
            reason=data.reason,
            is_recurring=data.is_recurring,
            recurrence_pattern=(
                data.recurrence_pattern.value if data.recurrence_pattern else None
            ),
            created_by=actor.user_id,
        )
        speaker.availability_blocks.append(block)
        await self.db.flush()
        await self.audit.record(
            "availability_block_created", "speaker", actor,
            resource_id=speaker.id,
            new_values=AvailabilityBlockResponse.model_validate(block).to_wire(),
        )
        await self.db.commit()
        return block

    async def create_evaluation(
        self, speaker_id: int, data: EvaluationCreate, actor: Actor,
    ) -> SpeakerEvaluation:
        speaker = await self.get_speaker(speaker_id)
        event = await self.db.get(Event, data.event_id)
        if not event:
            raise EventNotFoundError(data.event_id)

        completed = await self.db.scalar(
            select(SpeakerEvent.id).where(
                SpeakerEvent.speaker_id == speaker_id,
                SpeakerEvent.event_id == data.event_id,
                SpeakerEvent.status == ParticipationStatus.COMPLETED.value,
            ),
        )
        if not completed:
            raise ConflictError(
                "SPEAKER_EVENT_NOT_FOUND", messages.SPEAKER_EVENT_NOT_COMPLETED,
            )

        evaluation = SpeakerEvaluation(
            speaker_id=speaker_id,
            event_id=data.event_id,
            evaluator_id=actor.user_id,
            evaluator_type=data.evaluator_type.value,
            overall_rating=data.overall_rating,
            criteria_ratings=data.criteria_ratings,
            comments=data.comments,
            is_public=data.is_public,
            evaluation_date=ensure_utc(data.evaluation_date) or datetime.now(timezone.utc),
        )
        self.db.add(evaluation)
        await self.db.flush()

        ratings = await self.db.scalars(
            select(SpeakerEvaluation.overall_rating).where(
                SpeakerEvaluation.speaker_id == speaker_id,
            ),
        )
        speaker.rating = average_rating(ratings.all())
        await self.audit.record(
            "speaker_evaluated", "speaker", actor, resource_id=speaker_id,
            new_values=EvaluationResponse.model_validate(evaluation).to_wire(),
        )
        await self.db.commit()
        logger.info(
            f"Speaker evaluated, new rating {speaker.rating}",
            extra={"speaker_id": speaker_id, "event_id": data.event_id},
        )
        return evaluation

    # ─── helpers ────────────────────────────────────────────────

    async def _evaluations(self, speaker_id: int) -> list[SpeakerEvaluation]:
        result = await self.db.execute(
            select(SpeakerEvaluation)
            .where(SpeakerEvaluation.speaker_id == speaker_id)
            .order_by(
                SpeakerEvaluation.evaluation_date.desc(),
                SpeakerEvaluation.id.desc(),
            ),
        )
        return list(result.scalars().all())

    async def _ensure_email_free(self, email: str) -> None:
        taken = await self.db.scalar(
            select(Speaker.id).where(func.lower(Speaker.email) == email.lower()),
        )
        if taken:
            raise ConflictError(
                "SPEAKER_EMAIL_EXISTS", messages.SPEAKER_EMAIL_TAKEN,
            )

    async def _load_specialties(self, ids: list[int]) -> list[Specialty]:
        if not ids:
            return []
        result = await self.db.execute(
            select(Specialty).where(
                Specialty.id.in_(ids), Specialty.is_active.is_(True),
            ),
        )
        found = list(result.scalars().all())
        if len(found) != len(set(ids)):
            raise ValidationError(messages.SPECIALTIES_NOT_FOUND, details=[{
                "field": "specialtyIds",
                "message": messages.SPECIALTIES_NOT_FOUND,
                "type": "value_error",
            }])
        return found


def _matches_lists(speaker: Speaker, filters: SpeakerFilters) -> bool:
    if filters.modalities and not (
        {m.value for m in filters.modalities} & set(speaker.modalities or [])
    ):
        return False
    if filters.languages and not (
        {lang.value for lang in filters.languages} & set(speaker.languages or [])
    ):
        return False
    if filters.specialties and not (
        set(filters.specialties) & {s.id for s in speaker.specialties}
    ):
        return False
    return True
