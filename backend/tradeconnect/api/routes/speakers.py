"""Speaker Routes - catalog, availability, evaluations and speaker dashboards.

Invariants:
    - Listing and detail are public; detail shows private fields only to the
      creator or an admin
    - Create, update and availability are behind the create/edit limiter
    - Routes never contain business logic (delegate to SpeakerService)
"""

import logging

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from tradeconnect.api.dependencies import (
    get_current_actor, get_optional_actor, require_admin,
)
from tradeconnect.api.rate_limiting import create_edit_limit
from tradeconnect.api.responses import success
from tradeconnect.core import messages
from tradeconnect.core.domain_types import (
    Modality, ParticipationStatus, SortOrder, SpeakerCategory, SpeakerLanguage,
    SpeakerSortField,
)
from tradeconnect.core.permissions import Actor
from tradeconnect.infrastructure.database import get_db
from tradeconnect.schemas.speaker import (
    AvailabilityBlockCreate, AvailabilityBlockResponse, EvaluationCreate,
    EvaluationResponse, SpeakerCreate, SpeakerPrivate, SpeakerUpdate,
)
from tradeconnect.services.speaker_service import SpeakerFilters, SpeakerService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/speakers", tags=["speakers"])


@router.get("")
async def list_speakers(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: str | None = Query(None, min_length=2, max_length=100),
    category: SpeakerCategory | None = None,
    min_rating: float | None = Query(None, alias="minRating", ge=0, le=5),
    min_rate: float | None = Query(None, alias="minRate", ge=0),
    max_rate: float | None = Query(None, alias="maxRate", ge=0),
    modalities: list[Modality] = Query([]),
    languages: list[SpeakerLanguage] = Query([]),
    specialties: list[int] = Query([]),
    sort_by: SpeakerSortField = Query(SpeakerSortField.RATING, alias="sortBy"),
    sort_order: SortOrder = Query(SortOrder.DESC, alias="sortOrder"),
    db: AsyncSession = Depends(get_db),
):
    filters = SpeakerFilters(
        page=page, limit=limit, search=search, category=category,
        min_rating=min_rating, min_rate=min_rate, max_rate=max_rate,
        modalities=modalities, languages=languages, specialties=specialties,
        sort_by=sort_by, sort_order=sort_order,
    )
    data = await SpeakerService(db).list_speakers(filters)
    return success(messages.SPEAKERS_FETCHED, data)


@router.post("", status_code=status.HTTP_201_CREATED)
@create_edit_limit
async def create_speaker(
    request: Request,
    body: SpeakerCreate,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    speaker = await SpeakerService(db).create_speaker(body, actor)
    return success(
        messages.SPEAKER_CREATED, SpeakerPrivate.model_validate(speaker).to_wire(),
    )


@router.get("/{speaker_id}")
async def get_speaker(
    speaker_id: int,
    actor: Actor = Depends(get_optional_actor),
    db: AsyncSession = Depends(get_db),
):
    data = await SpeakerService(db).get_speaker_detail(speaker_id, actor)
    return success(messages.SPEAKER_FETCHED, data)


@router.put("/{speaker_id}")
@create_edit_limit
async def update_speaker(
    request: Request,
    speaker_id: int,
    body: SpeakerUpdate,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    speaker = await SpeakerService(db).update_speaker(speaker_id, body, actor)
    return success(
        messages.SPEAKER_UPDATED, SpeakerPrivate.model_validate(speaker).to_wire(),
    )


@router.delete("/{speaker_id}")
async def delete_speaker(
    speaker_id: int,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    await SpeakerService(db).delete_speaker(speaker_id, actor)
    return success(messages.SPEAKER_DELETED)


@router.post("/{speaker_id}/verify")
async def verify_speaker(
    speaker_id: int,
    actor: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    speaker = await SpeakerService(db).verify_speaker(speaker_id, actor)
    return success(
        messages.SPEAKER_VERIFIED, SpeakerPrivate.model_validate(speaker).to_wire(),
    )


@router.post("/{speaker_id}/availability", status_code=status.HTTP_201_CREATED)
@create_edit_limit
async def create_availability_block(
    request: Request,
    speaker_id: int,
    body: AvailabilityBlockCreate,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    block = await SpeakerService(db).create_availability_block(
        speaker_id, body, actor,
    )
    return success(
        messages.AVAILABILITY_CREATED,
        AvailabilityBlockResponse.model_validate(block).to_wire(),
    )


@router.post("/{speaker_id}/evaluate", status_code=status.HTTP_201_CREATED)
async def evaluate_speaker(
    speaker_id: int,
    body: EvaluationCreate,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    evaluation = await SpeakerService(db).create_evaluation(speaker_id, body, actor)
    return success(
        messages.EVALUATION_CREATED,
        EvaluationResponse.model_validate(evaluation).to_wire(),
    )


@router.get("/{speaker_id}/stats")
async def speaker_stats(
    speaker_id: int,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    data = await SpeakerService(db).get_stats(speaker_id)
    return success(messages.SPEAKER_STATS_FETCHED, data)


@router.get("/{speaker_id}/events")
async def speaker_events(
    speaker_id: int,
    status_filter: ParticipationStatus | None = Query(None, alias="status"),
    upcoming: bool = False,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    data = await SpeakerService(db).get_assigned_events(
        speaker_id, status_filter, upcoming, page, limit,
    )
    return success(messages.SPEAKER_EVENTS_FETCHED, data)
