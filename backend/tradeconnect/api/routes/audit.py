"""Audit Routes - admin-only queries over the audit trail.

Invariants:
    - Every route requires an admin caller
    - Stats share the stricter stats limiter
"""

from datetime import datetime

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from tradeconnect.api.dependencies import require_admin
from tradeconnect.api.rate_limiting import stats_limit
from tradeconnect.api.responses import success
from tradeconnect.core import messages
from tradeconnect.core.domain_types import AuditSeverity, AuditStatus
from tradeconnect.core.pagination import build_pagination
from tradeconnect.core.permissions import Actor
from tradeconnect.infrastructure.database import get_db
from tradeconnect.schemas.audit import AuditCleanup, AuditLogResponse
from tradeconnect.services.audit_service import AuditLogFilters, AuditService

router = APIRouter(prefix="/api/audit", tags=["audit"])


def _log(entry) -> dict:
    return AuditLogResponse.model_validate(entry).to_wire()


@router.get("/logs")
async def list_logs(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    user_id: int | None = Query(None, alias="userId"),
    action: str | None = None,
    resource: str | None = None,
    severity: AuditSeverity | None = None,
    status: AuditStatus | None = None,
    start_date: datetime | None = Query(None, alias="startDate"),
    end_date: datetime | None = Query(None, alias="endDate"),
    ip_address: str | None = Query(None, alias="ipAddress"),
    actor: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    filters = AuditLogFilters(
        user_id=user_id, action=action, resource=resource, severity=severity,
        status=status, start_date=start_date, end_date=end_date,
        ip_address=ip_address,
    )
    logs, total = await AuditService(db).list_logs(filters, page, limit)
    return success(messages.AUDIT_LOGS_FETCHED, {
        "logs": [_log(entry) for entry in logs],
        "pagination": build_pagination(page, limit, total),
    })


@router.get("/logs/{log_id}")
async def get_log(
    log_id: int,
    actor: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    entry, related = await AuditService(db).get_log(log_id)
    return success(messages.AUDIT_LOG_FETCHED, {
        "log": _log(entry),
        "relatedLogs": [_log(r) for r in related],
    })


@router.get("/stats")
@stats_limit
async def audit_stats(
    request: Request,
    period: str = Query("24h", pattern=r"^(1h|24h|7d|30d|90d)$"),
    actor: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    data = await AuditService(db).stats(period)
    return success(messages.AUDIT_STATS_FETCHED, data)


@router.get("/critical")
async def critical_events(
    hours: int = Query(24, ge=1, le=168),
    limit: int = Query(50, ge=1, le=200),
    actor: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    logs = await AuditService(db).critical_events(hours, limit)
    return success(messages.AUDIT_LOGS_FETCHED, [_log(entry) for entry in logs])


@router.post("/cleanup")
async def cleanup_logs(
    body: AuditCleanup,
    actor: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    data = await AuditService(db).cleanup(body.days_to_keep, body.dry_run, actor)
    message = (
        messages.AUDIT_CLEANUP_DRY_RUN.format(count=data["wouldDeleteCount"])
        if body.dry_run
        else messages.AUDIT_CLEANUP_DONE.format(count=data["deletedCount"])
    )
    return success(message, data)
