"""Audit Service - append-only audit trail plus admin queries over it.

Invariants:
    - record() adds the row to the caller's session and never commits:
      the audit row lands in the same transaction as the change it describes
    - Cleanup never deletes critical-severity rows
    - Stats are computed over a trailing period (1h, 24h, 7d, 30d, 90d)

Design Decisions:
    - Old/new values are JSON snapshots produced by the response schemas, so the
      trail stores exactly what clients would have seen
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from sqlalchemy import and_, delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from tradeconnect.core import messages
from tradeconnect.core.clock import ensure_utc
from tradeconnect.core.domain_types import AuditSeverity, AuditStatus
from tradeconnect.core.errors import ResourceNotFoundError
from tradeconnect.core.pagination import page_offset
from tradeconnect.core.permissions import SYSTEM_ACTOR, Actor
from tradeconnect.models.audit_log import AuditLog

logger = logging.getLogger(__name__)

STATS_PERIODS: dict[str, timedelta] = {
    "1h": timedelta(hours=1),
    "24h": timedelta(hours=24),
    "7d": timedelta(days=7),
    "30d": timedelta(days=30),
    "90d": timedelta(days=90),
}
RELATED_WINDOW = timedelta(minutes=5)


@dataclass
class AuditLogFilters:
    user_id: int | None = None
    action: str | None = None
    resource: str | None = None
    severity: AuditSeverity | None = None
    status: AuditStatus | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    ip_address: str | None = None


class AuditService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def record(
        self,
        action: str,
        resource: str,
        actor: Actor | None = None,
        resource_id: object = None,
        old_values: dict | None = None,
        new_values: dict | None = None,
        metadata: dict | None = None,
        severity: AuditSeverity = AuditSeverity.LOW,
        status: AuditStatus = AuditStatus.SUCCESS,
    ) -> AuditLog:
        actor = actor or SYSTEM_ACTOR
        entry = AuditLog(
            user_id=actor.user_id,
            action=action,
            resource=resource,
            resource_id=str(resource_id) if resource_id is not None else None,
            old_values=old_values,
            new_values=new_values,
            ip_address=actor.ip_address,
            user_agent=actor.user_agent,
            extra=metadata,
            severity=severity.value,
            status=status.value,
        )
        self.db.add(entry)
        logger.info(
            f"Audit: {action} on {resource}",
            extra={"action": action, "user_id": actor.user_id},
        )
        return entry

    async def list_logs(
        self, filters: AuditLogFilters, page: int, limit: int,
    ) -> tuple[list[AuditLog], int]:
        conditions = self._conditions(filters)
        total = await self.db.scalar(
            select(func.count(AuditLog.id)).where(*conditions),
        )
        result = await self.db.execute(
            select(AuditLog)
            .where(*conditions)
            .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
            .offset(page_offset(page, limit))
            .limit(limit),
        )
        return list(result.scalars().all()), total or 0

    async def get_log(self, log_id: int) -> tuple[AuditLog, list[AuditLog]]:
        """A log entry plus up to 10 related entries (same user, same
        resource id, or same resource within five minutes)."""
        entry = await self.db.get(AuditLog, log_id)
        if not entry:
            raise ResourceNotFoundError(
                "AUDIT_LOG_NOT_FOUND", messages.AUDIT_LOG_NOT_FOUND, log_id,
            )
        related_conditions = [
            and_(
                AuditLog.resource == entry.resource,
                AuditLog.created_at >= entry.created_at - RELATED_WINDOW,
                AuditLog.created_at <= entry.created_at + RELATED_WINDOW,
            ),
        ]
        if entry.user_id is not None:
            related_conditions.append(AuditLog.user_id == entry.user_id)
        if entry.resource_id is not None:
            related_conditions.append(AuditLog.resource_id == entry.resource_id)
        result = await self.db.execute(
            select(AuditLog)
            .where(or_(*related_conditions), AuditLog.id != entry.id)
            .order_by(AuditLog.created_at.desc())
            .limit(10),
        )
        return entry, list(result.scalars().all())

    async def stats(self, period: str = "24h") -> dict:
        now = datetime.now(timezone.utc)
        since = now - STATS_PERIODS.get(period, STATS_PERIODS["24h"])
        in_period = AuditLog.created_at >= since

        total = await self.db.scalar(
            select(func.count(AuditLog.id)).where(in_period),
        )
        critical = await self.db.scalar(
            select(func.count(AuditLog.id)).where(
                in_period,
                AuditLog.severity.in_([
                    AuditSeverity.CRITICAL.value, AuditSeverity.HIGH.value,
                ]),
            ),
        )
        return {
            "period": period if period in STATS_PERIODS else "24h",
            "since": since.isoformat(),
            "totalLogs": total or 0,
            "criticalLogs": critical or 0,
            "bySeverity": await self._group_count(AuditLog.severity, in_period),
            "byStatus": await self._group_count(AuditLog.status, in_period),
            "byAction": await self._group_count(AuditLog.action, in_period),
            "byResource": await self._group_count(AuditLog.resource, in_period),
        }

    async def critical_events(self, hours: int, limit: int) -> list[AuditLog]:
        since = datetime.now(timezone.utc) - timedelta(hours=hours)
        result = await self.db.execute(
            select(AuditLog)
            .where(
                AuditLog.created_at >= since,
                or_(
                    AuditLog.severity == AuditSeverity.CRITICAL.value,
                    and_(
                        AuditLog.severity == AuditSeverity.HIGH.value,
                        AuditLog.status == AuditStatus.FAILURE.value,
                    ),
                ),
            )
            .order_by(AuditLog.created_at.desc())
            .limit(limit),
        )
        return list(result.scalars().all())

    async def cleanup(
        self, days_to_keep: int, dry_run: bool, actor: Actor,
    ) -> dict:
        cutoff = datetime.now(timezone.utc) - timedelta(days=days_to_keep)
        purgeable = (
            AuditLog.created_at < cutoff,
            AuditLog.severity != AuditSeverity.CRITICAL.value,
        )
        would_delete = await self.db.scalar(
            select(func.count(AuditLog.id)).where(*purgeable),
        ) or 0

        deleted = 0
        if not dry_run:
            result = await self.db.execute(delete(AuditLog).where(*purgeable))
            deleted = result.rowcount or 0
            await self.record(
                "audit_cleanup", "system", actor,
                resource_id="audit_logs",
                metadata={
                    "daysToKeep": days_to_keep,
                    "cutoffDate": cutoff.isoformat(),
                    "deletedCount": deleted,
                },
                severity=AuditSeverity.MEDIUM,
            )
            await self.db.commit()
            logger.info(
                f"Audit cleanup removed {deleted} rows",
                extra={"count": deleted},
            )

        return {
            "deletedCount": deleted,
            "wouldDeleteCount": would_delete,
            "cutoffDate": cutoff.isoformat(),
            "dryRun": dry_run,
        }

    # ─── helpers ────────────────────────────────────────────────

    def _conditions(self, f: AuditLogFilters) -> list:
        conditions = []
        if f.user_id is not None:
            conditions.append(AuditLog.user_id == f.user_id)
        if f.action:
            conditions.append(AuditLog.action == f.action)
        if f.resource:
            conditions.append(AuditLog.resource == f.resource)
        if f.severity:
            conditions.append(AuditLog.severity == f.severity.value)
        if f.status:
            conditions.append(AuditLog.status == f.status.value)
        if f.start_date:
            conditions.append(AuditLog.created_at >= ensure_utc(f.start_date))
        if f.end_date:
            conditions.append(AuditLog.created_at <= ensure_utc(f.end_date))
        if f.ip_address:
            conditions.append(AuditLog.ip_address == f.ip_address)
        return conditions

    async def _group_count(self, column, *conditions) -> dict[str, int]:
        result = await self.db.execute(
            select(column, func.count(AuditLog.id))
            .where(*conditions)
            .group_by(column),
        )
        return {key: count for key, count in result.all()}
