"""Audit Schemas - cleanup request and log response shape."""

from pydantic import Field

from tradeconnect.schemas.common import CamelModel, UtcDatetime


class AuditCleanup(CamelModel):
    days_to_keep: int = Field(ge=30, le=3650)
    dry_run: bool = True


class AuditLogResponse(CamelModel):
    id: int
    user_id: int | None = None
    action: str
    resource: str
    resource_id: str | None = None
    old_values: dict | None = None
    new_values: dict | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    metadata: dict | None = Field(None, validation_alias="extra")
    severity: str
    status: str
    created_at: UtcDatetime
