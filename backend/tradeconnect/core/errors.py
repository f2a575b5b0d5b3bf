"""Error Hierarchy - typed, categorized exceptions for all TradeConnect failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - http_status is derived from the code via STATUS_BY_CODE unless given explicitly
    - to_response() produces the REST envelope {success, message, error, details?, timestamp}
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with TradeConnectError base: FastAPI global handler catches all
    - STATUS_BY_CODE is the one lookup table for code -> HTTP status
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from tradeconnect.core import messages


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    AUTH = "auth"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    RATE_LIMIT = "rate_limit"
    DATABASE = "database"
    INTERNAL = "internal"


STATUS_BY_CODE: dict[str, int] = {
    "VALIDATION_ERROR": 400,
    "UNAUTHORIZED": 401,
    "INSUFFICIENT_PERMISSIONS": 403,
    "SPEAKER_NOT_FOUND": 404,
    "EVENT_NOT_FOUND": 404,
    "CAPACITY_NOT_CONFIGURED": 404,
    "LOCK_NOT_FOUND": 404,
    "WAITLIST_ENTRY_NOT_FOUND": 404,
    "REGISTRATION_NOT_FOUND": 404,
    "AUDIT_LOG_NOT_FOUND": 404,
    "SPEAKER_EMAIL_EXISTS": 409,
    "SPEAKER_ALREADY_ASSIGNED": 409,
    "SPEAKER_HAS_FUTURE_EVENTS": 409,
    "AVAILABILITY_CONFLICT": 409,
    "SPEAKER_EVENT_NOT_FOUND": 409,
    "INVALID_PARTICIPATION_STATUS": 409,
    "INSUFFICIENT_CAPACITY": 409,
    "LOCK_NOT_ACTIVE": 409,
    "LOCK_EXPIRED": 409,
    "WAITLIST_DISABLED": 409,
    "ALREADY_REGISTERED": 409,
    "ALREADY_IN_WAITLIST": 409,
    "INVALID_WAITLIST_STATUS": 409,
    "WAITLIST_EXPIRED": 409,
    "EVENT_ALREADY_CANCELLED": 409,
    "INVALID_REGISTRATION_STATUS": 409,
    "RATE_LIMIT_EXCEEDED": 429,
    "INTERNAL_SERVER_ERROR": 500,
    "DATABASE_ERROR": 503,
}


def status_for_code(code: str | None) -> int:
    """Map an error code to its HTTP status. Unknown codes are server errors."""
    return STATUS_BY_CODE.get(code or "", 500)


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class ErrorContext:
    """Context attached to an error for logs, never sent to clients."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_id: int | None = None
    resource_id: str | None = None
    debug_info: dict[str, Any] | None = None


class TradeConnectError(Exception):
    """Base exception for all TradeConnect errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int | None = None,
        details: list[dict] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status or status_for_code(code)
        self.details = details

    def to_response(self) -> dict:
        """Convert to the standard REST error envelope."""
        body: dict[str, Any] = {
            "success": False,
            "message": self.message,
            "error": self.code,
            "timestamp": self.context.timestamp.isoformat(),
        }
        if self.details:
            body["details"] = self.details
        return body


# ─── Request errors (400-403) ────────────────────────────────────

class ValidationError(TradeConnectError):
    """Business validation failed after schema validation passed."""
    def __init__(
        self, message: str, details: list[dict] | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, details=details,
        )


class UnauthorizedError(TradeConnectError):
    def __init__(self, message: str = messages.UNAUTHENTICATED):
        super().__init__(
            message, "UNAUTHORIZED", ErrorCategory.AUTH, ErrorSeverity.WARNING,
        )


class InsufficientPermissionsError(TradeConnectError):
    def __init__(
        self, message: str = messages.INSUFFICIENT_PERMISSIONS,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "INSUFFICIENT_PERMISSIONS", ErrorCategory.AUTH,
            ErrorSeverity.WARNING, context,
        )


# ─── Missing resources (404) ─────────────────────────────────────

class ResourceNotFoundError(TradeConnectError):
    """Requested resource does not exist. Code names the resource type."""
    def __init__(
        self, code: str, message: str, resource_id: object = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        if resource_id is not None:
            ctx.resource_id = str(resource_id)
        super().__init__(
            message, code, ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.INFO, ctx,
        )


class SpeakerNotFoundError(ResourceNotFoundError):
    def __init__(self, speaker_id: object):
        super().__init__(
            "SPEAKER_NOT_FOUND", messages.SPEAKER_NOT_FOUND, speaker_id,
        )


class EventNotFoundError(ResourceNotFoundError):
    def __init__(self, event_id: object):
        super().__init__("EVENT_NOT_FOUND", messages.EVENT_NOT_FOUND, event_id)


class CapacityNotConfiguredError(ResourceNotFoundError):
    def __init__(self, event_id: object):
        super().__init__(
            "CAPACITY_NOT_CONFIGURED", messages.CAPACITY_NOT_CONFIGURED,
            event_id,
        )


# ─── Business rule conflicts (409) ───────────────────────────────

class ConflictError(TradeConnectError):
    """A business rule rejected the operation in the current state."""
    def __init__(
        self, code: str, message: str, context: ErrorContext | None = None,
        details: list[dict] | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.CONFLICT, ErrorSeverity.WARNING,
            context, details=details,
        )


# ─── Infrastructure errors (500-level) ───────────────────────────

class DatabaseError(TradeConnectError):
    """Database operation failed."""
    def __init__(
        self, message: str, operation: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context,
        )
        self.operation = operation

    def to_response(self) -> dict:
        body = super().to_response()
        body["message"] = messages.SERVICE_UNAVAILABLE
        return body
