"""Domain Types - enums and identity types shared across the codebase.

Invariants:
    - All valid states encoded as Enums, no raw string matching in services
    - SpeakerId, EventId, UserId wrap ints; LockId wraps UUID
    - Ratings are bounded 1.0-5.0 (evaluations) and 0.0-5.0 (speaker average)

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
"""

from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

SpeakerId = NewType("SpeakerId", int)
EventId = NewType("EventId", int)
UserId = NewType("UserId", int)
LockId = NewType("LockId", UUID)


# ─── Speakers ────────────────────────────────────────────────────

class SpeakerCategory(str, Enum):
    NATIONAL = "national"
    INTERNATIONAL = "international"
    EXPERT = "expert"
    SPECIAL_GUEST = "special_guest"


class RateType(str, Enum):
    HOURLY = "hourly"
    DAILY = "daily"
    EVENT = "event"


class Modality(str, Enum):
    PRESENTIAL = "presential"
    VIRTUAL = "virtual"
    HYBRID = "hybrid"


class SpeakerLanguage(str, Enum):
    SPANISH = "spanish"
    ENGLISH = "english"
    FRENCH = "french"
    GERMAN = "german"
    ITALIAN = "italian"
    PORTUGUESE = "portuguese"
    OTHER = "other"


class RecurrencePattern(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class SpeakerSortField(str, Enum):
    """Sortable columns for the public speaker listing."""
    FIRST_NAME = "firstName"
    LAST_NAME = "lastName"
    RATING = "rating"
    TOTAL_EVENTS = "totalEvents"
    BASE_RATE = "baseRate"
    CREATED_AT = "createdAt"
    VERIFIED_AT = "verifiedAt"


class SortOrder(str, Enum):
    ASC = "ASC"
    DESC = "DESC"


class EvaluatorType(str, Enum):
    ORGANIZER = "organizer"
    ATTENDEE = "attendee"
    PEER = "peer"


# ─── Events ──────────────────────────────────────────────────────

class EventStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class SpeakerRole(str, Enum):
    KEYNOTE_SPEAKER = "keynote_speaker"
    PANELIST = "panelist"
    FACILITATOR = "facilitator"
    MODERATOR = "moderator"
    GUEST = "guest"


class ParticipationStatus(str, Enum):
    """SpeakerEvent lifecycle: tentative -> confirmed -> completed | cancelled."""
    TENTATIVE = "tentative"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class RegistrationStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    ATTENDED = "attended"
    CANCELLED = "cancelled"


# ─── Capacity & Waitlist ─────────────────────────────────────────

class LockStatus(str, Enum):
    """CapacityLock lifecycle: LOCKED -> CONFIRMED | RELEASED | EXPIRED."""
    LOCKED = "LOCKED"
    CONFIRMED = "CONFIRMED"
    RELEASED = "RELEASED"
    EXPIRED = "EXPIRED"


class WaitlistStatus(str, Enum):
    """WaitlistEntry lifecycle: ACTIVE -> NOTIFIED -> CONFIRMED | EXPIRED; any -> CANCELLED."""
    ACTIVE = "ACTIVE"
    NOTIFIED = "NOTIFIED"
    CONFIRMED = "CONFIRMED"
    EXPIRED = "EXPIRED"
    CANCELLED = "CANCELLED"


class AlertSeverity(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


# ─── Audit ───────────────────────────────────────────────────────

class AuditSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class AuditStatus(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    WARNING = "warning"


# ─── Auth ────────────────────────────────────────────────────────

ADMIN_ROLES: frozenset[str] = frozenset({"admin", "super_admin"})
