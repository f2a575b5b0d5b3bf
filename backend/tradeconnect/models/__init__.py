"""ORM Models - SQLAlchemy declarative models for all domain entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Status columns store enum values as strings (see core/domain_types.py)

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from tradeconnect.models.specialty import Specialty, speaker_specialties  # noqa: F401
from tradeconnect.models.speaker import Speaker  # noqa: F401
from tradeconnect.models.availability_block import AvailabilityBlock  # noqa: F401
from tradeconnect.models.event import Event  # noqa: F401
from tradeconnect.models.speaker_event import SpeakerEvent  # noqa: F401
from tradeconnect.models.speaker_evaluation import SpeakerEvaluation  # noqa: F401
from tradeconnect.models.event_registration import EventRegistration  # noqa: F401
from tradeconnect.models.capacity import Capacity  # noqa: F401
from tradeconnect.models.capacity_lock import CapacityLock  # noqa: F401
from tradeconnect.models.waitlist_entry import WaitlistEntry  # noqa: F401
from tradeconnect.models.audit_log import AuditLog  # noqa: F401
