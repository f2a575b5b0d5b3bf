"""Rate Limiting - slowapi limiter keyed by client IP.

Invariants:
    - Undecorated routes fall under the global limit (SlowAPIMiddleware)
    - Create/edit routes carry a stricter per-route limit with a Spanish message
    - Disabled entirely when settings.rate_limit_enabled is false
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from tradeconnect.config import get_settings
from tradeconnect.core import messages

_settings = get_settings()

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[_settings.global_rate_limit],
    enabled=_settings.rate_limit_enabled,
)

create_edit_limit = limiter.limit(
    _settings.create_edit_rate_limit,
    error_message=messages.RATE_LIMIT_CREATE_EDIT,
)
capacity_limit = limiter.limit(
    _settings.capacity_create_edit_rate_limit,
    error_message=messages.RATE_LIMIT_CREATE_EDIT,
)
stats_limit = limiter.limit(
    _settings.audit_stats_rate_limit,
    error_message=messages.RATE_LIMIT_STATS,
)
