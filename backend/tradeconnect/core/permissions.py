"""Permissions - caller identity and ownership rules.

Invariants:
    - An Actor with no user_id is anonymous and owns nothing
    - Admins (ADMIN_ROLES) may manage every resource
    - Everyone else may manage only resources they created
"""

from dataclasses import dataclass, field

from tradeconnect.core.domain_types import ADMIN_ROLES


@dataclass(frozen=True)
class Actor:
    """Who is calling, plus request metadata recorded in the audit trail."""
    user_id: int | None = None
    roles: frozenset[str] = field(default_factory=frozenset)
    ip_address: str | None = None
    user_agent: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    @property
    def is_admin(self) -> bool:
        return bool(self.roles & ADMIN_ROLES)


SYSTEM_ACTOR = Actor(user_id=None, roles=frozenset({"system"}), user_agent="system")


def can_manage(actor: Actor, owner_id: int | None) -> bool:
    if actor.is_admin:
        return True
    return actor.user_id is not None and actor.user_id == owner_id
