"""Auth Dependencies - bearer token verification and role checks.

Invariants:
    - Tokens are HS256 JWTs issued elsewhere; this API only verifies them
    - `sub` carries the user id, `roles` a list of role names
    - Missing or invalid token on a protected route -> 401 UNAUTHORIZED
    - require_admin -> 403 INSUFFICIENT_PERMISSIONS for non-admins
"""

import logging

import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from tradeconnect.config import get_settings
from tradeconnect.core.errors import InsufficientPermissionsError, UnauthorizedError
from tradeconnect.core.permissions import Actor

logger = logging.getLogger(__name__)

bearer = HTTPBearer(auto_error=False)


def _client_ip(request: Request) -> str | None:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


def decode_token(token: str) -> dict | None:
    settings = get_settings()
    try:
        return jwt.decode(
            token, settings.jwt_secret, algorithms=[settings.jwt_algorithm],
        )
    except jwt.PyJWTError as e:
        logger.warning(f"Rejected bearer token: {e}")
        return None


def _actor_from(request: Request, payload: dict | None) -> Actor:
    base = {
        "ip_address": _client_ip(request),
        "user_agent": request.headers.get("user-agent"),
    }
    if not payload:
        return Actor(**base)
    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        return Actor(**base)
    roles = payload.get("roles") or []
    if isinstance(roles, str):
        roles = [roles]
    return Actor(user_id=user_id, roles=frozenset(roles), **base)


async def get_optional_actor(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
) -> Actor:
    """Caller identity; anonymous Actor when no valid token is sent."""
    payload = decode_token(credentials.credentials) if credentials else None
    return _actor_from(request, payload)


async def get_current_actor(
    actor: Actor = Depends(get_optional_actor),
) -> Actor:
    if not actor.is_authenticated:
        raise UnauthorizedError()
    return actor


async def require_admin(
    actor: Actor = Depends(get_current_actor),
) -> Actor:
    if not actor.is_admin:
        raise InsufficientPermissionsError()
    return actor
