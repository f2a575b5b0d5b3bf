"""Test factories - request payloads, bearer tokens and relative datetimes."""

import os
from datetime import datetime, timedelta, timezone

import jwt


def future(days: float = 7, hours: float = 0) -> datetime:
    return datetime.now(timezone.utc) + timedelta(days=days, hours=hours)


def event_payload(**overrides) -> dict:
    start = future(10)
    payload = {
        "title": "Foro de Exportadores 2026",
        "description": "Encuentro anual de exportadores",
        "startDate": start.isoformat(),
        "endDate": (start + timedelta(hours=8)).isoformat(),
        "location": "Ciudad de Guatemala",
        "price": 250,
        "currency": "GTQ",
        "tags": ["comercio", "exportación"],
    }
    payload.update(overrides)
    return payload


# ─── Auth ───────────────────────────────────────────────────────

def make_token(user_id: int, roles: list[str] | None = None) -> str:
    payload = {"sub": str(user_id), "roles": roles or ["user"]}
    return jwt.encode(payload, os.environ["JWT_SECRET"], algorithm="HS256")


def bearer(user_id: int, roles: list[str] | None = None) -> dict:
    return {"Authorization": f"Bearer {make_token(user_id, roles)}"}
