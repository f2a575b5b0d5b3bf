"""Capacity API tests - configuration, validation, reservations and reports.

Tests cover:
    - configure/update: owner-only, range checks with Spanish messages
    - GET status: figures derived from registrations and active locks
    - validate: insufficient capacity, overbooking warning, not configured
    - reserve -> confirm creates a confirmed registration
    - release and expiry hand the seat to the waitlist
"""

from datetime import datetime, timedelta, timezone

from sqlalchemy import update

from tradeconnect.core import messages
from tradeconnect.models import CapacityLock


def _configure(total: int = 10, **overrides) -> dict:
    payload = {
        "totalCapacity": total,
        "overbookingPercentage": 0,
        "overbookingEnabled": False,
        "waitlistEnabled": True,
        "lockTimeoutMinutes": 15,
    }
    payload.update(overrides)
    return payload


async def _reserve(client, event_id: int, headers: dict, quantity: int = 1):
    return await client.post(
        f"/api/capacity/events/{event_id}/reserve",
        json={"quantity": quantity, "sessionId": "sess-abc"},
        headers=headers,
    )


# --- Configuration ----------------------------------------------------------------

class TestConfigure:
    async def test_configure_returns_status(self, client, seed, user_headers):
        event = await seed.event()
        resp = await client.post(
            f"/api/capacity/events/{event.id}/configure",
            json=_configure(50), headers=user_headers,
        )
        assert resp.status_code == 201
        data = resp.json()["data"]
        assert data["totalCapacity"] == 50
        assert data["availableCapacity"] == 50
        assert data["utilizationPercentage"] == 0
        assert data["isFull"] is False
        assert data["alertThresholds"] == {"low": 80, "medium": 90, "high": 95}

    async def test_zero_capacity_rejected(self, client, seed, user_headers):
        event = await seed.event()
        resp = await client.post(
            f"/api/capacity/events/{event.id}/configure",
            json=_configure(0), headers=user_headers,
        )
        assert resp.status_code == 400
        assert resp.json()["message"] == messages.INVALID_TOTAL_CAPACITY

    async def test_lock_timeout_out_of_range(self, client, seed, user_headers):
        event = await seed.event()
        resp = await client.post(
            f"/api/capacity/events/{event.id}/configure",
            json=_configure(10, lockTimeoutMinutes=90), headers=user_headers,
        )
        assert resp.status_code == 400
        assert resp.json()["details"][0]["field"] == "lockTimeoutMinutes"

    async def test_non_owner_forbidden(self, client, seed, other_headers):
        event = await seed.event(created_by=10)
        resp = await client.post(
            f"/api/capacity/events/{event.id}/configure",
            json=_configure(), headers=other_headers,
        )
        assert resp.status_code == 403
        assert resp.json()["message"] == messages.CAPACITY_FORBIDDEN

    async def test_unknown_event(self, client, user_headers):
        resp = await client.post(
            "/api/capacity/events/999/configure",
            json=_configure(), headers=user_headers,
        )
        assert resp.status_code == 404
        assert resp.json()["error"] == "EVENT_NOT_FOUND"

    async def test_update_partial(self, client, seed, user_headers):
        event = await seed.event()
        await seed.capacity(event.id, total_capacity=20)
        resp = await client.put(
            f"/api/capacity/events/{event.id}/update",
            json={"overbookingEnabled": True, "overbookingPercentage": 10},
            headers=user_headers,
        )
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["totalCapacity"] == 20
        assert data["overbookingEnabled"] is True
        assert data["overbookingPercentage"] == 10

    async def test_update_without_configuration(self, client, seed, user_headers):
        event = await seed.event()
        resp = await client.put(
            f"/api/capacity/events/{event.id}/update",
            json={"totalCapacity": 5}, headers=user_headers,
        )
        assert resp.status_code == 404
        assert resp.json()["error"] == "CAPACITY_NOT_CONFIGURED"


# --- Status & validation ----------------------------------------------------------

class TestStatusAndValidate:
    async def test_status_counts_registrations(self, client, seed):
        event = await seed.event()
        await seed.capacity(event.id, total_capacity=10)
        await seed.registration(event.id, user_id=30, quantity=4)
        await seed.registration(event.id, user_id=31, quantity=2, status="pending")
        await seed.registration(event.id, user_id=32, quantity=3, status="cancelled")

        resp = await client.get(f"/api/capacity/events/{event.id}")
        data = resp.json()["data"]
        assert data["confirmedCapacity"] == 4
        assert data["blockedCapacity"] == 2
        assert data["availableCapacity"] == 4
        assert data["utilizationPercentage"] == 40.0

    async def test_status_not_configured(self, client, seed):
        event = await seed.event()
        resp = await client.get(f"/api/capacity/events/{event.id}")
        assert resp.status_code == 404
        assert resp.json()["error"] == "CAPACITY_NOT_CONFIGURED"

    async def test_validate_insufficient(self, client, seed):
        event = await seed.event()
        await seed.capacity(event.id, total_capacity=5)
        await seed.registration(event.id, user_id=30, quantity=4)
        resp = await client.get(
            f"/api/capacity/events/{event.id}/validate", params={"quantity": 2},
        )
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["isValid"] is False
        assert data["availableSpots"] == 1
        assert data["errors"][0]["code"] == "INSUFFICIENT_CAPACITY"

    async def test_validate_with_overbooking(self, client, seed):
        event = await seed.event()
        await seed.capacity(
            event.id, total_capacity=10,
            overbooking_enabled=True, overbooking_percentage=20,
        )
        await seed.registration(event.id, user_id=30, quantity=10)
        resp = await client.get(
            f"/api/capacity/events/{event.id}/validate", params={"quantity": 2},
        )
        data = resp.json()["data"]
        assert data["isValid"] is True
        codes = [w["code"] for w in data["warnings"]]
        assert codes == ["HIGH_UTILIZATION", "OVERBOOKING_ACTIVE"]

    async def test_validate_not_configured(self, client, seed):
        event = await seed.event()
        resp = await client.get(f"/api/capacity/events/{event.id}/validate")
        assert resp.json()["data"]["errors"][0]["code"] == "CAPACITY_NOT_CONFIGURED"

    async def test_validate_quantity_bounds(self, client, seed):
        event = await seed.event()
        resp = await client.get(
            f"/api/capacity/events/{event.id}/validate", params={"quantity": 51},
        )
        assert resp.status_code == 400


# --- Reservations -----------------------------------------------------------------

class TestReservations:
    async def test_reserve_blocks_seats(self, client, seed, user_headers):
        event = await seed.event()
        await seed.capacity(event.id, total_capacity=10, lock_timeout_minutes=15)
        resp = await _reserve(client, event.id, user_headers, quantity=3)
        assert resp.status_code == 201
        lock = resp.json()["data"]["lock"]
        assert lock["status"] == "LOCKED"
        assert lock["quantity"] == 3
        expires = datetime.fromisoformat(lock["expiresAt"])
        created = datetime.fromisoformat(lock["createdAt"])
        assert expires - created == timedelta(minutes=15)

        status = (await client.get(f"/api/capacity/events/{event.id}")).json()
        assert status["data"]["blockedCapacity"] == 3
        assert status["data"]["availableCapacity"] == 7

    async def test_reserve_beyond_capacity(self, client, seed, user_headers):
        event = await seed.event()
        await seed.capacity(event.id, total_capacity=2)
        resp = await _reserve(client, event.id, user_headers, quantity=3)
        assert resp.status_code == 409
        body = resp.json()
        assert body["error"] == "INSUFFICIENT_CAPACITY"
        assert "solicitados: 3" in body["message"]

    async def test_reserve_requires_session(self, client, seed, user_headers):
        event = await seed.event()
        await seed.capacity(event.id)
        resp = await client.post(
            f"/api/capacity/events/{event.id}/reserve",
            json={"quantity": 1}, headers=user_headers,
        )
        assert resp.status_code == 400
        assert resp.json()["details"][0]["field"] == "sessionId"

    async def test_confirm_creates_registration(self, client, seed, user_headers):
        event = await seed.event()
        await seed.capacity(event.id, total_capacity=10)
        lock_id = (await _reserve(client, event.id, user_headers, 2)).json()["data"]["lock"]["id"]

        resp = await client.post(
            f"/api/capacity/reservations/{lock_id}/confirm", headers=user_headers,
        )
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["lock"]["status"] == "CONFIRMED"
        assert data["registration"]["status"] == "confirmed"
        assert data["registration"]["quantity"] == 2
        assert data["lock"]["registrationId"] == data["registration"]["id"]

        status = (await client.get(f"/api/capacity/events/{event.id}")).json()["data"]
        assert status["confirmedCapacity"] == 2
        assert status["blockedCapacity"] == 0

        resp = await client.post(
            f"/api/capacity/reservations/{lock_id}/confirm", headers=user_headers,
        )
        assert resp.status_code == 409
        assert resp.json()["error"] == "LOCK_NOT_ACTIVE"

    async def test_other_user_cannot_confirm(
        self, client, seed, user_headers, other_headers,
    ):
        event = await seed.event()
        await seed.capacity(event.id)
        lock_id = (await _reserve(client, event.id, user_headers)).json()["data"]["lock"]["id"]
        resp = await client.post(
            f"/api/capacity/reservations/{lock_id}/confirm", headers=other_headers,
        )
        assert resp.status_code == 403

    async def test_unknown_lock(self, client, user_headers):
        resp = await client.post(
            "/api/capacity/reservations/00000000-0000-0000-0000-000000000000/confirm",
            headers=user_headers,
        )
        assert resp.status_code == 404
        assert resp.json()["error"] == "LOCK_NOT_FOUND"

    async def test_expired_lock_not_confirmable(
        self, client, seed, user_headers, test_session_factory,
    ):
        event = await seed.event()
        await seed.capacity(event.id)
        lock_id = (await _reserve(client, event.id, user_headers)).json()["data"]["lock"]["id"]
        async with test_session_factory() as db:
            await db.execute(
                update(CapacityLock).values(
                    expires_at=datetime.now(timezone.utc) - timedelta(minutes=1),
                ),
            )
            await db.commit()

        resp = await client.post(
            f"/api/capacity/reservations/{lock_id}/confirm", headers=user_headers,
        )
        assert resp.status_code == 409
        assert resp.json()["error"] == "LOCK_EXPIRED"

    async def test_release_frees_seats(self, client, seed, user_headers):
        event = await seed.event()
        await seed.capacity(event.id, total_capacity=4)
        lock_id = (await _reserve(client, event.id, user_headers, 4)).json()["data"]["lock"]["id"]
        status = (await client.get(f"/api/capacity/events/{event.id}")).json()["data"]
        assert status["isFull"] is True

        resp = await client.post(
            f"/api/capacity/reservations/{lock_id}/release", headers=user_headers,
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["status"] == "RELEASED"
        status = (await client.get(f"/api/capacity/events/{event.id}")).json()["data"]
        assert status["availableCapacity"] == 4

    async def test_release_notifies_waitlist_head(
        self, client, seed, user_headers, other_headers,
    ):
        event = await seed.event()
        await seed.capacity(event.id, total_capacity=1)
        lock_id = (await _reserve(client, event.id, user_headers)).json()["data"]["lock"]["id"]
        joined = await client.post(
            f"/api/waitlist/events/{event.id}", headers=other_headers,
        )
        assert joined.status_code == 201

        await client.post(
            f"/api/capacity/reservations/{lock_id}/release", headers=user_headers,
        )
        resp = await client.get(
            f"/api/waitlist/events/{event.id}/position", headers=other_headers,
        )
        assert resp.json()["data"]["status"] == "NOTIFIED"

    async def test_process_expired_is_admin_only(
        self, client, seed, user_headers, admin_headers, test_session_factory,
    ):
        event = await seed.event()
        await seed.capacity(event.id)
        await _reserve(client, event.id, user_headers, 2)
        async with test_session_factory() as db:
            await db.execute(
                update(CapacityLock).values(
                    expires_at=datetime.now(timezone.utc) - timedelta(minutes=1),
                ),
            )
            await db.commit()

        resp = await client.post(
            "/api/capacity/reservations/process-expired", headers=user_headers,
        )
        assert resp.status_code == 403

        resp = await client.post(
            "/api/capacity/reservations/process-expired", headers=admin_headers,
        )
        assert resp.status_code == 200
        assert resp.json()["data"] == {"released": 1}

        locks = await client.get(
            f"/api/capacity/events/{event.id}/locks", headers=user_headers,
        )
        assert locks.json()["data"] == []


# --- Report -----------------------------------------------------------------------

async def test_report_summary(client, seed, user_headers):
    event = await seed.event()
    await seed.capacity(event.id, total_capacity=10)
    await seed.registration(event.id, user_id=30, quantity=1)
    await _reserve(client, event.id, user_headers, 2)

    resp = await client.get(
        f"/api/capacity/events/{event.id}/report", headers=user_headers,
    )
    assert resp.status_code == 200
    report = resp.json()["data"]
    assert report["summary"]["confirmedCount"] == 1
    assert report["summary"]["blockedCount"] == 2
    assert report["summary"]["availableCount"] == 7
    assert report["summary"]["activeLocks"] == 1
    assert report["waitlist"]["total"] == 0
    assert any("Baja utilización" in r for r in report["recommendations"])
