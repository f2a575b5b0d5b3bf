"""Waitlist API tests - join, positions, notification and confirmation.

Tests cover:
    - join: positions are FIFO, duplicates and registered users rejected
    - leave: positions behind the entry move up
    - notify-next (admin) then confirm by the notified user
    - expired notifications are not confirmable
"""

from datetime import datetime, timedelta, timezone

from sqlalchemy import update

from tradeconnect.core import messages
from tradeconnect.models import WaitlistEntry

from tests.factories import bearer


async def _join(client, event_id: int, user_id: int):
    return await client.post(
        f"/api/waitlist/events/{event_id}", headers=bearer(user_id),
    )


class TestJoin:
    async def test_positions_are_fifo(self, client, seed):
        event = await seed.event()
        await seed.capacity(event.id)
        positions = []
        for user_id in (30, 31, 32):
            resp = await _join(client, event.id, user_id)
            assert resp.status_code == 201
            positions.append(resp.json()["data"]["position"])
        assert positions == [1, 2, 3]
        assert resp.json()["message"] == messages.WAITLIST_JOINED.format(position=3)

    async def test_join_twice_conflicts(self, client, seed):
        event = await seed.event()
        await seed.capacity(event.id)
        await _join(client, event.id, 30)
        resp = await _join(client, event.id, 30)
        assert resp.status_code == 409
        assert resp.json()["error"] == "ALREADY_IN_WAITLIST"

    async def test_registered_user_cannot_join(self, client, seed):
        event = await seed.event()
        await seed.capacity(event.id)
        await seed.registration(event.id, user_id=30)
        resp = await _join(client, event.id, 30)
        assert resp.status_code == 409
        assert resp.json()["error"] == "ALREADY_REGISTERED"

    async def test_disabled_waitlist(self, client, seed):
        event = await seed.event()
        await seed.capacity(event.id, waitlist_enabled=False)
        resp = await _join(client, event.id, 30)
        assert resp.status_code == 409
        assert resp.json()["message"] == messages.WAITLIST_DISABLED

    async def test_without_capacity(self, client, seed):
        event = await seed.event()
        resp = await _join(client, event.id, 30)
        assert resp.status_code == 404
        assert resp.json()["error"] == "CAPACITY_NOT_CONFIGURED"

    async def test_queues_are_scoped_by_access_type(self, client, seed):
        event = await seed.event()
        await seed.capacity(event.id)
        await _join(client, event.id, 30)
        resp = await client.post(
            f"/api/waitlist/events/{event.id}",
            json={"accessTypeId": 2}, headers=bearer(31),
        )
        assert resp.json()["data"]["position"] == 1
        assert resp.json()["data"]["accessTypeId"] == 2


class TestLeave:
    async def test_leaving_compacts_queue(self, client, seed):
        event = await seed.event()
        await seed.capacity(event.id)
        ids = []
        for user_id in (30, 31, 32):
            ids.append((await _join(client, event.id, user_id)).json()["data"]["id"])

        resp = await client.delete(f"/api/waitlist/{ids[0]}", headers=bearer(30))
        assert resp.status_code == 200
        assert resp.json()["data"]["status"] == "CANCELLED"

        queue = await client.get(
            f"/api/waitlist/events/{event.id}", headers=bearer(30),
        )
        assert [(e["userId"], e["position"]) for e in queue.json()["data"]] == [
            (31, 1), (32, 2),
        ]

    async def test_cannot_remove_someone_else(self, client, seed):
        event = await seed.event()
        await seed.capacity(event.id)
        entry_id = (await _join(client, event.id, 30)).json()["data"]["id"]
        resp = await client.delete(f"/api/waitlist/{entry_id}", headers=bearer(31))
        assert resp.status_code == 403

    async def test_unknown_entry(self, client, user_headers):
        resp = await client.delete("/api/waitlist/999", headers=user_headers)
        assert resp.status_code == 404
        assert resp.json()["error"] == "WAITLIST_ENTRY_NOT_FOUND"


class TestPositionAndStats:
    async def test_position_for_queued_user(self, client, seed):
        event = await seed.event()
        await seed.capacity(event.id)
        await _join(client, event.id, 30)
        await _join(client, event.id, 31)
        resp = await client.get(
            f"/api/waitlist/events/{event.id}/position", headers=bearer(31),
        )
        data = resp.json()["data"]
        assert data["position"] == 2
        assert data["total"] == 2
        assert data["status"] == "ACTIVE"

    async def test_position_when_not_queued(self, client, seed):
        event = await seed.event()
        resp = await client.get(
            f"/api/waitlist/events/{event.id}/position", headers=bearer(30),
        )
        assert resp.status_code == 200
        assert resp.json()["data"] is None
        assert resp.json()["message"] == messages.WAITLIST_NOT_IN_QUEUE

    async def test_stats(self, client, seed):
        event = await seed.event()
        await seed.capacity(event.id)
        entry_id = (await _join(client, event.id, 30)).json()["data"]["id"]
        await _join(client, event.id, 31)
        await client.delete(f"/api/waitlist/{entry_id}", headers=bearer(30))
        resp = await client.get(
            f"/api/waitlist/events/{event.id}/stats", headers=bearer(30),
        )
        data = resp.json()["data"]
        assert data["active"] == 1
        assert data["cancelled"] == 1
        assert data["total"] == 2


class TestNotifyAndConfirm:
    async def test_notify_then_confirm(self, client, seed, admin_headers):
        event = await seed.event()
        await seed.capacity(event.id)
        entry_id = (await _join(client, event.id, 30)).json()["data"]["id"]
        await _join(client, event.id, 31)

        resp = await client.post(
            f"/api/waitlist/events/{event.id}/notify-next", headers=admin_headers,
        )
        assert resp.status_code == 200
        notified = resp.json()["data"]
        assert notified["id"] == entry_id
        assert notified["status"] == "NOTIFIED"
        assert notified["expiresAt"] is not None

        resp = await client.post(
            f"/api/waitlist/{entry_id}/confirm", headers=bearer(30),
        )
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["entry"]["status"] == "CONFIRMED"
        assert data["registration"]["status"] == "confirmed"
        assert data["registration"]["userId"] == 30

        position = await client.get(
            f"/api/waitlist/events/{event.id}/position", headers=bearer(31),
        )
        assert position.json()["data"]["position"] == 1

    async def test_notify_requires_admin(self, client, seed, user_headers):
        event = await seed.event()
        resp = await client.post(
            f"/api/waitlist/events/{event.id}/notify-next", headers=user_headers,
        )
        assert resp.status_code == 403

    async def test_notify_empty_queue(self, client, seed, admin_headers):
        event = await seed.event()
        await seed.capacity(event.id)
        resp = await client.post(
            f"/api/waitlist/events/{event.id}/notify-next", headers=admin_headers,
        )
        assert resp.status_code == 200
        assert resp.json()["data"] is None
        assert resp.json()["message"] == messages.WAITLIST_EMPTY

    async def test_active_entry_not_confirmable(self, client, seed):
        event = await seed.event()
        await seed.capacity(event.id)
        entry_id = (await _join(client, event.id, 30)).json()["data"]["id"]
        resp = await client.post(
            f"/api/waitlist/{entry_id}/confirm", headers=bearer(30),
        )
        assert resp.status_code == 409
        assert resp.json()["error"] == "INVALID_WAITLIST_STATUS"

    async def test_expired_notification(
        self, client, seed, admin_headers, test_session_factory,
    ):
        event = await seed.event()
        await seed.capacity(event.id)
        entry_id = (await _join(client, event.id, 30)).json()["data"]["id"]
        await client.post(
            f"/api/waitlist/events/{event.id}/notify-next", headers=admin_headers,
        )
        async with test_session_factory() as db:
            await db.execute(
                update(WaitlistEntry).values(
                    expires_at=datetime.now(timezone.utc) - timedelta(hours=1),
                ),
            )
            await db.commit()

        resp = await client.post(
            f"/api/waitlist/{entry_id}/confirm", headers=bearer(30),
        )
        assert resp.status_code == 409
        assert resp.json()["error"] == "WAITLIST_EXPIRED"

        stats = await client.get(
            f"/api/waitlist/events/{event.id}/stats", headers=bearer(30),
        )
        assert stats.json()["data"]["expired"] == 1
