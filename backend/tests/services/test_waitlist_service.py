"""WaitlistService tests - queue compaction, expiry sweep and promotion.

Tests cover:
    - Concurrent joins each get a distinct FIFO position
    - Leaving compacts the queue; rejoining goes to the back
    - notify_next order, the expiry sweep and per-status stats
"""

import asyncio
from datetime import datetime, timedelta, timezone

from sqlalchemy import select, update

from tradeconnect.core.domain_types import WaitlistStatus
from tradeconnect.core.permissions import Actor
from tradeconnect.models import AuditLog, WaitlistEntry
from tradeconnect.services.waitlist_service import WaitlistService


def _actor(user_id: int) -> Actor:
    return Actor(user_id=user_id, roles=frozenset({"user"}))


async def _queue(db, event_id: int, users) -> list[WaitlistEntry]:
    service = WaitlistService(db)
    return [await service.join(event_id, None, _actor(uid)) for uid in users]


async def _join_alone(session_factory, event_id: int, user_id: int) -> WaitlistEntry:
    async with session_factory() as db:
        return await WaitlistService(db).join(event_id, None, _actor(user_id))


async def test_concurrent_joins_get_distinct_positions(seed, test_session_factory):
    event = await seed.event()
    await seed.capacity(event.id)
    users = range(70, 76)

    entries = await asyncio.gather(
        *(_join_alone(test_session_factory, event.id, uid) for uid in users),
    )
    assert sorted(e.position for e in entries) == [1, 2, 3, 4, 5, 6]

    async with test_session_factory() as db:
        queue = await WaitlistService(db).list_queue(event.id)
    assert [e.position for e in queue] == [1, 2, 3, 4, 5, 6]


async def test_leave_from_middle_compacts(seed, test_db):
    event = await seed.event()
    await seed.capacity(event.id)
    entries = await _queue(test_db, event.id, (60, 61, 62, 63))

    await WaitlistService(test_db).leave(entries[1].id, _actor(61))

    queue = await WaitlistService(test_db).list_queue(event.id)
    assert [(e.user_id, e.position) for e in queue] == [(60, 1), (62, 2), (63, 3)]


async def test_rejoin_after_leaving_goes_to_the_back(seed, test_db):
    event = await seed.event()
    await seed.capacity(event.id)
    entries = await _queue(test_db, event.id, (60, 61))
    service = WaitlistService(test_db)
    await service.leave(entries[0].id, _actor(60))

    again = await service.join(event.id, None, _actor(60))
    assert again.position == 2


async def test_notify_next_picks_lowest_position(seed, test_db):
    event = await seed.event()
    await seed.capacity(event.id)
    await _queue(test_db, event.id, (60, 61))

    entry = await WaitlistService(test_db).notify_next(event.id)
    assert entry.user_id == 60
    assert entry.status == WaitlistStatus.NOTIFIED.value
    hours = (entry.expires_at - entry.notified_at) / timedelta(hours=1)
    assert hours == 24

    second = await WaitlistService(test_db).notify_next(event.id)
    assert second.user_id == 61
    assert await WaitlistService(test_db).notify_next(event.id) is None


async def test_process_expired_promotes_next(seed, test_db, test_session_factory):
    event = await seed.event()
    await seed.capacity(event.id)
    await _queue(test_db, event.id, (60, 61, 62))
    await WaitlistService(test_db).notify_next(event.id)

    async with test_session_factory() as db:
        await db.execute(
            update(WaitlistEntry)
            .where(WaitlistEntry.status == WaitlistStatus.NOTIFIED.value)
            .values(expires_at=datetime.now(timezone.utc) - timedelta(minutes=1)),
        )
        await db.commit()

    async with test_session_factory() as db:
        assert await WaitlistService(db).process_expired() == 1

    async with test_session_factory() as db:
        result = await db.execute(
            select(WaitlistEntry).order_by(WaitlistEntry.user_id),
        )
        by_user = {e.user_id: e for e in result.scalars().all()}
        actions = (await db.scalars(select(AuditLog.action))).all()

    assert by_user[60].status == WaitlistStatus.EXPIRED.value
    assert by_user[61].status == WaitlistStatus.NOTIFIED.value
    assert by_user[61].position == 1
    assert by_user[62].position == 2
    assert "waitlist_expired" in actions


async def test_stats_counts_every_status(seed, test_db):
    event = await seed.event()
    await seed.capacity(event.id)
    entries = await _queue(test_db, event.id, (60, 61, 62))
    service = WaitlistService(test_db)
    await service.leave(entries[2].id, _actor(62))
    await service.notify_next(event.id)

    stats = await service.stats(event.id)
    assert stats["notified"] == 1
    assert stats["active"] == 1
    assert stats["cancelled"] == 1
    assert stats["total"] == 3
    assert await service.queued_count(event.id) == 2
