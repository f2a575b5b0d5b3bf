"""Maintenance Job - expires stale capacity locks and waitlist notifications.

Run once per invocation (cron / scheduler):

    python -m tradeconnect.jobs

Invariants:
    - Locks are processed before waitlist entries, so seats freed by expired
      locks are offered to the queue in the same run
"""

import asyncio
import logging

from tradeconnect.config import get_settings
from tradeconnect.db.session import create_session_factory
from tradeconnect.infrastructure.observability import setup_logging
from tradeconnect.services.capacity_service import CapacityService
from tradeconnect.services.waitlist_service import WaitlistService

logger = logging.getLogger(__name__)


async def run_maintenance(database_url: str) -> dict:
    engine, session_factory = create_session_factory(database_url)
    try:
        async with session_factory() as db:
            locks = await CapacityService(db).process_expired_locks()
        async with session_factory() as db:
            entries = await WaitlistService(db).process_expired()
    finally:
        await engine.dispose()
    logger.info(
        f"Maintenance done: {locks} locks, {entries} waitlist entries expired",
        extra={"count": locks + entries},
    )
    return {"expiredLocks": locks, "expiredWaitlistEntries": entries}


def main() -> None:
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    asyncio.run(run_maintenance(settings.database_url))


if __name__ == "__main__":
    main()
