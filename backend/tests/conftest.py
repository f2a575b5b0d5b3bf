"""Root conftest - shared test configuration, database fixtures and seeders."""

import itertools
import os

# Settings are cached on first import: configure the environment before any
# tradeconnect module is loaded.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-secret-key-with-at-least-32-bytes!")
os.environ.setdefault("RATE_LIMIT_ENABLED", "true")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession, async_sessionmaker, create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

import tradeconnect.infrastructure.database as db_module  # noqa: E402
from tradeconnect.api.rate_limiting import limiter  # noqa: E402
from tradeconnect.db.base import Base  # noqa: E402
from tradeconnect.infrastructure.database import (  # noqa: E402
    DatabaseSessionManager, get_db,
)
from tradeconnect.main import app  # noqa: E402
from tradeconnect.models import (  # noqa: E402
    Capacity, Event, EventRegistration, Speaker, Specialty,
)

from tests.factories import bearer, future  # noqa: E402

_emails = itertools.count(1)


@pytest.fixture
def user_headers() -> dict:
    return bearer(10)


@pytest.fixture
def other_headers() -> dict:
    return bearer(20)


@pytest.fixture
def admin_headers() -> dict:
    return bearer(1, ["admin"])


# ─── Database & client ──────────────────────────────────────────
# StaticPool keeps one shared connection so every session sees the same
# in-memory database.

@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
async def client(test_engine, test_session_factory):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager
    limiter.reset()

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


# ─── Seed helpers ───────────────────────────────────────────────

@pytest.fixture
def seed(test_session_factory):
    """Insert rows directly, bypassing the API."""

    class Seeder:
        async def add(self, obj):
            async with test_session_factory() as db:
                db.add(obj)
                await db.commit()
                return obj

        async def event(self, created_by: int = 10, **overrides) -> Event:
            values = {
                "title": "Congreso de Comercio",
                "start_date": future(10),
                "end_date": future(11),
                "location": "Ciudad de Guatemala",
                "created_by": created_by,
                "status": "published",
                "tags": [],
            }
            values.update(overrides)
            return await self.add(Event(**values))

        async def speaker(self, created_by: int = 10, **overrides) -> Speaker:
            values = {
                "first_name": "Ana",
                "last_name": "López",
                "email": f"speaker{next(_emails)}@example.com",
                "modalities": ["presential"],
                "languages": ["spanish"],
                "created_by": created_by,
                "specialties": [],
                "availability_blocks": [],
            }
            values.update(overrides)
            return await self.add(Speaker(**values))

        async def specialty(self, name: str = "Marketing") -> Specialty:
            return await self.add(Specialty(name=name))

        async def capacity(self, event_id: int, **overrides) -> Capacity:
            values = {
                "event_id": event_id,
                "total_capacity": 10,
                "lock_timeout_minutes": 15,
                "created_by": 10,
            }
            values.update(overrides)
            return await self.add(Capacity(**values))

        async def registration(
            self, event_id: int, user_id: int, quantity: int = 1,
            status: str = "confirmed",
        ) -> EventRegistration:
            return await self.add(EventRegistration(
                event_id=event_id, user_id=user_id, quantity=quantity,
                status=status,
            ))

    return Seeder()
