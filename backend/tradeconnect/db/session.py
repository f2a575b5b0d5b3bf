"""Async Session Factory - provides async DB sessions for direct usage outside FastAPI.

Invariants:
    - Meant for scripts (maintenance job) and migrations
    - Caller owns the returned engine's lifetime (dispose when done)
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker,
)


def create_session_factory(
    database_url: str,
) -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    """Create an engine and async session factory for the given database URL."""
    engine = create_async_engine(database_url, echo=False)
    return engine, async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False,
    )
