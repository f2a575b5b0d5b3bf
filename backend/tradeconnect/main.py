"""TradeConnect API - FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map TradeConnectError -> structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database initialized on startup via lifespan context manager

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - SlowAPIMiddleware applies the global limit; stricter limits are
      declared per route in api/rate_limiting.py
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.middleware import SlowAPIMiddleware

from tradeconnect import __version__
from tradeconnect.api.error_handlers import register_error_handlers
from tradeconnect.api.rate_limiting import limiter
from tradeconnect.api.routes import (
    audit, capacity, events, health, speakers, waitlist,
)
from tradeconnect.config import get_settings
from tradeconnect.infrastructure.database import close_db, init_db
from tradeconnect.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    logger.info("TradeConnect API started")
    yield
    await close_db()
    logger.info("TradeConnect API shutting down")


app = FastAPI(
    title="TradeConnect API", version=__version__, lifespan=lifespan,
)

settings = get_settings()
app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(speakers.router)
app.include_router(events.router)
app.include_router(capacity.router)
app.include_router(waitlist.router)
app.include_router(audit.router)

register_error_handlers(app)
