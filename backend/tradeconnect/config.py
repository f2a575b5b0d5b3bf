"""Application Configuration - environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded in production)
    - get_settings() is cached (lru_cache), single instance per process
    - Rate limit strings use the `limits` notation ("N per M minutes")

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all non-secret settings so docker-compose works out of the box
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://tradeconnect:tradeconnect@db:5432/tradeconnect"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting providers hand out postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Auth (token verification only, issuance lives in the auth service)
    jwt_secret: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"

    # Rate limiting
    rate_limit_enabled: bool = True
    global_rate_limit: str = "1000 per 15 minutes"
    create_edit_rate_limit: str = "10 per 15 minutes"
    capacity_create_edit_rate_limit: str = "20 per 15 minutes"
    audit_stats_rate_limit: str = "20 per 15 minutes"

    # Capacity & waitlist
    default_lock_timeout_minutes: int = 15
    waitlist_notification_hours: int = 24

    # API
    host: str = "0.0.0.0"
    port: int = 8000
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
