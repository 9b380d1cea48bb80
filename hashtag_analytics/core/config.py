"""
Application configuration loaded from environment variables.

Uses pydantic-settings for type-safe env var parsing with automatic
.env file loading. Connection strings are injected via environment.

Default lookback periods belong to the caller, not the analytics engine:
routes read them from here and pass explicit windows to the services.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # ─── Core ──────────────────────────────────────────────────────
    environment: str = "development"
    debug: bool = False

    # ─── MongoDB ───────────────────────────────────────────────────
    # Local dev default matches a plain `docker run mongo` container.
    mongo_uri: str = "mongodb://localhost:27017/hashtag_analytics"
    mongo_db_name: str = "hashtag_analytics"

    # ─── CORS ──────────────────────────────────────────────────────
    # Comma-separated allowed origins for the dashboard.
    cors_origins_str: str = "http://localhost:3000"

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origins_str.split(",") if o.strip()]

    # ─── Analytics defaults (days) ─────────────────────────────────
    default_trend_days: int = 30
    default_growth_days: int = 30
    default_summary_days: int = 7
    default_timeseries_days: int = 7

    # ─── Ingestion ─────────────────────────────────────────────────
    # slowapi limit string applied to POST /api/v1/hashtags/{hashtag}/observations
    ingest_rate_limit: str = "60/minute"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Don't fail on unknown env vars
    )


# Module-level singleton — import this everywhere instead of instantiating Settings()
settings = Settings()
