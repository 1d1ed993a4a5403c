"""
Environment configuration — single source of truth for all settings.

Uses pydantic-settings for type-safe config with .env file support.
All values have sensible defaults for local development.

Usage:
    from backend.app.core.config import settings
    print(settings.CATALOGUE_PATH)
"""

from __future__ import annotations

from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application-wide settings loaded from environment variables or .env file.

    Precedence: env var > .env file > default value
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ── Application ──
    APP_NAME: str = "Seismicity Explorer"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"  # development | staging | production
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"  # DEBUG | INFO | WARNING | ERROR | CRITICAL

    # ── Server ──
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # ── CORS ──
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]
    CORS_ALLOW_ALL: bool = True  # False in production

    # ── Data source ──
    CATALOGUE_SOURCE: str = "catalogue"  # catalogue | feed
    CATALOGUE_PATH: str = "data/isc-gem-cat.csv"

    # ── Live feed (USGS FDSN event service) ──
    USGS_EARTHQUAKE_URL: str = "https://earthquake.usgs.gov/fdsnws/event/1/query"
    FEED_FETCH_TIMEOUT: float = 30.0  # seconds
    FEED_MAX_RETRIES: int = 3
    FEED_RESULT_LIMIT: int = 20000  # USGS hard cap per request

    # ── Analysis ──
    MAGNITUDE_BIN_WIDTH: float = 0.5
    MAJOR_EVENT_MAGNITUDE: float = 5.0

    # ── Query defaults ──
    DEFAULT_RADIUS_KM: float = 500.0
    DEFAULT_MIN_MAGNITUDE: float = 5.0

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == "development"

    @property
    def uses_live_feed(self) -> bool:
        return self.CATALOGUE_SOURCE.lower() == "feed"


@lru_cache()
def get_settings() -> Settings:
    """Cached settings singleton."""
    return Settings()


settings = get_settings()
