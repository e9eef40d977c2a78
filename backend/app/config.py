"""Typed settings configuration - single source of truth."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # External itinerary API
    api_base_url: str = "http://localhost:5000/api"
    api_timeout_s: float = 10.0

    # Session
    token_store_path: str = ".itinerary_session.json"

    # Day generation
    max_trip_days: int = 30

    # Budget status thresholds (percent of total)
    budget_warning_percent: int = 80
    budget_over_percent: int = 100

    # Map viewport fitting
    map_fit_padding_px: int = 50
    map_max_zoom: int = 13

    # Logging
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
