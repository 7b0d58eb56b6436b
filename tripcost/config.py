"""Typed settings configuration - single source of truth."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", env_prefix="TRIPCOST_", extra="ignore"
    )

    # Currency
    base_currency: str = "USD"
    default_display_currency: str = "USD"
    unknown_currency_policy: Literal["fallback", "strict"] = "fallback"

    # Cache TTL (seconds)
    pricing_cache_ttl_seconds: int = 5 * 60

    # Cost engine (amounts in base currency)
    placeholder_nightly_rate: float = 100.0
    misc_percentage: float = 10.0
    include_meals: bool = False
    breakfast_cost: float = 15.0
    lunch_cost: float = 25.0
    dinner_cost: float = 40.0
    estimated_confidence: float = 0.70
    fallback_confidence: float = 0.5

    # Timeline scheduling (minutes)
    max_activities_per_day: int = 6
    day_duration_limit_min: int = 720
    time_slot_buffer_min: int = 30
    first_time_slot: str = "09:00"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
