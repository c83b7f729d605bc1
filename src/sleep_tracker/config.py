"""Application configuration."""

import os

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    sleep_table: str = "daily_sleep_quality_table"
    timer_duration_seconds: int = 45 * 60
    timer_interval_seconds: float = 1.0
    timer_display_offset_hours: int = Field(default=3, ge=-23, le=23)
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
