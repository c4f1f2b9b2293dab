"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    api_token: str
    state_table: str = "blp_state"
    weather_base_url: str = "https://api.open-meteo.com/v1"
    marine_base_url: str = "https://marine-api.open-meteo.com/v1"
    timezone: str = "UTC"
    default_location_label: str = "Cairns, QLD"
    save_debounce_seconds: float = 0.7
    rollover_interval_seconds: float = 30.0
    weather_cooldown_seconds: float = 300.0
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
