"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    diary_user_id: str
    fdc_api_key: str
    fdc_base_url: str = "https://api.nal.usda.gov/fdc/v1"
    fdc_data_types: tuple[str, ...] = ()
    lookup_cache_ttl_seconds: int = 24 * 60 * 60
    search_page_size: int = 20
    max_query_length: int = 30
    lookup_retry_attempts: int = 1
    lookup_retry_delay_seconds: float = 0.3
    recent_foods_limit: int = 10
    daily_calorie_goal: int = 2800
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
