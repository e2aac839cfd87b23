"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

PLACEHOLDER_SUPABASE_URL = "https://your-project.supabase.co"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str | None = None
    supabase_service_key: str | None = None
    local_store_path: str = ".gate_entry/store.json"
    photo_max_chars: int = 1_048_576
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def is_supabase_configured(settings: Settings) -> bool:
    """Return True when Supabase credentials are real, not template values."""
    url = (settings.supabase_url or "").strip()
    if not url or url == PLACEHOLDER_SUPABASE_URL:
        return False
    return bool((settings.supabase_service_key or "").strip())
