"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    admin_token: str
    api_key: str | None = None
    kv_table: str = "kv_store"
    photo_bucket: str = "event-photos"
    bucket_file_size_limit: int = 5 * 1024 * 1024
    max_expiry_days: int = 30
    signed_url_ttl_seconds: int = 3600
    sweeper_enabled: bool = True
    sweep_interval_seconds: float = 3600
    cors_allow_origins: str = "*"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_cors_origins(raw: str | None) -> list[str]:
    """Parse allowed CORS origins from env."""
    if raw is None:
        return ["*"]
    cleaned = raw.strip()
    if cleaned in {"", "*"}:
        return ["*"]
    return [chunk.strip() for chunk in cleaned.split(",") if chunk.strip()]
