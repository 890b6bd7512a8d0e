"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    openai_api_key: str | None = None
    openai_model: str = "gpt-4.1-mini"
    openai_store: bool = False
    openai_timeout_seconds: float = 30.0
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    supabase_table: str = "kv_store"
    timezone: str = "UTC"
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def estimation_configured(self) -> bool:
        """Return True when an OpenAI key is available."""
        return bool(self.openai_api_key and self.openai_api_key.strip())

    @property
    def supabase_configured(self) -> bool:
        """Return True when both Supabase credentials are set."""
        return bool(self.supabase_url and self.supabase_service_key)
