"""Configuration management for the washrelay server."""

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="WASHRELAY_",
        env_file=".env",
        env_file_encoding="utf-8",
        populate_by_name=True,
    )

    # Server settings
    host: str = "127.0.0.1"
    port: int = 3000
    debug: bool = False

    # Record store: "sql" (SQLModel), "memory" (process-local) or "supabase"
    store_backend: Literal["sql", "memory", "supabase"] = "sql"
    database_url: str = "sqlite+aiosqlite:///./washrelay.db"
    supabase_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("WASHRELAY_SUPABASE_URL", "SUPABASE_URL"),
    )
    supabase_service_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("WASHRELAY_SUPABASE_SERVICE_KEY", "SUPABASE_SERVICE_KEY"),
    )

    # LINE Messaging API
    line_channel_access_token: str = Field(
        default="",
        validation_alias=AliasChoices(
            "WASHRELAY_LINE_CHANNEL_ACCESS_TOKEN", "CHANNEL_ACCESS_TOKEN"
        ),
    )
    line_api_base: str = "https://api.line.me"
    http_timeout: float = 10.0

    # Machine policy
    release_requires_finished: bool = True
    broadcast_on_finish: bool = False
    broadcast_on_release: bool = False
    finish_note: str = ""

    # Logging
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
