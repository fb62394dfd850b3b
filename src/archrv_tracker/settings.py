"""
archrv_tracker.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for all layers.
- Hide secrets from repr/logging (HTTP API token, bot token).
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="ARCHRV_", case_sensitive=False)

    # Environment controls toggle behavior like auto-init DB tables.
    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "archrv-tracker"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 30644

    # Shared secret expected in the `token` query parameter of mutating routes.
    http_api_token: str = Field(default="dev-token-change-me", repr=False)

    # Persistence
    database_url: str = "sqlite+aiosqlite:///./archrv.db"

    # Telegram
    telegram_api_base: str = "https://api.telegram.org"
    telegram_bot_token: str = Field(default="", repr=False)
    telegram_chat_id: str = ""
    telegram_timeout_seconds: float = 10.0
    # Named in "cc" notices when the packager who created a relation is unknown.
    bot_alias: str = "bot"

    # Notifier
    notify_interval_seconds: float = Field(default=1.0, gt=0)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each request dependency.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# Components never call get_settings() themselves; the composition root in
# `archrv_tracker.context` hands the Settings object to each of them.
