"""
Pet Butler - Configuration and settings.

Loaded from environment variables and .env. Nothing here is read at
import time; call get_settings() once at startup and pass it along.
"""

import logging
import sys
from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Telegram
    telegram_bot_token: str = ""
    webhook_url: str | None = None  # e.g. https://example.com - webhook mode when set
    webhook_secret: str = "pet-butler"  # Path component of the webhook route

    # Supabase
    supabase_url: str = ""
    supabase_service_key: str = ""
    db_timeout_seconds: float = 10.0

    # OpenRouter (OpenAI-compatible)
    openrouter_api_key: str = ""
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    llm_model: str = "x-ai/grok-3-mini"
    llm_max_tokens: int = 1500
    llm_timeout_seconds: float = 60.0

    # Application
    pet_butler_env: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    storage: Literal["supabase", "memory"] = "supabase"
    port: int = 3000

    @property
    def is_development(self) -> bool:
        return self.pet_butler_env == "development"

    @property
    def is_production(self) -> bool:
        return self.pet_butler_env == "production"

    @property
    def use_webhook(self) -> bool:
        return self.is_production and bool(self.webhook_url)

    def missing_required(self) -> list[str]:
        """Names of required settings that are empty for the configured storage."""
        required = ["telegram_bot_token", "openrouter_api_key"]
        if self.storage == "supabase":
            required += ["supabase_url", "supabase_service_key"]
        return [name.upper() for name in required if not getattr(self, name)]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(level: str = "INFO") -> None:
    """Send application logs to stderr and quiet chatty HTTP clients."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s %(message)s",
        datefmt="%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stderr)],
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)
    logging.getLogger("aiogram").setLevel(logging.WARNING)
