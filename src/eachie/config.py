"""Centralized application configuration via environment variables."""

from enum import StrEnum
from functools import lru_cache
from pathlib import Path

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(StrEnum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    The shared OpenRouter key and the Slack webhook use SecretStr to
    prevent accidental logging. Callers may bring their own key (BYOK);
    ``force_byok`` disables the shared key entirely.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- App ---
    environment: Environment = Environment.DEVELOPMENT
    log_level: str = "DEBUG"
    host: str = "127.0.0.1"
    port: int = 8000
    # --- CORS ---
    cors_allowed_origins: list[str] = []
    cors_allow_credentials: bool = False
    cors_allowed_methods: list[str] = ["GET", "POST"]
    cors_allowed_headers: list[str] = ["Content-Type"]

    # --- OpenRouter ---
    openrouter_api_key: SecretStr | None = None
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    force_byok: bool = False

    # --- Model Registry ---
    model_registry_path: Path = Path("config/models.yaml")

    # --- Research limits ---
    max_selected_models: int = 12
    max_images: int = 4
    research_max_tokens: int = 2500
    synthesis_max_tokens: int = 1500

    # --- Timeouts (seconds) ---
    # Per-call limit lives in the HTTP client; the coordinator adds none.
    llm_timeout_seconds: float = 300.0
    billing_lookup_timeout_seconds: float = 10.0
    request_deadline_seconds: float = 800.0

    # --- Alerts ---
    slack_webhook_url: SecretStr | None = None

    # --- Convenience properties ---
    @property
    def is_dev(self) -> bool:
        return self.environment == Environment.DEVELOPMENT

    @property
    def is_prod(self) -> bool:
        return self.environment == Environment.PRODUCTION

    @property
    def is_testing(self) -> bool:
        return self.environment == Environment.TESTING


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached settings singleton.

    Usage::

        from eachie.config import get_settings
        settings = get_settings()
    """
    return Settings()


settings = get_settings()
