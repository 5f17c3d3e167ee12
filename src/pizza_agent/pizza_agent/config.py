"""Application configuration via pydantic-settings.

Reads from environment variables and .env file at project root.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Project root is 4 levels up from this file:
# src/pizza_agent/pizza_agent/config.py -> project root
PROJECT_ROOT = Path(__file__).resolve().parents[3]


class Settings(BaseSettings):
    """Application settings loaded from environment / .env file."""

    model_config = SettingsConfigDict(
        env_file=str(PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- Ordering provider ---
    dominos_order_url: str = "https://order.dominos.com/power"
    dominos_tracker_url: str = (
        "https://tracker.dominos.com/tracker-presentation-service/v2"
    )
    dominos_market: str = "UNITED_STATES"
    dominos_language: str = "en"
    dominos_timeout: float = 15.0

    # --- LLM ---
    mistral_api_key: str
    mistral_model: str = "mistral-small-latest"
    mistral_temperature: float = 0.0

    # --- Logging ---
    log_level: str = "DEBUG"

    # --- Langfuse ---
    langfuse_public_key: str = ""
    langfuse_secret_key: str = ""
    langfuse_base_url: str = "https://cloud.langfuse.com"

    @field_validator("dominos_order_url", "dominos_tracker_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached Settings instance (created once)."""
    return Settings()
