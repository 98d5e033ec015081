"""Runtime configuration.

All settings come from ``CIVICHUB_*`` environment variables or a ``.env``
file in the working directory.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """CivicHub settings."""

    model_config = SettingsConfigDict(
        env_prefix="CIVICHUB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # memory | json
    store_backend: str = "memory"
    data_dir: Path = Path.home() / ".civichub"
    log_level: str = "INFO"

    session_ttl_hours: int = 24
    allowed_origins: list[str] = ["*"]
    bulk_reject_reason: str = "Bulk rejection"

    @field_validator("store_backend")
    @classmethod
    def _check_backend(cls, value: str) -> str:
        value = value.lower()
        if value not in ("memory", "json"):
            raise ValueError("store_backend must be 'memory' or 'json'")
        return value

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
