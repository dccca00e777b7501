"""Application configuration from environment variables."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Ephemeris
    swisseph_ephe_path: str = Field(default="", alias="SWISSEPH_EPHE_PATH")
    house_system: str = Field(default="placidus", alias="HOUSE_SYSTEM")

    # Birth data input
    timezone: str = Field(default="UTC", alias="TIMEZONE")

    # Display
    wheel_size: float = Field(default=680.0, gt=0, alias="WHEEL_SIZE")
    ascii_degrees: bool = Field(default=False, alias="ASCII_DEGREES")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def reset_settings_cache() -> None:
    """Clear cached settings (useful in tests)."""
    get_settings.cache_clear()
