"""Configuration settings for the FLEXR analytics library."""

from pathlib import Path
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Defaults loaded from FLEXR_* environment variables.

    Library functions take their inputs as parameters; these values are only
    consulted when a caller leaves a parameter unset.
    """

    model_config = SettingsConfigDict(
        env_prefix="FLEXR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Training load
    weekly_target_hours: float = 8.0

    # Heart rate
    default_max_hr: int = 190

    # IANA name used to assign samples to calendar days
    timezone: str = "UTC"

    # Aggregate cache
    cache_ttl_seconds: int = 300

    # Workout store
    db_path: Path = Path("flexr.db")

    log_level: str = "INFO"

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v):
        """Ensure the timezone is a known IANA name."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown timezone '{v}'")
        return v


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
