"""Application settings loaded from environment variables."""

from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

HMT_SANCTIONS = "HMT-Sanctions"


class UpdateFrequency(str, Enum):
    """How often scheduled refreshes of the sanctions document run."""

    HOURLY = "hourly"
    EVERY_4_HOURS = "every_4_hours"
    EVERY_12_HOURS = "every_12_hours"
    DAILY = "daily"
    WEEKLY = "weekly"

    def to_seconds(self) -> int:
        """Convert frequency to seconds."""
        mapping = {
            UpdateFrequency.HOURLY: 3600,
            UpdateFrequency.EVERY_4_HOURS: 14400,
            UpdateFrequency.EVERY_12_HOURS: 43200,
            UpdateFrequency.DAILY: 86400,
            UpdateFrequency.WEEKLY: 604800,
        }
        return mapping[self]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Sanctions document
    sanction_file: Path = Path("sanctions.yml")
    dob_aware_lists: list[str] = Field(default_factory=lambda: [HMT_SANCTIONS])
    require_dob_match: bool = False
    """Gate name matches on date-of-birth-aware lists by the DOB check."""

    # Scheduling
    refresh_frequency: UpdateFrequency = UpdateFrequency.DAILY

    # Application Configuration
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    environment: Literal["development", "test", "production"] = "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
