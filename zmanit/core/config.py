"""
Application configuration using Pydantic Settings.

Scheduling constants and server settings are loaded from environment variables
(or a local .env file).
"""

from functools import lru_cache
from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ===========================================
    # Environment
    # ===========================================
    ENVIRONMENT: Literal["local", "production"] = "local"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # ===========================================
    # Capacity
    # ===========================================
    # Share of each day's hours withheld from planning for interruptions
    BUFFER_PERCENT: int = Field(25, ge=0, le=100)

    # Minimum gap kept between two consecutive blocks (minutes)
    BREATHING_MINUTES: int = Field(5, ge=0)

    # Gaps shorter than this are not offered as free slots
    MIN_SLOT_MINUTES: int = Field(15, ge=1)

    # Duration assumed for tasks without an estimate
    DEFAULT_TASK_MINUTES: int = Field(30, ge=1)

    # ===========================================
    # Day / week status thresholds
    # ===========================================
    TIGHT_UTILIZATION_PERCENT: int = 90
    LIGHT_DAY_PERCENT: int = 50
    WEEK_TIGHT_DAYS: int = 3

    # ===========================================
    # Daily rebalancing
    # ===========================================
    # Free time needed before tasks are pulled back from the next working day
    PULL_MIN_FREE_MINUTES: int = 15

    # ===========================================
    # Default weekly hours (decimal hours, Sunday first)
    # ===========================================
    WORK_DAY_START_HOUR: float = 8.5
    WORK_DAY_END_HOUR: float = 16.25
    WORK_DAYS: List[int] = Field(default=[0, 1, 2, 3, 4])
    HOME_DAY_START_HOUR: float = 16.5
    HOME_DAY_END_HOUR: float = 21.0
    HOME_FLEXIBLE_DAYS: List[int] = Field(default=[5, 6])
    HOME_FLEXIBLE_START_HOUR: float = 9.0
    HOME_FLEXIBLE_END_HOUR: float = 21.0

    # ===========================================
    # Deadline alerts
    # ===========================================
    DEADLINE_CRITICAL_DAYS: int = 1
    DEADLINE_WARNING_DAYS: int = 3
    DEADLINE_TIGHT_RATIO: float = 1.5

    # ===========================================
    # Server
    # ===========================================
    TIMEZONE: str = "Asia/Jerusalem"
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    ALLOWED_ORIGINS: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"]
    )

    @property
    def is_local(self) -> bool:
        """Check if running in local environment."""
        return self.ENVIRONMENT == "local"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache ensures settings are loaded only once.
    """
    return Settings()
