"""
Application configuration using Pydantic Settings.

Values come from environment variables or a local .env file.
"""

from functools import lru_cache
from typing import List, Literal

from pydantic import Field, model_validator
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
    ENVIRONMENT: Literal["local", "test", "production"] = "local"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # ===========================================
    # Status thresholds
    # ===========================================
    # A KPI without a value for the current period is YELLOW when its
    # due date is at most this many days away, RED otherwise.
    WARNING_THRESHOLD_DAYS: int = Field(default=3, ge=0)

    # Cadence used when a KPI carries no (or an unknown) interval
    FALLBACK_INTERVAL: Literal["weekly", "monthly", "quarterly"] = "weekly"

    # ===========================================
    # Reminder policy
    # ===========================================
    UPCOMING_REMINDER_DAYS: int = Field(default=3, ge=1)
    OVERDUE_REMINDER_DAYS: List[int] = Field(default=[7, 14])
    ESCALATION_DAYS: int = Field(default=21, ge=1)

    # How many unrecorded periods are walked back to find the first missed deadline
    MAX_OVERDUE_LOOKBACK_PERIODS: int = Field(default=104, ge=1)

    # ===========================================
    # Scheduler
    # ===========================================
    REMINDER_CRON_HOUR: int = Field(default=7, ge=0, le=23)
    REMINDER_CRON_MINUTE: int = Field(default=0, ge=0, le=59)

    # IANA timezone for the server clock; empty means naive local time
    TIMEZONE: str = ""

    # ===========================================
    # Local data
    # ===========================================
    DATA_FILE: str = "./data/kpis.json"

    @model_validator(mode="after")
    def validate_reminder_days(self):
        late = [day for day in self.OVERDUE_REMINDER_DAYS if day >= self.ESCALATION_DAYS]
        if late:
            raise ValueError(
                f"OVERDUE_REMINDER_DAYS {late} must be below ESCALATION_DAYS ({self.ESCALATION_DAYS})"
            )
        if any(day < 1 for day in self.OVERDUE_REMINDER_DAYS):
            raise ValueError("OVERDUE_REMINDER_DAYS must be positive")
        return self

    @property
    def is_test(self) -> bool:
        """Check if running in the test environment."""
        return self.ENVIRONMENT == "test"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache ensures settings are loaded only once.
    """
    return Settings()
