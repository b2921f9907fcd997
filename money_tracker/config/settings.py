"""
Configuration Management for Dancer Money Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Process-level configuration (where data lives, how to log) is kept
separate from the user's own TrackerSettings, which live in the store
and are edited from the app.
"""

from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from money_tracker.models.records import (
    DEFAULT_BUFFER_PERCENT,
    DEFAULT_EXPECTED_NET_PER_NIGHT,
    DEFAULT_MIN_NET,
    TrackerSettings,
)

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from MONEY_TRACKER_* environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="MONEY_TRACKER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Storage
    data_path: Path = Field(
        default=Path("data/tracker.json"),
        description="JSON document holding entries, bills, settings and check-ins"
    )
    audit_log_path: Optional[Path] = Field(
        default=None,
        description="JSON-lines audit log. If unset, audit events are only logged"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Standard library log level name"
    )

    # Defaults for a fresh tracker (clamped like any user edit)
    default_min_net: Decimal = Field(
        default=DEFAULT_MIN_NET,
        description="Minimum net per night when no settings are stored"
    )
    default_buffer_percent: Decimal = Field(
        default=DEFAULT_BUFFER_PERCENT,
        description="Weekly buffer percent when no settings are stored"
    )
    default_expected_net_per_night: Decimal = Field(
        default=DEFAULT_EXPECTED_NET_PER_NIGHT,
        description="Expected net per night when no settings are stored"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Unknown log level: {v}. Allowed: {sorted(_LOG_LEVELS)}")
        return level

    def default_tracker_settings(self) -> TrackerSettings:
        """TrackerSettings used when the store has none."""
        return TrackerSettings(
            min_net_default=self.default_min_net,
            buffer_percent=self.default_buffer_percent,
            expected_net_per_night=self.default_expected_net_per_night,
        )


@lru_cache()
def get_settings() -> AppSettings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return AppSettings()
