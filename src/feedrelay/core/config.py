"""feedrelay configuration.

Application settings loaded from environment variables with FEEDRELAY_ prefix.

Example:
    >>> from feedrelay.core.config import get_settings
    >>> settings = get_settings(log_level="DEBUG")
    >>> settings.log_level
    'DEBUG'
    >>> settings.poll_interval_ms
    60000
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    Loads from environment variables with FEEDRELAY_ prefix.

    Example:
        >>> from feedrelay.core.config import Settings
        >>> s = Settings(storage_url="memory://", poll_interval_ms=5000)
        >>> s.poll_interval.total_seconds()
        5.0
    """

    model_config = SettingsConfigDict(
        env_prefix="FEEDRELAY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Polling
    poll_interval_ms: int = Field(
        default=60_000,
        ge=1,
        description="Delay between the end of one poll cycle and the start of the next",
    )
    max_concurrent_feeds: int = Field(default=4, ge=1, le=64)

    # Storage
    storage_url: str = Field(
        default="sqlite:///./data/rss.db",
        description="memory:// or sqlite:///path/to/rss.db",
    )

    # Fetching
    request_timeout: float = Field(default=30.0, ge=1.0)
    max_retries: int = Field(default=2, ge=0, le=10)
    user_agent: str = Field(default="feedrelay/0.1")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: Literal["console", "json"] = Field(default="console")

    @property
    def poll_interval(self) -> timedelta:
        """Poll interval as a timedelta."""
        return timedelta(milliseconds=self.poll_interval_ms)


def get_settings(**overrides: Any) -> Settings:
    """Get settings with optional overrides.

    Example:
        >>> from feedrelay.core.config import get_settings
        >>> s = get_settings(max_concurrent_feeds=8)
        >>> s.max_concurrent_feeds
        8
    """
    return Settings(**overrides)
