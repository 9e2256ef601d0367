"""Core orchestration, configuration and errors."""

from feedrelay.core.config import Settings, get_settings
from feedrelay.core.exceptions import (
    ConfigurationError,
    DeliveryError,
    FeedRelayError,
    FetchError,
    NotFoundError,
    StorageError,
)

__all__ = [
    "Settings",
    "get_settings",
    "FeedRelayError",
    "StorageError",
    "NotFoundError",
    "FetchError",
    "DeliveryError",
    "ConfigurationError",
]
