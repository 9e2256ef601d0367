"""Data models."""

from feedrelay.models.base import FeedRelayModel
from feedrelay.models.feed import FeedEntry, FeedSnapshot
from feedrelay.models.subscription import Subscription

__all__ = [
    "FeedRelayModel",
    "FeedEntry",
    "FeedSnapshot",
    "Subscription",
]
