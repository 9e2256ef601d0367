"""Protocol definitions - all extension points."""

from feedrelay.protocols.delivery import Delivery
from feedrelay.protocols.fetcher import FeedFetcher
from feedrelay.protocols.store import SubscriptionStore

__all__ = [
    "Delivery",
    "FeedFetcher",
    "SubscriptionStore",
]
