"""
feedrelay - feed polling and fan-out engine.

feedrelay periodically polls every subscribed RSS/Atom feed, works out which
entries have never been delivered for that feed, and notifies every
subscriber (a chat room, a channel, any opaque id) of each new entry once.

Key Features:
- Protocol-based design (swap store, fetcher and delivery backends)
- Durable known-entry records, so restarts never re-announce old posts
- Each feed fetched once per cycle regardless of subscriber count
- Non-overlapping poll cycles; one bad feed never stops the others

Quick Start:
    >>> from feedrelay import ConsoleDelivery, FeedRelay, RSSFeedFetcher, SQLiteSubscriptionStore
    >>> relay = FeedRelay(
    ...     store=SQLiteSubscriptionStore("data/rss.db"),
    ...     fetcher=RSSFeedFetcher(),
    ...     delivery=ConsoleDelivery(),
    ... )
    >>> # async with relay:
    >>> #     await relay.subscribe("!room:example.org", "https://example.com/feed.xml")
    >>> #     relay.start()

Architecture:
    Stores: MemorySubscriptionStore, SQLiteSubscriptionStore
    Fetchers: RSSFeedFetcher
    Delivery: ConsoleDelivery, CallbackDelivery
"""

from feedrelay.core.config import Settings, get_settings
from feedrelay.core.exceptions import (
    ConfigurationError,
    DeliveryError,
    FeedRelayError,
    FetchError,
    NotFoundError,
    StorageError,
)
from feedrelay.core.relay import FeedRelay
from feedrelay.delivery import CallbackDelivery, ConsoleDelivery
from feedrelay.engine import CycleStats, PollCycleEngine
from feedrelay.fetcher import RSSFeedFetcher, parse_feed
from feedrelay.models import FeedEntry, FeedSnapshot, Subscription
from feedrelay.protocols import Delivery, FeedFetcher, SubscriptionStore
from feedrelay.render import render_notice
from feedrelay.scheduler import PollScheduler, ScheduleState
from feedrelay.store import (
    MemorySubscriptionStore,
    SQLiteSubscriptionStore,
    create_store,
)

__version__ = "0.1.0"

__all__ = [
    # Models
    "FeedEntry",
    "FeedSnapshot",
    "Subscription",
    # Protocols
    "SubscriptionStore",
    "FeedFetcher",
    "Delivery",
    # Stores
    "MemorySubscriptionStore",
    "SQLiteSubscriptionStore",
    "create_store",
    # Fetchers
    "RSSFeedFetcher",
    "parse_feed",
    # Delivery
    "ConsoleDelivery",
    "CallbackDelivery",
    "render_notice",
    # Polling
    "PollCycleEngine",
    "CycleStats",
    "PollScheduler",
    "ScheduleState",
    # Orchestration
    "FeedRelay",
    # Configuration
    "Settings",
    "get_settings",
    # Errors
    "FeedRelayError",
    "StorageError",
    "NotFoundError",
    "FetchError",
    "DeliveryError",
    "ConfigurationError",
    # Version
    "__version__",
]
