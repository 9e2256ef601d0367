"""In-memory subscription store.

Provides a complete in-memory implementation of SubscriptionStore,
useful for testing, development and ephemeral runs.

Example:
    >>> import asyncio
    >>> from feedrelay.store.memory import MemorySubscriptionStore
    >>> async def example():
    ...     store = MemorySubscriptionStore()
    ...     await store.add_subscription("room1", "https://a/feed")
    ...     return await store.list_subscriptions("room1")
    >>> asyncio.run(example())
    {'https://a/feed'}
"""

from __future__ import annotations

import asyncio
from collections import defaultdict
from collections.abc import Iterable

from feedrelay.core.exceptions import NotFoundError
from feedrelay.models.subscription import Subscription


class MemorySubscriptionStore:
    """In-memory store using dictionaries.

    Every operation runs under one asyncio lock, so feed-id resolution and
    the write that depends on it are never interleaved with another call.
    Data is lost when the process exits.
    """

    def __init__(self) -> None:
        self._feed_ids: dict[str, int] = {}  # url -> feed id
        self._next_id = 1
        self._subscriptions: dict[int, set[str]] = defaultdict(set)
        self._entries: dict[int, set[str]] = defaultdict(set)
        self._lock = asyncio.Lock()

    async def initialize(self) -> None:
        """No-op for memory storage."""

    async def close(self) -> None:
        """No-op. Data is kept so a reopened store sees the same state."""

    def _resolve(self, url: str) -> int:
        feed_id = self._feed_ids.get(url)
        if feed_id is None:
            raise NotFoundError(f"Unknown feed: {url}")
        return feed_id

    # --- Subscription Operations ---

    async def add_subscription(self, subscriber: str, url: str) -> None:
        """Subscribe, creating the feed on first use."""
        async with self._lock:
            feed_id = self._feed_ids.get(url)
            if feed_id is None:
                feed_id = self._next_id
                self._next_id += 1
                self._feed_ids[url] = feed_id
            self._subscriptions[feed_id].add(subscriber)

    async def remove_subscription(self, subscriber: str, url: str) -> None:
        """Unsubscribe. Unknown feeds and subscriptions are ignored."""
        async with self._lock:
            feed_id = self._feed_ids.get(url)
            if feed_id is None:
                return
            self._subscriptions[feed_id].discard(subscriber)

    async def list_subscriptions(self, subscriber: str) -> set[str]:
        """URLs the subscriber follows."""
        async with self._lock:
            return {
                url
                for url, feed_id in self._feed_ids.items()
                if subscriber in self._subscriptions[feed_id]
            }

    async def all_subscriptions(self) -> list[Subscription]:
        """Every (url, subscriber) pair."""
        async with self._lock:
            return [
                Subscription(url=url, subscriber=subscriber)
                for url, feed_id in self._feed_ids.items()
                for subscriber in sorted(self._subscriptions[feed_id])
            ]

    async def subscribers(self, url: str) -> set[str]:
        """Subscribers of one feed."""
        async with self._lock:
            feed_id = self._feed_ids.get(url)
            if feed_id is None:
                return set()
            return set(self._subscriptions[feed_id])

    async def list_feeds(self) -> list[str]:
        """Every known feed URL in creation order."""
        async with self._lock:
            return sorted(self._feed_ids, key=self._feed_ids.__getitem__)

    # --- Known Entry Operations ---

    async def known_entries(self, url: str) -> set[str]:
        """Recorded entry ids for the feed."""
        async with self._lock:
            return set(self._entries[self._resolve(url)])

    async def record_entries(self, url: str, ids: Iterable[str]) -> None:
        """Add ids to the feed's known set."""
        if isinstance(ids, str):
            raise TypeError("ids must be an iterable of entry ids, not a str")
        async with self._lock:
            self._entries[self._resolve(url)].update(ids)
