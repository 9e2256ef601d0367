"""Subscription store protocol.

Defines the interface for durable subscription and known-entry state.

Example:
    >>> from feedrelay.protocols.store import SubscriptionStore
    >>> hasattr(SubscriptionStore, "add_subscription")
    True
    >>> hasattr(SubscriptionStore, "record_entries")
    True
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from feedrelay.models.subscription import Subscription


@runtime_checkable
class SubscriptionStore(Protocol):
    """Subscription store protocol.

    Implementations must be safe to call concurrently from one poll cycle
    plus any number of subscribe/unsubscribe callers. Every read returns a
    consistent snapshot.

    See Also:
        feedrelay.store.memory.MemorySubscriptionStore: In-memory implementation
        feedrelay.store.sqlite.SQLiteSubscriptionStore: SQLite implementation
    """

    # --- Subscription Operations ---

    async def add_subscription(self, subscriber: str, url: str) -> None:
        """Subscribe ``subscriber`` to ``url``, creating the feed if needed.

        Idempotent.

        Raises:
            StorageError: On I/O or constraint failure.
        """
        ...

    async def remove_subscription(self, subscriber: str, url: str) -> None:
        """Drop the subscription. Missing feed or subscription is a no-op."""
        ...

    async def list_subscriptions(self, subscriber: str) -> set[str]:
        """URLs the subscriber currently follows."""
        ...

    async def all_subscriptions(self) -> list[Subscription]:
        """Every persisted (url, subscriber) pair."""
        ...

    async def subscribers(self, url: str) -> set[str]:
        """Subscribers of one feed (empty if the feed is unknown)."""
        ...

    async def list_feeds(self) -> list[str]:
        """Every known feed URL, including feeds with no subscribers."""
        ...

    # --- Known Entry Operations ---

    async def known_entries(self, url: str) -> set[str]:
        """Entry ids already recorded for the feed.

        ``ids`` must be a collection of ids; a bare ``str`` is rejected
        rather than recorded character by character.

        Raises:
            NotFoundError: If the feed was never subscribed to.
            TypeError: If ids is a str.
        """
        ...

    async def record_entries(self, url: str, ids: Iterable[str]) -> None:
        """Append ids to the feed's known-entry set (insert-if-absent).

        Raises:
            NotFoundError: If the feed was never subscribed to.
        """
        ...

    # --- Lifecycle ---

    async def initialize(self) -> None:
        """Initialize storage (create tables, etc.)."""
        ...

    async def close(self) -> None:
        """Clean up resources."""
        ...
