"""FeedRelay - main orchestrator.

Wires a subscription store, a feed fetcher and a delivery backend to the
poll cycle engine and its scheduler, and exposes the user-facing
subscribe/unsubscribe operations.

Example:
    >>> import asyncio
    >>> from feedrelay.core.relay import FeedRelay
    >>> from feedrelay.store.memory import MemorySubscriptionStore
    >>> from feedrelay.testing import RecordingDelivery, StaticFeedFetcher
    >>> async def example():
    ...     async with FeedRelay(
    ...         store=MemorySubscriptionStore(),
    ...         fetcher=StaticFeedFetcher(),
    ...         delivery=RecordingDelivery(),
    ...     ) as relay:
    ...         await relay.subscribe("room1", "https://a/feed")
    ...         return await relay.subscriptions("room1")
    >>> asyncio.run(example())
    ['https://a/feed']
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import TYPE_CHECKING, Any

from feedrelay.engine.poll import CycleStats, PollCycleEngine
from feedrelay.scheduler.loop import PollScheduler

if TYPE_CHECKING:
    from feedrelay.core.config import Settings
    from feedrelay.protocols.delivery import Delivery
    from feedrelay.protocols.fetcher import FeedFetcher
    from feedrelay.protocols.store import SubscriptionStore

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = timedelta(minutes=1)


class FeedRelay:
    """Main orchestrator for feed polling and fan-out.

    Args:
        store: Subscription store.
        fetcher: Feed fetcher.
        delivery: Delivery backend.
        interval: Delay between poll cycles.
        max_concurrency: Feeds processed concurrently within a cycle.
    """

    def __init__(
        self,
        store: SubscriptionStore,
        fetcher: FeedFetcher,
        delivery: Delivery,
        *,
        interval: timedelta = DEFAULT_INTERVAL,
        max_concurrency: int = 4,
    ) -> None:
        self._store = store
        self._fetcher = fetcher
        self._delivery = delivery
        self._engine = PollCycleEngine(
            store,
            fetcher,
            delivery,
            max_concurrency=max_concurrency,
        )
        self._interval = interval
        self._scheduler: PollScheduler | None = None
        self._initialized = False

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        delivery: Delivery,
        *,
        fetcher: FeedFetcher | None = None,
    ) -> FeedRelay:
        """Build a relay from settings, creating the store and fetcher."""
        from feedrelay.fetcher.rss import RSSFeedFetcher
        from feedrelay.store.factory import create_store

        if fetcher is None:
            fetcher = RSSFeedFetcher(
                timeout=settings.request_timeout,
                user_agent=settings.user_agent,
                max_retries=settings.max_retries,
            )
        return cls(
            store=create_store(settings.storage_url),
            fetcher=fetcher,
            delivery=delivery,
            interval=settings.poll_interval,
            max_concurrency=settings.max_concurrent_feeds,
        )

    @property
    def store(self) -> SubscriptionStore:
        """Get the subscription store."""
        return self._store

    @property
    def engine(self) -> PollCycleEngine:
        """Get the poll cycle engine."""
        return self._engine

    @property
    def scheduler(self) -> PollScheduler | None:
        """The running scheduler, if polling was started."""
        return self._scheduler

    # --- User-facing operations (store errors propagate) ---

    async def subscribe(self, subscriber: str, url: str) -> None:
        """Subscribe ``subscriber`` to the feed at ``url``.

        Raises:
            StorageError: If the store cannot be written.
        """
        await self._store.add_subscription(subscriber, url)
        logger.info("%s subscribed to %s", subscriber, url)

    async def unsubscribe(self, subscriber: str, url: str) -> None:
        """Unsubscribe. Unknown subscriptions are ignored.

        Raises:
            StorageError: If the store cannot be written.
        """
        await self._store.remove_subscription(subscriber, url)
        logger.info("%s unsubscribed from %s", subscriber, url)

    async def subscriptions(self, subscriber: str) -> list[str]:
        """Sorted URLs the subscriber follows."""
        return sorted(await self._store.list_subscriptions(subscriber))

    # --- Polling ---

    async def poll_once(self) -> CycleStats:
        """Run a single poll cycle now.

        Raises:
            RuntimeError: If the scheduler is running (cycles must not overlap).
        """
        if self._scheduler is not None and self._scheduler.running:
            raise RuntimeError("Cannot poll manually while the scheduler is running")
        return await self._engine.run_one_cycle()

    def start(self, *, run_immediately: bool = False) -> PollScheduler:
        """Start background polling.

        Raises:
            RuntimeError: If polling is already running.
        """
        if self._scheduler is not None and self._scheduler.running:
            raise RuntimeError("Polling is already running")
        self._scheduler = PollScheduler(
            self._engine,
            self._interval,
            run_immediately=run_immediately,
        )
        self._scheduler.start()
        return self._scheduler

    async def stop(self) -> None:
        """Stop background polling after the current cycle finishes."""
        if self._scheduler is not None:
            await self._scheduler.close()

    # --- Lifecycle ---

    async def initialize(self) -> None:
        """Initialize the store."""
        if self._initialized:
            return
        await self._store.initialize()
        self._initialized = True

    async def close(self) -> None:
        """Stop polling and close every component."""
        await self.stop()
        close_fetcher = getattr(self._fetcher, "close", None)
        if close_fetcher is not None:
            await close_fetcher()
        await self._store.close()
        self._initialized = False

    async def __aenter__(self) -> FeedRelay:
        await self.initialize()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    def info(self) -> dict[str, Any]:
        """Get orchestrator metadata."""
        scheduler = self._scheduler
        return {
            "interval_seconds": self._interval.total_seconds(),
            "polling": scheduler is not None and scheduler.running,
            "cycles": scheduler.state.run_count if scheduler else 0,
            "initialized": self._initialized,
        }
