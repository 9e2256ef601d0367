"""Poll cycle engine.

One cycle:
1. Load every (url, subscriber) pair and invert it so each distinct feed is
   fetched once, however many subscribers it has
2. Fetch each feed and diff its entries against the known-entry records
3. Deliver every new entry to every subscriber of the feed
4. Record all new entry ids for the feed in one write, even if some
   deliveries failed

Errors never leave the cycle: a failing feed is logged and skipped, a
failing delivery is logged and the rest continue. Cycles on one engine never
overlap; a second caller waits for the running cycle to finish.

Example:
    >>> from feedrelay.engine.poll import CycleStats
    >>> stats = CycleStats(feeds=2, new_entries=3, deliveries=6)
    >>> stats.ok
    True
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from feedrelay.core.exceptions import DeliveryError, FetchError
from feedrelay.render import render_notice

if TYPE_CHECKING:
    from feedrelay.models.feed import FeedEntry, FeedSnapshot
    from feedrelay.protocols.delivery import Delivery
    from feedrelay.protocols.fetcher import FeedFetcher
    from feedrelay.protocols.store import SubscriptionStore

logger = logging.getLogger(__name__)

Renderer = Callable[["FeedSnapshot", "FeedEntry"], str]


@dataclass
class CycleStats:
    """Summary of one poll cycle.

    Example:
        >>> from feedrelay.engine.poll import CycleStats
        >>> CycleStats(feeds=1, fetch_failures=1).ok
        False
    """

    feeds: int = 0
    fetch_failures: int = 0
    new_entries: int = 0
    deliveries: int = 0
    delivery_failures: int = 0
    render_failures: int = 0
    store_failures: int = 0
    duration_ms: float = 0.0
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def ok(self) -> bool:
        """True if nothing failed during the cycle."""
        return not (
            self.fetch_failures
            or self.delivery_failures
            or self.render_failures
            or self.store_failures
        )


class PollCycleEngine:
    """Runs poll cycles over every subscribed feed.

    Args:
        store: Subscription store (read subscriptions, read/write known entries).
        fetcher: Feed fetcher.
        delivery: Outbound notifier.
        max_concurrency: Feeds processed at the same time within one cycle.
        render: Builds the notice text for a new entry.
    """

    def __init__(
        self,
        store: SubscriptionStore,
        fetcher: FeedFetcher,
        delivery: Delivery,
        *,
        max_concurrency: int = 4,
        render: Renderer = render_notice,
    ) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self._store = store
        self._fetcher = fetcher
        self._delivery = delivery
        self._max_concurrency = max_concurrency
        self._render = render
        self._cycle_lock = asyncio.Lock()

    @property
    def store(self) -> SubscriptionStore:
        """Get the subscription store."""
        return self._store

    async def _fan_out(self) -> dict[str, set[str]]:
        """Map each distinct feed url to its subscribers."""
        fan_out: dict[str, set[str]] = defaultdict(set)
        for subscription in await self._store.all_subscriptions():
            fan_out[subscription.url].add(subscription.subscriber)
        return dict(fan_out)

    @property
    def cycle_running(self) -> bool:
        """Whether a cycle is in progress."""
        return self._cycle_lock.locked()

    async def run_one_cycle(self) -> CycleStats:
        """Poll every subscribed feed once.

        Never raises for fetch, delivery, render or store failures; they are
        logged and counted in the returned stats. Concurrent calls are
        serialized, so an entry is never delivered by two cycles.
        """
        async with self._cycle_lock:
            return await self._run_cycle()

    async def _run_cycle(self) -> CycleStats:
        start_time = time.perf_counter()
        stats = CycleStats()

        try:
            fan_out = await self._fan_out()
        except Exception:
            logger.exception("Could not load subscriptions, skipping cycle")
            stats.store_failures += 1
            stats.duration_ms = (time.perf_counter() - start_time) * 1000
            return stats

        stats.feeds = len(fan_out)
        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def guarded(url: str, subscribers: set[str]) -> None:
            async with semaphore:
                await self._process_feed(url, subscribers, stats)

        results = await asyncio.gather(
            *(guarded(url, subscribers) for url, subscribers in fan_out.items()),
            return_exceptions=True,
        )
        for url, result in zip(fan_out, results):
            if isinstance(result, Exception):
                logger.error("Unhandled error processing %s", url, exc_info=result)

        stats.duration_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            "Poll cycle done: %d feeds, %d new entries, %d deliveries (%d failed) in %.0fms",
            stats.feeds,
            stats.new_entries,
            stats.deliveries,
            stats.delivery_failures,
            stats.duration_ms,
        )
        return stats

    async def _process_feed(self, url: str, subscribers: set[str], stats: CycleStats) -> None:
        """Fetch, diff, deliver and record one feed."""
        try:
            snapshot = await self._fetcher.fetch(url)
        except FetchError as e:
            stats.fetch_failures += 1
            logger.warning("Failed to fetch %s: %s", url, e)
            return
        except Exception:
            # Timeouts and fetcher bugs are treated like any other fetch failure
            stats.fetch_failures += 1
            logger.warning("Failed to fetch %s", url, exc_info=True)
            return

        try:
            known = await self._store.known_entries(url)
        except Exception:
            stats.store_failures += 1
            logger.exception("Could not load known entries for %s", url)
            return

        new_entries = self._new_entries(snapshot, known)
        if not new_entries:
            logger.debug("No new entries in %s", url)
            return

        stats.new_entries += len(new_entries)
        for entry in new_entries:
            try:
                message = self._render(snapshot, entry)
            except Exception:
                stats.render_failures += 1
                logger.exception("Could not render entry %s of %s", entry.id, url)
                continue
            for subscriber in sorted(subscribers):
                await self._deliver(subscriber, message, stats)

        try:
            await self._store.record_entries(url, [entry.id for entry in new_entries])
        except Exception:
            stats.store_failures += 1
            logger.exception("Could not record %d entries for %s", len(new_entries), url)

    @staticmethod
    def _new_entries(snapshot: FeedSnapshot, known: set[str]) -> list[FeedEntry]:
        """Entries whose id is not known yet, in feed order, each id once."""
        seen = set(known)
        new_entries = []
        for entry in snapshot.entries:
            if entry.id in seen:
                continue
            seen.add(entry.id)
            new_entries.append(entry)
        return new_entries

    async def _deliver(self, subscriber: str, message: str, stats: CycleStats) -> None:
        try:
            await self._delivery.notify(subscriber, message)
        except Exception as e:
            stats.delivery_failures += 1
            error = DeliveryError(f"Delivery to {subscriber} failed: {e}", subscriber, e)
            logger.warning("%s", error)
        else:
            stats.deliveries += 1
