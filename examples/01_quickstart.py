#!/usr/bin/env python3
"""
feedrelay Quickstart Example

Shows the basic flow: subscribe two rooms, poll, poll again, only new
entries are delivered.

Usage:
    python examples/01_quickstart.py
"""

import asyncio

from feedrelay import FeedRelay, MemorySubscriptionStore, RSSFeedFetcher
from feedrelay.testing import RecordingDelivery

FEED = "https://news.ycombinator.com/rss"


async def main() -> None:
    """Poll a real feed twice; the second cycle only delivers what is new."""
    delivery = RecordingDelivery()

    async with FeedRelay(
        store=MemorySubscriptionStore(),
        fetcher=RSSFeedFetcher(timeout=10.0),
        delivery=delivery,
    ) as relay:
        await relay.subscribe("!room1:example.org", FEED)
        await relay.subscribe("!room2:example.org", FEED)

        print("First cycle...")
        stats = await relay.poll_once()
        print(f"  new entries: {stats.new_entries}, deliveries: {stats.deliveries}")
        for room, message in delivery.sent[:3]:
            print(f"  {room}: {message}")

        delivery.sent.clear()
        print("\nSecond cycle (same feed)...")
        stats = await relay.poll_once()
        print(f"  new entries: {stats.new_entries}, deliveries: {stats.deliveries}")


if __name__ == "__main__":
    asyncio.run(main())
