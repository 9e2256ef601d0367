"""Testing utilities.

In-memory fetcher and delivery doubles for exercising the engine and the
scheduler without network access or a chat client.

Example:
    >>> import asyncio
    >>> from feedrelay.testing import StaticFeedFetcher, RecordingDelivery
    >>> fetcher = StaticFeedFetcher()
    >>> fetcher.set_entries("https://a/feed", ["e1", "e2"], title="A")
    >>> snap = asyncio.run(fetcher.fetch("https://a/feed"))
    >>> snap.entry_ids(), fetcher.calls
    (['e1', 'e2'], ['https://a/feed'])
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from dataclasses import dataclass, field

from feedrelay.core.exceptions import FetchError
from feedrelay.models.feed import FeedEntry, FeedSnapshot


@dataclass
class StaticFeedFetcher:
    """Fetcher that serves preset snapshots.

    URLs registered with :meth:`fail` raise ``FetchError``; unknown URLs do
    too. Every call is appended to ``calls``. ``delay`` makes each fetch
    sleep first, for exercising slow cycles.
    """

    snapshots: dict[str, FeedSnapshot] = field(default_factory=dict)
    failures: dict[str, Exception] = field(default_factory=dict)
    delay: float = 0.0
    calls: list[str] = field(default_factory=list)

    def set_entries(
        self,
        url: str,
        entry_ids: Iterable[str],
        *,
        title: str | None = None,
        link: str | None = None,
    ) -> FeedSnapshot:
        """Serve a snapshot with the given entry ids for ``url``."""
        snapshot = FeedSnapshot(
            url=url,
            title=title,
            link=link,
            entries=[
                FeedEntry(id=entry_id, title=f"Post {entry_id}", link=f"{url}#{entry_id}")
                for entry_id in entry_ids
            ],
        )
        self.snapshots[url] = snapshot
        self.failures.pop(url, None)
        return snapshot

    def fail(self, url: str, error: Exception | None = None) -> None:
        """Make fetches of ``url`` raise."""
        self.failures[url] = error or FetchError("unreachable", url=url)

    async def fetch(self, url: str) -> FeedSnapshot:
        self.calls.append(url)
        if self.delay:
            await asyncio.sleep(self.delay)
        if url in self.failures:
            raise self.failures[url]
        if url not in self.snapshots:
            raise FetchError(f"No snapshot for {url}", url=url)
        return self.snapshots[url]


@dataclass
class RecordingDelivery:
    """Delivery that records every notice.

    Subscribers listed in ``failing`` raise instead of receiving.
    """

    sent: list[tuple[str, str]] = field(default_factory=list)
    failing: set[str] = field(default_factory=set)

    async def notify(self, subscriber: str, message: str) -> None:
        if subscriber in self.failing:
            raise ConnectionError(f"cannot reach {subscriber}")
        self.sent.append((subscriber, message))

    def messages_for(self, subscriber: str) -> list[str]:
        """Messages delivered to one subscriber, in order."""
        return [message for to, message in self.sent if to == subscriber]
