"""Feed fetcher protocol."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from feedrelay.models.feed import FeedSnapshot


@runtime_checkable
class FeedFetcher(Protocol):
    """Turns a feed URL into a :class:`FeedSnapshot`.

    Implementations bound their own network time (timeouts) and raise
    ``FetchError`` for anything that prevents a usable snapshot.
    """

    async def fetch(self, url: str) -> FeedSnapshot:
        """Fetch and parse the feed at ``url``."""
        ...
