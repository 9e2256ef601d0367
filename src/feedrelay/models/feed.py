"""Feed snapshot models.

A :class:`FeedSnapshot` is what a fetcher returns for one URL: the feed's
current title and link plus its full entry list in fetch order. Snapshots
are never persisted; only the ids of new entries are.

Example:
    >>> from feedrelay.models.feed import FeedEntry, FeedSnapshot
    >>> snap = FeedSnapshot(
    ...     url="https://a/feed",
    ...     title="A",
    ...     entries=[FeedEntry(id="e1"), FeedEntry(id="e2", title="Second")],
    ... )
    >>> snap.entry_ids()
    ['e1', 'e2']
"""

from __future__ import annotations

from pydantic import Field

from feedrelay.models.base import FeedRelayModel


class FeedEntry(FeedRelayModel):
    """One item in a feed."""

    id: str = Field(..., min_length=1, description="Stable identifier used for dedup")
    title: str | None = None
    link: str | None = None


class FeedSnapshot(FeedRelayModel):
    """A feed as it looked at fetch time."""

    url: str = Field(..., min_length=1)
    title: str | None = None
    link: str | None = None
    entries: list[FeedEntry] = Field(default_factory=list)

    def entry_ids(self) -> list[str]:
        """Entry ids in feed order."""
        return [entry.id for entry in self.entries]
