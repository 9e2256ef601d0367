"""Subscription model.

Example:
    >>> from feedrelay.models.subscription import Subscription
    >>> a = Subscription(url="https://a/feed", subscriber="!room1:example.org")
    >>> b = Subscription(url="https://a/feed", subscriber="!room1:example.org")
    >>> a == b and len({a, b}) == 1
    True
"""

from __future__ import annotations

from pydantic import Field

from feedrelay.models.base import FeedRelayModel


class Subscription(FeedRelayModel):
    """A (feed url, subscriber) pair."""

    url: str = Field(..., min_length=1)
    subscriber: str = Field(..., min_length=1)
