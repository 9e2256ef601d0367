"""Notice rendering.

Turns a feed snapshot and one of its entries into the HTML notice sent to
subscribers. Titles come from remote documents and are always escaped.

Example:
    >>> from feedrelay.models.feed import FeedEntry, FeedSnapshot
    >>> from feedrelay.render import render_notice
    >>> feed = FeedSnapshot(url="https://a/feed", title="A & B")
    >>> render_notice(feed, FeedEntry(id="1", title="<Hi>", link="https://a/1"))
    'New post in A &amp; B: <b><a href="https://a/1">&lt;Hi&gt;</a></b>'
"""

from __future__ import annotations

from html import escape

from feedrelay.models.feed import FeedEntry, FeedSnapshot

UNKNOWN_FEED = "Unknown Feed"
UNKNOWN_POST = "Unknown Post"


def render_label(title: str | None, link: str | None, fallback: str) -> str:
    """Escaped title, wrapped in a link when one is present.

    Example:
        >>> render_label(None, None, "Unknown Post")
        'Unknown Post'
        >>> render_label("x", 'https://e/?a=1&b="2"', "?")
        '<a href="https://e/?a=1&amp;b=&quot;2&quot;">x</a>'
    """
    text = escape(title or fallback)
    if not link:
        return text
    return f'<a href="{escape(link, quote=True)}">{text}</a>'


def render_notice(feed: FeedSnapshot, entry: FeedEntry) -> str:
    """Render the notice for one new entry."""
    name = render_label(feed.title, feed.link, UNKNOWN_FEED)
    title = render_label(entry.title, entry.link, UNKNOWN_POST)
    return f"New post in {name}: <b>{title}</b>"
