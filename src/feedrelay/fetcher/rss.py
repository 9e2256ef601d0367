"""RSS/Atom feed fetcher.

Downloads a feed over HTTP and parses RSS 2.0, RSS 1.0 (RDF) and Atom
documents into a :class:`FeedSnapshot`.

Example:
    >>> from feedrelay.fetcher.rss import parse_feed
    >>> xml = '''<rss version="2.0"><channel><title>News</title>
    ...   <link>https://example.com</link>
    ...   <item><guid>n-1</guid><title>Hello</title></item>
    ... </channel></rss>'''
    >>> snap = parse_feed("https://example.com/rss", xml)
    >>> snap.title, snap.entry_ids()
    ('News', ['n-1'])
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET

from feedrelay.core.exceptions import FetchError
from feedrelay.http.client import HttpClient, HttpClientError
from feedrelay.models.feed import FeedEntry, FeedSnapshot

logger = logging.getLogger(__name__)

ATOM_NS = "http://www.w3.org/2005/Atom"
RDF_NS = "http://www.w3.org/1999/02/22-rdf-syntax-ns#"


def _local(tag: str) -> str:
    """Strip the ``{namespace}`` prefix from an element tag."""
    return tag.rsplit("}", 1)[-1] if tag.startswith("{") else tag


def _child(elem: ET.Element, name: str) -> ET.Element | None:
    """First direct child with the given local name, any namespace."""
    for child in elem:
        if _local(child.tag) == name:
            return child
    return None


def _child_text(elem: ET.Element, name: str) -> str | None:
    """Text of the first non-empty child with the given local name."""
    for child in elem:
        if _local(child.tag) == name and child.text and child.text.strip():
            return child.text.strip()
    return None


def _is_atom(root: ET.Element) -> bool:
    return root.tag == f"{{{ATOM_NS}}}feed" or root.tag == "feed"


def _atom_link(elem: ET.Element) -> str | None:
    """Pick the alternate link of an Atom feed or entry."""
    fallback = None
    for child in elem:
        if _local(child.tag) != "link":
            continue
        href = (child.get("href") or "").strip()
        if not href:
            continue
        if child.get("rel", "alternate") == "alternate":
            return href
        if fallback is None:
            fallback = href
    return fallback


def _entry_id(*candidates: str | None) -> str | None:
    for candidate in candidates:
        if candidate:
            return candidate
    return None


def _parse_atom(url: str, root: ET.Element) -> FeedSnapshot:
    entries: list[FeedEntry] = []
    for elem in root:
        if _local(elem.tag) != "entry":
            continue
        title = _child_text(elem, "title")
        link = _atom_link(elem)
        entry_id = _entry_id(_child_text(elem, "id"), link, title)
        if entry_id is None:
            logger.debug("Skipping Atom entry without id, link or title in %s", url)
            continue
        entries.append(FeedEntry(id=entry_id, title=title, link=link))

    return FeedSnapshot(
        url=url,
        title=_child_text(root, "title"),
        link=_atom_link(root),
        entries=entries,
    )


def _parse_rss(url: str, root: ET.Element) -> FeedSnapshot:
    # RSS 2.0 nests items in <channel>; RSS 1.0 puts them beside it
    channel = _child(root, "channel")
    if channel is None:
        raise ValueError(f"Not an RSS or Atom document (root <{_local(root.tag)}>)")

    items = [elem for elem in channel if _local(elem.tag) == "item"]
    items += [elem for elem in root if _local(elem.tag) == "item"]

    entries: list[FeedEntry] = []
    for item in items:
        title = _child_text(item, "title")
        link = _child_text(item, "link")
        entry_id = _entry_id(
            _child_text(item, "guid"),
            item.get(f"{{{RDF_NS}}}about"),
            link,
            title,
        )
        if entry_id is None:
            logger.debug("Skipping RSS item without guid, link or title in %s", url)
            continue
        entries.append(FeedEntry(id=entry_id, title=title, link=link))

    return FeedSnapshot(
        url=url,
        title=_child_text(channel, "title"),
        link=_child_text(channel, "link"),
        entries=entries,
    )


def parse_feed(url: str, content: str | bytes) -> FeedSnapshot:
    """Parse an RSS or Atom document.

    Entry ids prefer ``guid`` / ``id``, then the entry link, then the title.
    Entries with none of these are dropped since they cannot be deduplicated.

    Raises:
        FetchError: If the document is not well-formed or not a feed.
    """
    try:
        root = ET.fromstring(content)
    except ET.ParseError as e:
        raise FetchError(f"Failed to parse feed XML: {e}", url=url, cause=e) from e

    try:
        if _is_atom(root):
            return _parse_atom(url, root)
        return _parse_rss(url, root)
    except ValueError as e:
        raise FetchError(str(e), url=url, cause=e) from e


class RSSFeedFetcher:
    """Feed fetcher for RSS and Atom feeds over HTTP.

    Args:
        http: Shared HTTP client. One is created (and owned) if omitted.
        timeout: Request timeout in seconds when creating a client.
        user_agent: User-Agent when creating a client.
        max_retries: Retry count when creating a client.

    Example:
        >>> from feedrelay.fetcher.rss import RSSFeedFetcher
        >>> fetcher = RSSFeedFetcher(timeout=10.0)
        >>> fetcher.owns_client
        True
    """

    def __init__(
        self,
        http: HttpClient | None = None,
        *,
        timeout: float = 30.0,
        user_agent: str = "feedrelay/0.1",
        max_retries: int = 2,
    ) -> None:
        self._owns_client = http is None
        self._http = http or HttpClient(
            user_agent=user_agent,
            timeout=timeout,
            max_retries=max_retries,
        )

    @property
    def owns_client(self) -> bool:
        """Whether close() also closes the HTTP client."""
        return self._owns_client

    async def _fetch_xml(self, url: str) -> bytes:
        """Download the raw feed document."""
        return await self._http.get_bytes(url)

    async def fetch(self, url: str) -> FeedSnapshot:
        """Fetch and parse the feed at ``url``.

        Raises:
            FetchError: On any network, HTTP or parse failure.
        """
        try:
            content = await self._fetch_xml(url)
        except HttpClientError as e:
            raise FetchError(f"Failed to fetch feed: {e}", url=url, cause=e) from e

        snapshot = parse_feed(url, content)
        logger.debug("Fetched %s: %d entries", url, len(snapshot.entries))
        return snapshot

    async def close(self) -> None:
        """Close the HTTP client if this fetcher created it."""
        if self._owns_client:
            await self._http.close()
