"""Tests for feedrelay.fetcher.rss - RSS/Atom fetching and parsing."""

from __future__ import annotations

from unittest.mock import patch

import httpx
import pytest

from feedrelay.core.exceptions import FetchError
from feedrelay.fetcher.rss import RSSFeedFetcher, parse_feed
from feedrelay.http.client import HttpClient, HttpClientError
from feedrelay.protocols.fetcher import FeedFetcher

URL = "https://example.com/feed.xml"

# =============================================================================
# Test Fixtures
# =============================================================================


@pytest.fixture
def sample_rss_xml() -> str:
    """Sample RSS 2.0 feed XML."""
    return """<?xml version="1.0" encoding="UTF-8"?>
    <rss version="2.0" xmlns:atom="http://www.w3.org/2005/Atom">
        <channel>
            <title>Test Feed</title>
            <link>https://example.com</link>
            <atom:link href="https://example.com/feed.xml" rel="self"/>
            <description>A test feed</description>
            <item>
                <title>First Article</title>
                <link>https://example.com/article/1</link>
                <guid>article-001</guid>
            </item>
            <item>
                <title>Second Article</title>
                <link>https://example.com/article/2</link>
                <guid isPermaLink="false">article-002</guid>
            </item>
        </channel>
    </rss>"""


@pytest.fixture
def sample_atom_xml() -> str:
    """Sample Atom feed XML."""
    return """<?xml version="1.0" encoding="UTF-8"?>
    <feed xmlns="http://www.w3.org/2005/Atom">
        <title>Atom Feed</title>
        <link rel="self" href="https://example.com/atom.xml"/>
        <link href="https://example.com"/>
        <entry>
            <title>Atom Entry 1</title>
            <link rel="alternate" href="https://example.com/entry/1"/>
            <id>urn:uuid:entry-001</id>
            <updated>2026-01-01T12:00:00Z</updated>
        </entry>
        <entry>
            <link href="https://example.com/entry/2"/>
        </entry>
    </feed>"""


@pytest.fixture
def sample_rdf_xml() -> str:
    """Sample RSS 1.0 (RDF) feed XML."""
    return """<?xml version="1.0"?>
    <rdf:RDF xmlns:rdf="http://www.w3.org/1999/02/22-rdf-syntax-ns#"
             xmlns="http://purl.org/rss/1.0/">
        <channel rdf:about="https://example.com/">
            <title>RDF Feed</title>
            <link>https://example.com/</link>
        </channel>
        <item rdf:about="https://example.com/r/1">
            <title>RDF Item</title>
            <link>https://example.com/r/1</link>
        </item>
    </rdf:RDF>"""


# =============================================================================
# Parsing
# =============================================================================


class TestParseRSS:
    def test_feed_fields(self, sample_rss_xml: str) -> None:
        snap = parse_feed(URL, sample_rss_xml)

        assert snap.url == URL
        assert snap.title == "Test Feed"
        assert snap.link == "https://example.com"

    def test_entries_in_order(self, sample_rss_xml: str) -> None:
        snap = parse_feed(URL, sample_rss_xml)

        assert snap.entry_ids() == ["article-001", "article-002"]
        assert snap.entries[0].title == "First Article"
        assert snap.entries[0].link == "https://example.com/article/1"

    def test_id_falls_back_to_link_then_title(self) -> None:
        xml = """<rss><channel><title>T</title>
            <item><link>https://e/1</link><title>One</title></item>
            <item><title>Only a title</title></item>
            <item><description>nothing usable</description></item>
        </channel></rss>"""

        snap = parse_feed(URL, xml)

        assert snap.entry_ids() == ["https://e/1", "Only a title"]

    def test_missing_optional_fields(self) -> None:
        xml = "<rss><channel><item><guid>g1</guid></item></channel></rss>"

        snap = parse_feed(URL, xml)

        assert snap.title is None
        assert snap.link is None
        assert snap.entries[0].title is None

    def test_bytes_with_encoding_declaration(self, sample_rss_xml: str) -> None:
        snap = parse_feed(URL, sample_rss_xml.strip().encode("utf-8"))

        assert len(snap.entries) == 2

    def test_rdf(self, sample_rdf_xml: str) -> None:
        snap = parse_feed(URL, sample_rdf_xml)

        assert snap.title == "RDF Feed"
        assert snap.entry_ids() == ["https://example.com/r/1"]


class TestParseAtom:
    def test_feed_fields(self, sample_atom_xml: str) -> None:
        snap = parse_feed(URL, sample_atom_xml)

        assert snap.title == "Atom Feed"
        assert snap.link == "https://example.com"

    def test_entries(self, sample_atom_xml: str) -> None:
        snap = parse_feed(URL, sample_atom_xml)

        assert snap.entry_ids() == ["urn:uuid:entry-001", "https://example.com/entry/2"]
        assert snap.entries[0].link == "https://example.com/entry/1"
        assert snap.entries[1].title is None


class TestParseErrors:
    def test_malformed_xml(self) -> None:
        with pytest.raises(FetchError, match="parse") as exc_info:
            parse_feed(URL, "<rss><channel>")

        assert exc_info.value.url == URL

    def test_not_a_feed(self) -> None:
        with pytest.raises(FetchError, match="Not an RSS or Atom"):
            parse_feed(URL, "<html><body>hi</body></html>")


# =============================================================================
# Fetching
# =============================================================================


class TestRSSFeedFetcher:
    def test_implements_protocol(self) -> None:
        assert isinstance(RSSFeedFetcher(), FeedFetcher)

    async def test_fetch(self, sample_rss_xml: str) -> None:
        fetcher = RSSFeedFetcher()

        with patch.object(fetcher, "_fetch_xml", return_value=sample_rss_xml):
            snap = await fetcher.fetch(URL)

        assert snap.entry_ids() == ["article-001", "article-002"]

    async def test_http_error_becomes_fetch_error(self) -> None:
        fetcher = RSSFeedFetcher()

        with patch.object(fetcher, "_fetch_xml", side_effect=HttpClientError("HTTP 404")):
            with pytest.raises(FetchError, match="HTTP 404") as exc_info:
                await fetcher.fetch(URL)

        assert isinstance(exc_info.value.cause, HttpClientError)

    async def test_fetch_over_http(self, sample_atom_xml: str) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.headers["User-Agent"] == "feedrelay/0.1"
            return httpx.Response(200, content=sample_atom_xml.encode())

        http = HttpClient(transport=httpx.MockTransport(handler))
        fetcher = RSSFeedFetcher(http)

        snap = await fetcher.fetch(URL)
        await http.close()

        assert snap.title == "Atom Feed"
        assert fetcher.owns_client is False

    async def test_close_only_owned_client(self) -> None:
        http = HttpClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        await http.__aenter__()
        fetcher = RSSFeedFetcher(http)

        await fetcher.close()

        assert http._client is not None
        await http.close()
