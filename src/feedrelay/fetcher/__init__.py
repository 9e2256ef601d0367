"""Feed fetchers."""

from feedrelay.fetcher.rss import RSSFeedFetcher, parse_feed

__all__ = ["RSSFeedFetcher", "parse_feed"]
