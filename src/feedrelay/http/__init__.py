"""feedrelay HTTP utilities."""

from feedrelay.http.client import HttpClient, HttpClientError, RateLimitError, parse_retry_after

__all__ = [
    "HttpClient",
    "HttpClientError",
    "RateLimitError",
    "parse_retry_after",
]
