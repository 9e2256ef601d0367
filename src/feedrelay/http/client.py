"""Async HTTP client for downloading feed documents.

Wraps one lazily created ``httpx.AsyncClient``. Every attempt is bounded by
the timeout; server errors, timeouts and transport errors are retried with
exponential backoff, and a 429 waits for the server's Retry-After.

Example:
    >>> from feedrelay.http import HttpClient
    >>>
    >>> async with HttpClient(timeout=10.0) as client:
    ...     xml = await client.get_text("https://example.com/feed.xml")
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)

RETRYABLE_STATUS = frozenset({500, 502, 503, 504})
DEFAULT_RETRY_AFTER = 10.0
MAX_RETRY_AFTER = 300.0
FEED_ACCEPT = (
    "application/rss+xml, application/atom+xml, application/xml;q=0.9, text/xml;q=0.9, */*;q=0.1"
)


class HttpClientError(Exception):
    """A request failed for good (non-retryable status or retries used up)."""


class RateLimitError(HttpClientError):
    """The server still answered 429 on the last attempt."""

    def __init__(self, retry_after: float) -> None:
        super().__init__(f"HTTP 429: rate limited, retry after {retry_after:g}s")
        self.retry_after = retry_after


def parse_retry_after(value: str | None) -> float:
    """Seconds to wait according to a Retry-After header.

    Only the delta-seconds form is understood; anything else falls back to
    a default. The result is clamped to ``[0, MAX_RETRY_AFTER]``.

    Example:
        >>> parse_retry_after("5")
        5.0
        >>> parse_retry_after(None)
        10.0
        >>> parse_retry_after("Wed, 21 Oct 2015 07:28:00 GMT")
        10.0
    """
    try:
        seconds = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return DEFAULT_RETRY_AFTER
    return min(max(seconds, 0.0), MAX_RETRY_AFTER)


class HttpClient:
    """Feed download client with timeouts and retries.

    Args:
        user_agent: User-Agent header sent with every request.
        timeout: Per-attempt timeout in seconds.
        max_retries: Retries after the first attempt.
        backoff: Base delay; attempt ``n`` waits ``backoff * 2**n`` seconds.
        headers: Extra default headers.
        transport: Custom httpx transport (tests use ``httpx.MockTransport``).
    """

    def __init__(
        self,
        user_agent: str = "feedrelay/0.1",
        timeout: float = 30.0,
        max_retries: int = 2,
        backoff: float = 1.0,
        headers: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._timeout = httpx.Timeout(timeout)
        self._max_retries = max_retries
        self._backoff = backoff
        self._transport = transport
        self._headers = {"User-Agent": user_agent, "Accept": FEED_ACCEPT, **(headers or {})}
        self._client: httpx.AsyncClient | None = None

    def _open(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                headers=self._headers,
                timeout=self._timeout,
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the underlying connection pool."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> HttpClient:
        self._open()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Send a request, retrying transient failures.

        Raises:
            RateLimitError: If the last attempt was answered with 429.
            HttpClientError: For any other failure.
        """
        client = self._open()
        attempts = self._max_retries + 1

        for attempt in range(attempts):
            last = attempt == attempts - 1
            try:
                response = await client.request(method, url, **kwargs)
            except httpx.TimeoutException as e:
                if last:
                    raise HttpClientError(f"Request timeout: {url}") from e
                delay, reason = self._backoff * 2**attempt, "timeout"
            except httpx.RequestError as e:
                if last:
                    raise HttpClientError(f"Request failed: {url}: {e!r}") from e
                delay, reason = self._backoff * 2**attempt, type(e).__name__
            else:
                status = response.status_code
                if status == 429:
                    retry_after = parse_retry_after(response.headers.get("Retry-After"))
                    if last:
                        raise RateLimitError(retry_after)
                    delay, reason = retry_after, "HTTP 429"
                elif status in RETRYABLE_STATUS and not last:
                    delay, reason = self._backoff * 2**attempt, f"HTTP {status}"
                elif response.is_error:
                    raise HttpClientError(f"HTTP {status} {response.reason_phrase}: {url}")
                else:
                    return response

            logger.debug("Retrying %s in %.1fs (%s)", url, delay, reason)
            await asyncio.sleep(delay)

        raise HttpClientError(f"No attempts made for {url}")

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        """GET with retries."""
        return await self._request("GET", url, **kwargs)

    async def get_text(self, url: str, **kwargs: Any) -> str:
        response = await self.get(url, **kwargs)
        return response.text

    async def get_bytes(self, url: str, **kwargs: Any) -> bytes:
        """Raw response body."""
        response = await self.get(url, **kwargs)
        return response.content


__all__ = [
    "HttpClient",
    "HttpClientError",
    "RateLimitError",
    "parse_retry_after",
]
