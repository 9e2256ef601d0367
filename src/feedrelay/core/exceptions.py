"""Custom exceptions.

feedrelay uses a small hierarchy of exceptions. Only store errors are meant
to reach user-facing callers; fetch and delivery errors are contained inside
a poll cycle.

Example:
    >>> from feedrelay.core.exceptions import StorageError, FeedRelayError
    >>> isinstance(StorageError("db error"), FeedRelayError)
    True
    >>> try:
    ...     raise NotFoundError("https://example.com/feed")
    ... except FeedRelayError as e:
    ...     print(f"Caught: {type(e).__name__}")
    Caught: NotFoundError
"""

from __future__ import annotations


class FeedRelayError(Exception):
    """Base exception for feedrelay.

    Example:
        >>> from feedrelay.core.exceptions import FeedRelayError
        >>> str(FeedRelayError("something went wrong"))
        'something went wrong'
    """


class StorageError(FeedRelayError):
    """Subscription store operation failed (I/O or constraint failure)."""


class NotFoundError(FeedRelayError):
    """Requested feed is not known to the store.

    Example:
        >>> from feedrelay.core.exceptions import NotFoundError
        >>> raise NotFoundError("feed never subscribed")  # doctest: +IGNORE_EXCEPTION_DETAIL
        Traceback (most recent call last):
        NotFoundError: feed never subscribed
    """


class FetchError(FeedRelayError):
    """Feed could not be fetched or parsed.

    Example:
        >>> from feedrelay.core.exceptions import FetchError
        >>> err = FetchError("Connection failed", url="https://a/feed")
        >>> err.url
        'https://a/feed'
    """

    def __init__(
        self,
        message: str,
        url: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.cause = cause


class DeliveryError(FeedRelayError):
    """A single subscriber notification failed."""

    def __init__(
        self,
        message: str,
        subscriber: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.subscriber = subscriber
        self.cause = cause


class ConfigurationError(FeedRelayError):
    """Configuration is invalid.

    Example:
        >>> from feedrelay.core.exceptions import ConfigurationError
        >>> raise ConfigurationError("unknown storage scheme")  # doctest: +IGNORE_EXCEPTION_DETAIL
        Traceback (most recent call last):
        ConfigurationError: unknown storage scheme
    """
