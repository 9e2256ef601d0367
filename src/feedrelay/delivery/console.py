"""Console delivery.

Writes each notice to a stream instead of a chat room, useful for running
the poller without a chat client and for development.

Example:
    >>> import asyncio, io
    >>> from feedrelay.delivery.console import ConsoleDelivery
    >>> out = io.StringIO()
    >>> delivery = ConsoleDelivery(stream=out, show_timestamp=False)
    >>> asyncio.run(delivery.notify("room1", "New post in A: <b>B</b>"))
    >>> out.getvalue()
    'room1: New post in A: <b>B</b>\\n'
"""

from __future__ import annotations

import sys
from datetime import UTC, datetime
from typing import TextIO


class ConsoleDelivery:
    """Delivery backend that prints notices.

    Args:
        stream: Output stream (default sys.stdout).
        show_timestamp: Prefix each line with a UTC timestamp.
    """

    def __init__(
        self,
        stream: TextIO | None = None,
        show_timestamp: bool = True,
    ) -> None:
        self._stream = stream or sys.stdout
        self._show_timestamp = show_timestamp

    async def notify(self, subscriber: str, message: str) -> None:
        """Write one notice line."""
        self._stream.write(self._format(subscriber, message) + "\n")
        self._stream.flush()

    def _format(self, subscriber: str, message: str) -> str:
        parts: list[str] = []
        if self._show_timestamp:
            ts = datetime.now(UTC).strftime("%Y-%m-%d %H:%M:%S")
            parts.append(f"[{ts}]")
        parts.append(f"{subscriber}:")
        parts.append(message)
        return " ".join(parts)
