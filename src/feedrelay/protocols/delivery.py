"""Delivery protocol.

Defines the outbound side: sending one rendered notice to one subscriber
(a chat room, a webhook, a console).

Example:
    >>> from feedrelay.protocols.delivery import Delivery
    >>> hasattr(Delivery, "notify")
    True
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Delivery(Protocol):
    """Delivery backend protocol."""

    async def notify(self, subscriber: str, message: str) -> None:
        """Send ``message`` to ``subscriber``. Raises on failure."""
        ...
