"""Callback delivery - adapt any async callable to the Delivery protocol."""

from __future__ import annotations

from collections.abc import Awaitable, Callable

NotifyCallback = Callable[[str, str], Awaitable[object]]


class CallbackDelivery:
    """Forward notices to ``callback(subscriber, message)``.

    Lets an external chat client (e.g. a bot's ``send_html_notice``) plug
    in without subclassing.

    Example:
        >>> import asyncio
        >>> sent = []
        >>> async def send(room, html):
        ...     sent.append((room, html))
        >>> asyncio.run(CallbackDelivery(send).notify("room1", "hi"))
        >>> sent
        [('room1', 'hi')]
    """

    def __init__(self, callback: NotifyCallback) -> None:
        self._callback = callback

    async def notify(self, subscriber: str, message: str) -> None:
        await self._callback(subscriber, message)
