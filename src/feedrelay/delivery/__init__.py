"""Delivery backends."""

from feedrelay.delivery.callback import CallbackDelivery
from feedrelay.delivery.console import ConsoleDelivery

__all__ = ["CallbackDelivery", "ConsoleDelivery"]
