"""Subscription store implementations.

All stores auto-create their schema on initialize().

Quick Start:
    from feedrelay.store import create_store

    store = create_store("sqlite:///data/rss.db")
    await store.initialize()
"""

from feedrelay.store.factory import create_store, detect_store_type
from feedrelay.store.memory import MemorySubscriptionStore
from feedrelay.store.sqlite import SQLiteSubscriptionStore

__all__ = [
    "MemorySubscriptionStore",
    "SQLiteSubscriptionStore",
    "create_store",
    "detect_store_type",
]
