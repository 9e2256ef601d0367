"""Store factory - build a subscription store from a connection string.

Usage:
    from feedrelay.store import create_store

    store = create_store("sqlite:///data/rss.db")   # SQLite file
    store = create_store("./data/")                 # directory -> ./data/rss.db
    store = create_store("memory://")               # in-memory (tests)
"""

from __future__ import annotations

import os
from typing import Literal

from feedrelay.core.exceptions import ConfigurationError
from feedrelay.protocols.store import SubscriptionStore

StoreType = Literal["memory", "sqlite"]

DEFAULT_DB_NAME = "rss.db"


def detect_store_type(connection_string: str) -> StoreType:
    """Detect store type from connection string.

    Example:
        >>> detect_store_type("memory://")
        'memory'
        >>> detect_store_type("sqlite:///data/rss.db")
        'sqlite'
        >>> detect_store_type("./data/rss.db")
        'sqlite'
    """
    if connection_string.startswith("memory://"):
        return "memory"

    if connection_string.startswith("sqlite://"):
        return "sqlite"

    if "://" in connection_string:
        scheme = connection_string.split("://", 1)[0]
        raise ConfigurationError(f"Unsupported storage scheme: {scheme!r}")

    # Plain file paths are SQLite databases
    return "sqlite"


def sqlite_path(connection_string: str) -> str:
    """Extract the database path, appending rss.db for directories.

    Example:
        >>> sqlite_path("sqlite:///data/rss.db")
        'data/rss.db'
        >>> sqlite_path("sqlite:///:memory:")
        ':memory:'
        >>> sqlite_path("state/")
        'state/rss.db'
    """
    if connection_string.startswith("sqlite:///"):
        db_path = connection_string[len("sqlite:///"):]
    elif connection_string.startswith("sqlite://"):
        db_path = connection_string[len("sqlite://"):]
    else:
        db_path = connection_string

    if not db_path:
        raise ConfigurationError("SQLite connection string has no path")

    if db_path != ":memory:" and (db_path.endswith(("/", os.sep)) or os.path.isdir(db_path)):
        db_path = os.path.join(db_path, DEFAULT_DB_NAME)
    return db_path


def create_store(connection_string: str) -> SubscriptionStore:
    """Create a subscription store from a connection string.

    Args:
        connection_string: ``memory://``, ``sqlite:///path/to/rss.db``,
            or a plain file/directory path.

    Returns:
        An uninitialized store; call ``initialize()`` before use.

    Raises:
        ConfigurationError: If the scheme is not supported.
    """
    store_type = detect_store_type(connection_string)

    if store_type == "memory":
        from feedrelay.store.memory import MemorySubscriptionStore

        return MemorySubscriptionStore()

    from feedrelay.store.sqlite import SQLiteSubscriptionStore

    return SQLiteSubscriptionStore(sqlite_path(connection_string))
