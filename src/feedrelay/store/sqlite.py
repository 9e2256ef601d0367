"""SQLite subscription store - zero-config persistent storage.

Schema (created on initialize):

    feeds(id INTEGER PRIMARY KEY AUTOINCREMENT, url TEXT NOT NULL UNIQUE)
    entries(feed_id, entry_id, PRIMARY KEY (entry_id, feed_id))
    subscriptions(subscriber, feed_id, PRIMARY KEY (subscriber, feed_id))

Example:
    >>> from feedrelay.store.sqlite import SQLiteSubscriptionStore
    >>>
    >>> # Just pass a path - schema auto-creates!
    >>> store = SQLiteSubscriptionStore("data/rss.db")
    >>> # await store.initialize()
    >>>
    >>> # Or use in-memory for testing
    >>> store = SQLiteSubscriptionStore(":memory:")
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from pathlib import Path

from feedrelay.core.exceptions import NotFoundError, StorageError
from feedrelay.models.subscription import Subscription

logger = logging.getLogger(__name__)

MEMORY_PATH = ":memory:"


class SQLiteSubscriptionStore:
    """SQLite store with auto-schema creation.

    All statements run on one connection, serialized by an asyncio lock;
    each public operation is a single transaction, so resolving a feed id
    and writing against it cannot be split by another call.

    Args:
        path: Database file path, or ":memory:" for in-memory.
        timeout: Lock timeout in seconds (default 30).
    """

    SCHEMA_VERSION = 1

    def __init__(
        self,
        path: str | Path = MEMORY_PATH,
        *,
        timeout: float = 30.0,
    ) -> None:
        self._path = str(path)
        self._timeout = timeout
        self._conn: sqlite3.Connection | None = None
        self._lock = asyncio.Lock()

    @property
    def path(self) -> str:
        """Database location."""
        return self._path

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Cursor]:
        """Get a cursor with automatic commit/rollback."""
        if not self._conn:
            raise StorageError("Store not initialized. Call initialize() first.")
        cursor = self._conn.cursor()
        try:
            yield cursor
            self._conn.commit()
        except sqlite3.Error as e:
            self._conn.rollback()
            raise StorageError(f"SQLite error: {e}") from e
        except Exception:
            self._conn.rollback()
            raise
        finally:
            cursor.close()

    async def initialize(self) -> None:
        """Open the database and create the schema.

        Safe to call multiple times (idempotent).
        """
        if self._conn is not None:
            return
        try:
            if self._path != MEMORY_PATH:
                Path(self._path).parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(self._path, timeout=self._timeout)
            self._conn.row_factory = sqlite3.Row
            if self._path != MEMORY_PATH:
                self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.execute("PRAGMA foreign_keys=ON")
        except (OSError, sqlite3.Error) as e:
            self._conn = None
            raise StorageError(f"Cannot open {self._path}: {e}") from e
        self._create_schema()
        logger.debug("Opened subscription store at %s", self._path)

    def _create_schema(self) -> None:
        with self._transaction() as cursor:
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS feeds (
                    id INTEGER NOT NULL PRIMARY KEY AUTOINCREMENT,
                    url TEXT NOT NULL UNIQUE
                )
            """)
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS entries (
                    feed_id INTEGER NOT NULL,
                    entry_id TEXT NOT NULL,
                    PRIMARY KEY (entry_id, feed_id),
                    FOREIGN KEY (feed_id) REFERENCES feeds(id) ON DELETE CASCADE
                )
            """)
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS subscriptions (
                    subscriber TEXT NOT NULL,
                    feed_id INTEGER NOT NULL,
                    PRIMARY KEY (subscriber, feed_id),
                    FOREIGN KEY (feed_id) REFERENCES feeds(id) ON DELETE CASCADE
                )
            """)
            cursor.execute("CREATE INDEX IF NOT EXISTS idx_entries_feed ON entries(feed_id)")
            cursor.execute(
                "CREATE INDEX IF NOT EXISTS idx_subscriptions_feed ON subscriptions(feed_id)"
            )
            cursor.execute(f"PRAGMA user_version = {self.SCHEMA_VERSION}")

    async def close(self) -> None:
        """Close database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None

    @staticmethod
    def _feed_id(cursor: sqlite3.Cursor, url: str) -> int | None:
        cursor.execute("SELECT id FROM feeds WHERE url = ?", (url,))
        row = cursor.fetchone()
        return row["id"] if row else None

    # --- Subscription Operations ---

    async def add_subscription(self, subscriber: str, url: str) -> None:
        """Subscribe, creating the feed on first use."""
        async with self._lock:
            with self._transaction() as cursor:
                cursor.execute(
                    "INSERT INTO feeds(url) VALUES (?) ON CONFLICT (url) DO NOTHING",
                    (url,),
                )
                feed_id = self._feed_id(cursor, url)
                if feed_id is None:
                    raise StorageError(f"Feed row missing after insert: {url}")
                cursor.execute(
                    "INSERT INTO subscriptions(subscriber, feed_id) VALUES (?, ?) "
                    "ON CONFLICT (subscriber, feed_id) DO NOTHING",
                    (subscriber, feed_id),
                )

    async def remove_subscription(self, subscriber: str, url: str) -> None:
        """Unsubscribe. Unknown feeds and subscriptions are ignored."""
        async with self._lock:
            with self._transaction() as cursor:
                feed_id = self._feed_id(cursor, url)
                if feed_id is None:
                    return
                cursor.execute(
                    "DELETE FROM subscriptions WHERE subscriber = ? AND feed_id = ?",
                    (subscriber, feed_id),
                )

    async def list_subscriptions(self, subscriber: str) -> set[str]:
        """URLs the subscriber follows."""
        async with self._lock:
            with self._transaction() as cursor:
                cursor.execute(
                    "SELECT feeds.url AS url FROM subscriptions "
                    "JOIN feeds ON feeds.id = subscriptions.feed_id "
                    "WHERE subscriber = ?",
                    (subscriber,),
                )
                return {row["url"] for row in cursor.fetchall()}

    async def all_subscriptions(self) -> list[Subscription]:
        """Every (url, subscriber) pair."""
        async with self._lock:
            with self._transaction() as cursor:
                cursor.execute(
                    "SELECT feeds.url AS url, subscriptions.subscriber AS subscriber "
                    "FROM subscriptions JOIN feeds ON feeds.id = subscriptions.feed_id "
                    "ORDER BY feeds.id, subscriptions.subscriber"
                )
                return [
                    Subscription(url=row["url"], subscriber=row["subscriber"])
                    for row in cursor.fetchall()
                ]

    async def subscribers(self, url: str) -> set[str]:
        """Subscribers of one feed."""
        async with self._lock:
            with self._transaction() as cursor:
                cursor.execute(
                    "SELECT subscriber FROM subscriptions "
                    "JOIN feeds ON feeds.id = subscriptions.feed_id WHERE feeds.url = ?",
                    (url,),
                )
                return {row["subscriber"] for row in cursor.fetchall()}

    async def list_feeds(self) -> list[str]:
        """Every known feed URL in creation order."""
        async with self._lock:
            with self._transaction() as cursor:
                cursor.execute("SELECT url FROM feeds ORDER BY id")
                return [row["url"] for row in cursor.fetchall()]

    # --- Known Entry Operations ---

    async def known_entries(self, url: str) -> set[str]:
        """Recorded entry ids for the feed."""
        async with self._lock:
            with self._transaction() as cursor:
                feed_id = self._feed_id(cursor, url)
                if feed_id is None:
                    raise NotFoundError(f"Unknown feed: {url}")
                cursor.execute("SELECT entry_id FROM entries WHERE feed_id = ?", (feed_id,))
                return {row["entry_id"] for row in cursor.fetchall()}

    async def record_entries(self, url: str, ids: Iterable[str]) -> None:
        """Add ids to the feed's known set (existing ids are ignored)."""
        if isinstance(ids, str):
            raise TypeError("ids must be an iterable of entry ids, not a str")
        async with self._lock:
            with self._transaction() as cursor:
                feed_id = self._feed_id(cursor, url)
                if feed_id is None:
                    raise NotFoundError(f"Unknown feed: {url}")
                cursor.executemany(
                    "INSERT INTO entries(feed_id, entry_id) VALUES (?, ?) "
                    "ON CONFLICT (entry_id, feed_id) DO NOTHING",
                    [(feed_id, entry_id) for entry_id in ids],
                )

    # --- Convenience Methods ---

    async def get_stats(self) -> dict[str, int | str]:
        """Row counts per table."""
        async with self._lock:
            with self._transaction() as cursor:
                stats: dict[str, int | str] = {"path": self._path}
                for table in ("feeds", "entries", "subscriptions"):
                    cursor.execute(f"SELECT COUNT(*) FROM {table}")
                    stats[table] = cursor.fetchone()[0]
                return stats
