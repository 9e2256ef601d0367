"""Contract tests shared by every SubscriptionStore backend.

Each test runs against MemorySubscriptionStore and an in-memory
SQLiteSubscriptionStore, so both backends honour the same semantics.
"""

from __future__ import annotations

import asyncio

import pytest

from feedrelay.core.exceptions import NotFoundError
from feedrelay.models.subscription import Subscription
from feedrelay.protocols.store import SubscriptionStore
from feedrelay.store.memory import MemorySubscriptionStore
from feedrelay.store.sqlite import SQLiteSubscriptionStore

FEED_A = "https://a/feed"
FEED_B = "https://b/feed"


@pytest.fixture(params=["memory", "sqlite"])
async def store(request) -> SubscriptionStore:
    """Fresh store for each backend."""
    if request.param == "memory":
        s = MemorySubscriptionStore()
    else:
        s = SQLiteSubscriptionStore(":memory:")
    await s.initialize()
    yield s
    await s.close()


# =============================================================================
# Protocol Compliance
# =============================================================================


class TestProtocol:
    """Both backends satisfy the runtime-checkable protocol."""

    async def test_is_subscription_store(self, store) -> None:
        assert isinstance(store, SubscriptionStore)


# =============================================================================
# Subscriptions
# =============================================================================


class TestAddSubscription:
    """Tests for add_subscription."""

    async def test_add_then_list(self, store) -> None:
        await store.add_subscription("room1", FEED_A)

        assert await store.list_subscriptions("room1") == {FEED_A}

    async def test_add_is_idempotent(self, store) -> None:
        """Subscribing the same pair twice leaves state unchanged."""
        await store.add_subscription("room1", FEED_A)
        before = await store.list_subscriptions("room1")

        await store.add_subscription("room1", FEED_A)

        assert await store.list_subscriptions("room1") == before
        assert await store.all_subscriptions() == [
            Subscription(url=FEED_A, subscriber="room1")
        ]

    async def test_feed_shared_between_subscribers(self, store) -> None:
        """The URL is the feed's key; a second subscriber reuses the feed."""
        await store.add_subscription("room1", FEED_A)
        await store.add_subscription("room2", FEED_A)

        assert await store.list_feeds() == [FEED_A]
        assert await store.subscribers(FEED_A) == {"room1", "room2"}

    async def test_subscriber_with_many_feeds(self, store) -> None:
        await store.add_subscription("room1", FEED_A)
        await store.add_subscription("room1", FEED_B)

        assert await store.list_subscriptions("room1") == {FEED_A, FEED_B}

    async def test_unknown_subscriber_has_no_subscriptions(self, store) -> None:
        assert await store.list_subscriptions("nobody") == set()


class TestRemoveSubscription:
    """Tests for remove_subscription."""

    async def test_remove_existing(self, store) -> None:
        await store.add_subscription("room1", FEED_A)
        await store.add_subscription("room2", FEED_A)

        await store.remove_subscription("room1", FEED_A)

        assert await store.list_subscriptions("room1") == set()
        assert await store.subscribers(FEED_A) == {"room2"}

    async def test_remove_unknown_feed_is_noop(self, store) -> None:
        """Unsubscribing from a never-seen URL is not an error."""
        await store.remove_subscription("room1", "https://never/seen")

        assert await store.list_feeds() == []

    async def test_remove_missing_subscription_is_noop(self, store) -> None:
        await store.add_subscription("room2", FEED_A)

        await store.remove_subscription("room1", FEED_A)

        assert await store.subscribers(FEED_A) == {"room2"}

    async def test_last_unsubscribe_keeps_feed_and_history(self, store) -> None:
        """Removing the last subscriber does not delete the feed or its entries."""
        await store.add_subscription("room1", FEED_A)
        await store.record_entries(FEED_A, ["e1"])

        await store.remove_subscription("room1", FEED_A)

        assert await store.list_feeds() == [FEED_A]
        assert await store.known_entries(FEED_A) == {"e1"}
        assert await store.all_subscriptions() == []

    async def test_resubscribe_reuses_history(self, store) -> None:
        await store.add_subscription("room1", FEED_A)
        await store.record_entries(FEED_A, ["e1", "e2"])
        await store.remove_subscription("room1", FEED_A)

        await store.add_subscription("room3", FEED_A)

        assert await store.known_entries(FEED_A) == {"e1", "e2"}


class TestAllSubscriptions:
    """Tests for all_subscriptions."""

    async def test_empty(self, store) -> None:
        assert await store.all_subscriptions() == []

    async def test_every_pair(self, store) -> None:
        await store.add_subscription("room1", FEED_A)
        await store.add_subscription("room2", FEED_A)
        await store.add_subscription("room1", FEED_B)

        pairs = {(s.url, s.subscriber) for s in await store.all_subscriptions()}

        assert pairs == {(FEED_A, "room1"), (FEED_A, "room2"), (FEED_B, "room1")}

    async def test_snapshot_during_concurrent_writes(self, store) -> None:
        """Each read sees whole subscriptions, never a half-applied one."""
        rooms = [f"room{i}" for i in range(20)]

        results = await asyncio.gather(
            *(store.add_subscription(room, FEED_A) for room in rooms),
            store.all_subscriptions(),
        )

        snapshot = results[-1]
        assert all(s.url == FEED_A for s in snapshot)
        assert {s.subscriber for s in await store.all_subscriptions()} == set(rooms)


# =============================================================================
# Known Entries
# =============================================================================


class TestKnownEntries:
    """Tests for known_entries and record_entries."""

    async def test_new_feed_has_no_entries(self, store) -> None:
        await store.add_subscription("room1", FEED_A)

        assert await store.known_entries(FEED_A) == set()

    async def test_unknown_feed_raises_not_found(self, store) -> None:
        with pytest.raises(NotFoundError):
            await store.known_entries("https://never/seen")

    async def test_record_then_read(self, store) -> None:
        await store.add_subscription("room1", FEED_A)

        await store.record_entries(FEED_A, ["e1", "e2"])

        assert await store.known_entries(FEED_A) == {"e1", "e2"}

    async def test_record_overlapping_ids(self, store) -> None:
        """Recording ids that are already known never fails."""
        await store.add_subscription("room1", FEED_A)
        await store.record_entries(FEED_A, ["e1", "e2"])

        await store.record_entries(FEED_A, ["e2", "e3", "e3"])

        assert await store.known_entries(FEED_A) == {"e1", "e2", "e3"}

    async def test_record_empty(self, store) -> None:
        await store.add_subscription("room1", FEED_A)

        await store.record_entries(FEED_A, [])

        assert await store.known_entries(FEED_A) == set()

    async def test_entries_are_per_feed(self, store) -> None:
        """The same entry id in two feeds is tracked separately."""
        await store.add_subscription("room1", FEED_A)
        await store.add_subscription("room1", FEED_B)

        await store.record_entries(FEED_A, ["shared"])

        assert await store.known_entries(FEED_A) == {"shared"}
        assert await store.known_entries(FEED_B) == set()

    async def test_record_for_unknown_feed_raises(self, store) -> None:
        with pytest.raises(NotFoundError):
            await store.record_entries("https://never/seen", ["e1"])

    async def test_record_rejects_bare_string(self, store) -> None:
        """A single id passed as a str is not split into characters."""
        await store.add_subscription("room1", FEED_A)

        with pytest.raises(TypeError, match="not a str"):
            await store.record_entries(FEED_A, "e1")

        assert await store.known_entries(FEED_A) == set()

    async def test_record_accepts_generator(self, store) -> None:
        await store.add_subscription("room1", FEED_A)

        await store.record_entries(FEED_A, (f"e{i}" for i in range(3)))

        assert await store.known_entries(FEED_A) == {"e0", "e1", "e2"}
