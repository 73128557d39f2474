"""Tests for modules/notifications."""

from datetime import timedelta

import pytest

from shared.exceptions import StoreWriteError
from modules.notifications.models import NotificationCategory, NotificationCounts
from modules.notifications.service import NotificationCenter
from modules.realtime.models import ChangeEvent, ChangeType

from tests.fakes import FakePushChannel, InMemoryNotificationStore, insert_event


@pytest.fixture
def store():
    return InMemoryNotificationStore(messages=2, friend_requests=1, posts=3, chat=0)


@pytest.fixture
def channel():
    return FakePushChannel()


@pytest.fixture
def center(store, channel):
    return NotificationCenter("me", store, channel)


class TestNotificationCounts:
    def test_total_and_helpers(self):
        counts = NotificationCounts(messages=1, posts=2)
        assert counts.total == 3
        assert counts.incremented(NotificationCategory.CHAT).chat == 1
        assert counts.cleared(NotificationCategory.POSTS).posts == 0


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_start_seeds_and_subscribes(self, center, store, channel):
        await center.start()

        assert center.counts == NotificationCounts(messages=2, friend_requests=1, posts=3, chat=0)
        assert len(channel.open_subscriptions) == 4
        window = store.since["posts"] - store.since["chat"]
        assert window == -timedelta(hours=23)

    @pytest.mark.asyncio
    async def test_stop_releases_channels(self, center, channel):
        await center.start()
        await center.stop()
        await center.stop()
        assert channel.open_subscriptions == []
        assert not center.running

    @pytest.mark.asyncio
    async def test_reconnect_reseeds_counts(self, center, store, channel):
        """Counts missed while the channel was down come back from the store."""
        await center.start()
        store.seed["messages"] = 5

        await channel.reconnect()

        assert center.counts.messages == 5


class TestEvents:
    @pytest.mark.asyncio
    async def test_message_to_me_counts_once(self, center, channel):
        await center.start()
        channel.emit(insert_event({"id": "m", "sender_id": "bob", "receiver_id": "me"}))
        assert center.counts.messages == 3

    def test_message_to_someone_else_is_ignored(self, center):
        event = insert_event({"id": "m", "sender_id": "bob", "receiver_id": "carol"})
        assert center.on_event(NotificationCategory.MESSAGES, event) is False
        assert center.counts.messages == 0

    def test_own_posts_are_ignored(self, center):
        own = insert_event({"id": "p", "author_id": "me"}, table="posts")
        other = insert_event({"id": "p2", "author_id": "bob"}, table="posts")
        assert center.on_event(NotificationCategory.POSTS, own) is False
        assert center.on_event(NotificationCategory.POSTS, other) is True
        assert center.counts.posts == 1

    def test_chat_from_others_counts(self, center):
        center.on_event(NotificationCategory.CHAT, insert_event({"author_id": "bob"}, table="messages"))
        assert center.counts.chat == 1

    def test_updates_do_not_count(self, center):
        event = ChangeEvent(type=ChangeType.UPDATE, table="friend_requests", record={"receiver_id": "me"})
        assert center.on_event(NotificationCategory.FRIEND_REQUESTS, event) is False

    def test_subscribe_and_unsubscribe(self, center):
        seen = []
        unsubscribe = center.subscribe(seen.append)
        center.on_event(NotificationCategory.CHAT, insert_event({"author_id": "bob"}, table="messages"))
        unsubscribe()
        center.on_event(NotificationCategory.CHAT, insert_event({"author_id": "bob"}, table="messages"))
        assert [c.chat for c in seen] == [1]


class TestClearing:
    @pytest.mark.asyncio
    async def test_clear_one_category(self, center):
        await center.refresh_counts()
        center.clear(NotificationCategory.POSTS)
        assert center.counts.posts == 0
        assert center.counts.messages == 2

    @pytest.mark.asyncio
    async def test_mark_messages_as_read(self, center, store):
        await center.refresh_counts()
        await center.mark_messages_as_read()
        assert center.counts.messages == 0
        assert store.mark_calls == 1

    @pytest.mark.asyncio
    async def test_mark_messages_as_read_failure_keeps_badge_cleared(self, center, store):
        """The optimistic clear is not rolled back; the error still surfaces."""
        await center.refresh_counts()
        store.fail_mark = StoreWriteError("boom")

        with pytest.raises(StoreWriteError):
            await center.mark_messages_as_read()
        assert center.counts.messages == 0
