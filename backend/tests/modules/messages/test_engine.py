"""Tests for modules/messages/engine.py."""

import asyncio

import pytest

from shared.exceptions import AuthorizationError, FetchError, StoreWriteError
from modules.messages.engine import MessageSyncEngine
from modules.messages.exceptions import EmptyMessageError, MessageTooLongError
from modules.messages.models import MessagePayload
from modules.realtime.models import ChangeEvent, ChangeType

from tests.fakes import (
    FakePushChannel,
    InMemoryMessageStore,
    create_mock_message_data,
    insert_event,
    make_message,
)


@pytest.fixture
def store():
    return InMemoryMessageStore([
        make_message("m1", "alice", "bob", seconds=1, content="hi bob"),
        make_message("m2", "bob", "alice", seconds=2, content="hi alice"),
        make_message("other", "bob", "carol", seconds=3, content="not ours"),
    ])


@pytest.fixture
def engine(store):
    return MessageSyncEngine("alice", "bob", store, max_message_length=20)


def ids(engine: MessageSyncEngine) -> list[str]:
    return [m.id for m in engine.messages]


class TestLoadConversation:
    @pytest.mark.asyncio
    async def test_loads_ordered_pair_history(self, engine):
        """Should load only this pair's messages, oldest first."""
        await engine.load_conversation()
        assert ids(engine) == ["m1", "m2"]
        assert engine.loaded

    @pytest.mark.asyncio
    async def test_fetch_error_keeps_previous_state(self, engine, store):
        """A failed re-fetch leaves the log as it was."""
        await engine.load_conversation()
        store.fail_read = FetchError("offline")

        with pytest.raises(FetchError):
            await engine.load_conversation()

        assert ids(engine) == ["m1", "m2"]

    @pytest.mark.asyncio
    async def test_notifies_listeners(self, engine):
        """Listeners run after the log changes."""
        calls = []
        engine.add_listener(lambda e: calls.append(len(e.messages)))
        await engine.load_conversation()
        assert calls == [2]


class TestSendMessage:
    @pytest.mark.asyncio
    async def test_rejects_empty_payload(self, engine):
        """Whitespace-only text without attachment is rejected locally."""
        await engine.load_conversation()
        with pytest.raises(EmptyMessageError):
            await engine.send_message(MessagePayload(text="   "))
        assert ids(engine) == ["m1", "m2"]

    @pytest.mark.asyncio
    async def test_rejects_too_long_text(self, engine):
        """Text over the limit is a validation error."""
        with pytest.raises(MessageTooLongError):
            await engine.send_message(MessagePayload(text="x" * 21))

    @pytest.mark.asyncio
    async def test_attachment_only_is_allowed(self, engine, store):
        """An image with no text is a valid message."""
        await engine.load_conversation()
        sent = await engine.send_message(MessagePayload(image_url="https://cdn/x.png"))
        assert sent.image_url == "https://cdn/x.png"
        assert sent.id in store.rows

    @pytest.mark.asyncio
    async def test_optimistic_entry_visible_before_confirmation(self, engine, store):
        """The temp entry is in the log and the draft is cleared before the store answers."""
        await engine.load_conversation()
        store.insert_gate = asyncio.Event()
        engine.draft = MessagePayload(text="typing")

        task = asyncio.create_task(engine.send_message(MessagePayload(text="hey")))
        await asyncio.sleep(0)

        pending = engine.messages[-1]
        assert pending.pending is True
        assert pending.id.startswith("temp-")
        assert pending.content == "hey"
        assert engine.draft == MessagePayload()
        assert engine.in_flight == 1

        store.insert_gate.set()
        confirmed = await task

        assert ids(engine) == ["m1", "m2", confirmed.id]
        assert engine.messages[-1].pending is False
        assert engine.in_flight == 0

    @pytest.mark.asyncio
    async def test_confirmation_replaces_in_place(self, engine):
        """Confirmation swaps the temp entry without duplicating or reordering."""
        await engine.load_conversation()
        confirmed = await engine.send_message(MessagePayload(text="one"))

        assert len(engine.messages) == 3
        assert [m.id for m in engine.messages if m.id.startswith("temp-")] == []
        assert engine.messages[-1] == confirmed

    @pytest.mark.asyncio
    async def test_failed_write_rolls_back(self, engine, store):
        """A rejected write leaves the log identical to before the call."""
        await engine.load_conversation()
        before = engine.messages
        store.fail_insert = AuthorizationError("nope")

        with pytest.raises(AuthorizationError):
            await engine.send_message(MessagePayload(text="denied"))

        assert engine.messages == before
        assert engine.in_flight == 0

    @pytest.mark.asyncio
    async def test_rollback_only_removes_own_entry(self, engine, store):
        """Messages that arrived while the write was in flight survive its rollback."""
        await engine.load_conversation()
        store.insert_gate = asyncio.Event()
        store.fail_insert = StoreWriteError("boom")

        task = asyncio.create_task(engine.send_message(MessagePayload(text="lost")))
        await asyncio.sleep(0)
        engine.on_peer_message_arrived(make_message("m3", "bob", "alice", seconds=5))
        store.insert_gate.set()

        with pytest.raises(StoreWriteError):
            await task
        assert ids(engine) == ["m1", "m2", "m3"]

    @pytest.mark.asyncio
    async def test_echo_before_confirmation_is_not_duplicated(self, engine, store):
        """If the push echo lands before the insert returns, only one copy remains."""
        await engine.load_conversation()
        store.insert_gate = asyncio.Event()

        task = asyncio.create_task(engine.send_message(MessagePayload(text="race")))
        await asyncio.sleep(0)

        # The store will assign msg-1 at clock 1000.
        echo = make_message("msg-1", "alice", "bob", seconds=1000, content="race")
        engine.on_peer_message_arrived(echo)
        store.insert_gate.set()
        await task

        assert ids(engine).count("msg-1") == 1
        assert not any(m.pending for m in engine.messages)

    @pytest.mark.asyncio
    async def test_concurrent_sends_settle_independently(self, engine, store):
        """Each confirmation matches only its own temp id."""
        await engine.load_conversation()
        first, second = await asyncio.gather(
            engine.send_message(MessagePayload(text="a")),
            engine.send_message(MessagePayload(text="b")),
        )
        assert sorted(m.content for m in engine.messages[-2:]) == ["a", "b"]
        assert {first.id, second.id} <= set(ids(engine))
        assert engine.in_flight == 0


class TestPeerMessages:
    @pytest.mark.asyncio
    async def test_self_echo_is_ignored(self, engine):
        """A message whose id is already present does not change the log."""
        await engine.load_conversation()
        sent = await engine.send_message(MessagePayload(text="echo"))

        assert engine.on_peer_message_arrived(sent) is False
        assert len(engine.messages) == 3

    def test_out_of_order_arrival_is_sorted(self, engine):
        """Delivered as (t2, t1), the log is still [t1, t2]."""
        engine.on_peer_message_arrived(make_message("late", "bob", "alice", seconds=20))
        engine.on_peer_message_arrived(make_message("early", "bob", "alice", seconds=10))
        assert ids(engine) == ["early", "late"]

    def test_other_conversation_is_ignored(self, engine):
        """Messages of another pair never enter this log."""
        assert engine.on_peer_message_arrived(make_message("x", "bob", "carol")) is False
        assert engine.messages == []

    def test_apply_insert_event(self, engine):
        """INSERT push events go through the arrival path."""
        engine.apply_change(insert_event(create_mock_message_data("m9", "bob", "alice", seconds=9)))
        assert ids(engine) == ["m9"]

    def test_apply_update_sets_read_receipt(self, engine):
        """UPDATE push events replace the stored row."""
        engine.on_peer_message_arrived(make_message("m1", "alice", "bob", seconds=1))
        row = create_mock_message_data("m1", "alice", "bob", seconds=1, read_at="2025-06-28T13:00:00+00:00")
        engine.apply_change(ChangeEvent(type=ChangeType.UPDATE, table="direct_messages", record=row))
        assert engine.messages[0].is_read

    def test_apply_delete_removes(self, engine):
        """DELETE push events remove by id."""
        engine.on_peer_message_arrived(make_message("m1", "alice", "bob", seconds=1))
        engine.apply_change(ChangeEvent(type=ChangeType.DELETE, table="direct_messages", old_record={"id": "m1"}))
        assert engine.messages == []

    def test_malformed_row_is_dropped(self, engine):
        """A row missing required fields is ignored without raising."""
        engine.apply_change(insert_event({"id": "broken"}))
        assert engine.messages == []


class TestMarkRead:
    @pytest.mark.asyncio
    async def test_marks_peer_messages_only(self, engine):
        """Only messages from the peer to self are marked."""
        await engine.load_conversation()
        changed = await engine.mark_read()

        assert changed == 1
        by_id = {m.id: m for m in engine.messages}
        assert by_id["m2"].is_read
        assert not by_id["m1"].is_read

    @pytest.mark.asyncio
    async def test_second_call_is_a_no_op(self, engine, store):
        """Calling twice writes read_at at most once per message."""
        await engine.load_conversation()
        await engine.mark_read()
        first_read_at = {m.id: m.read_at for m in engine.messages}

        changed = await engine.mark_read()

        assert changed == 0
        assert store.mark_read_calls == 1
        assert store.read_writes == 1
        assert {m.id: m.read_at for m in engine.messages} == first_read_at


class TestClearConversation:
    @pytest.mark.asyncio
    async def test_clears_local_and_store(self, engine, store):
        """Both the log and the pair's rows are gone; other pairs are untouched."""
        await engine.load_conversation()
        deleted = await engine.clear_conversation()

        assert deleted == 2
        assert engine.messages == []
        assert list(store.rows) == ["other"]

    @pytest.mark.asyncio
    async def test_local_clear_is_unconditional(self, engine, store):
        """The log is cleared even when the store delete fails."""
        await engine.load_conversation()

        async def failing_delete(self_id, peer_id):
            raise StoreWriteError("boom")

        store.delete_conversation = failing_delete
        with pytest.raises(StoreWriteError):
            await engine.clear_conversation()
        assert engine.messages == []


class TestListen:
    @pytest.mark.asyncio
    async def test_subscribes_both_directions(self, engine):
        """One binding per direction of the conversation."""
        channel = FakePushChannel()
        await engine.listen(channel)

        subscription = channel.open_subscriptions[0]
        filters = sorted(b.filter for b in subscription.bindings)
        assert filters == ["receiver_id=eq.alice", "sender_id=eq.alice"]
        assert engine.listening

    @pytest.mark.asyncio
    async def test_relisten_closes_previous(self, engine):
        """A second listen() releases the first subscription."""
        channel = FakePushChannel()
        await engine.listen(channel)
        await engine.listen(channel)
        assert len(channel.open_subscriptions) == 1

    @pytest.mark.asyncio
    async def test_resync_backfills_missed_messages(self, engine, store):
        """After a reconnect the log is re-fetched."""
        channel = FakePushChannel()
        await engine.listen(channel)
        await engine.load_conversation()
        store.rows["m5"] = make_message("m5", "bob", "alice", seconds=5)

        await channel.reconnect()

        assert ids(engine) == ["m1", "m2", "m5"]

    @pytest.mark.asyncio
    async def test_close_stops_deliveries(self, engine):
        """No events reach the engine once closed."""
        channel = FakePushChannel()
        await engine.listen(channel)
        await engine.close()

        delivered = channel.emit(insert_event(create_mock_message_data("m9", "bob", "alice")))
        assert delivered == 0
        assert engine.messages == []
