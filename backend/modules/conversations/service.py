"""
Conversation Index.

A derived, sorted list of one entry per friend with the most recent
message. It has no write path: every change comes from re-reading the
message store or from pushed row changes.
"""

import asyncio
import logging
from typing import Callable, Optional

from pydantic import ValidationError as ModelValidationError

from modules.friends.interfaces import IFriendsService
from modules.messages.interfaces import IMessageStore
from modules.messages.repository import map_message_row
from modules.realtime.interfaces import IPushChannel, ISubscription, ErrorHandler
from modules.realtime.models import ChangeBinding, ChangeEvent, ChangeType

from .models import Conversation, sort_conversations

logger = logging.getLogger(__name__)

Listener = Callable[[list[Conversation]], None]


class ConversationIndex:
    """Per-friend conversation summaries for one signed-in user."""

    def __init__(
        self,
        self_id: str,
        friends_service: IFriendsService,
        message_store: IMessageStore,
    ):
        self.self_id = self_id
        self._friends = friends_service
        self._store = message_store
        self._entries: list[Conversation] = []
        self._listeners: list[Listener] = []
        self._subscription: Optional[ISubscription] = None
        self._tasks: set[asyncio.Task] = set()

    @property
    def conversations(self) -> list[Conversation]:
        return list(self._entries)

    def get(self, friend_id: str) -> Optional[Conversation]:
        for entry in self._entries:
            if entry.friend.id == friend_id:
                return entry
        return None

    def add_listener(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def _set(self, entries: list[Conversation]) -> None:
        self._entries = sort_conversations(entries)
        for listener in list(self._listeners):
            listener(self.conversations)

    async def refresh(self) -> list[Conversation]:
        """
        Rebuild from the friend list and each friend's latest message.

        The latest-message reads run concurrently. Any failure propagates
        and the previous entries stay in place.
        """
        friends = await self._friends.list_friends(self.self_id)
        latest = await asyncio.gather(
            *(self._store.latest_between(self.self_id, friend.id) for friend in friends)
        )
        self._set([
            Conversation(friend=friend, last_message=message)
            for friend, message in zip(friends, latest)
        ])
        return self.conversations

    async def on_friends_changed(self) -> None:
        await self.refresh()

    async def refresh_friend(self, friend_id: str) -> None:
        """Re-read the latest message of one conversation."""
        entry = self.get(friend_id)
        if entry is None:
            return
        message = await self._store.latest_between(self.self_id, friend_id)
        self._set([
            e.model_copy(update={"last_message": message}) if e.friend.id == friend_id else e
            for e in self._entries
        ])

    async def apply_change(self, event: ChangeEvent) -> None:
        """Fold one pushed row change into the index."""
        if event.table == "friendships":
            await self.on_friends_changed()
            return
        if event.table != "direct_messages":
            return

        try:
            message = map_message_row(event.row) if event.type != ChangeType.DELETE else None
        except (KeyError, ValueError, ModelValidationError) as e:
            logger.debug("Dropping malformed direct_messages push row: %s", e)
            return

        if event.type == ChangeType.DELETE:
            row = event.old_record
            friend_id = self._friend_of(row.get("sender_id"), row.get("receiver_id"))
            if friend_id is None:
                # Delete events may only carry the primary key.
                affected = [
                    e.friend.id for e in self._entries
                    if e.last_message is not None and e.last_message.id == str(row.get("id"))
                ]
                friend_id = affected[0] if affected else None
            if friend_id is not None:
                await self.refresh_friend(friend_id)
            return

        friend_id = self._friend_of(message.sender_id, message.receiver_id)
        entry = self.get(friend_id) if friend_id else None
        if entry is None:
            return
        current = entry.last_message
        if event.type == ChangeType.UPDATE and (current is None or current.id != message.id):
            return
        if event.type == ChangeType.INSERT and current is not None and current.sort_key > message.sort_key:
            return
        self._set([
            e.model_copy(update={"last_message": message}) if e.friend.id == friend_id else e
            for e in self._entries
        ])

    def _friend_of(self, sender_id: Optional[str], receiver_id: Optional[str]) -> Optional[str]:
        if sender_id == self.self_id:
            return receiver_id
        if receiver_id == self.self_id:
            return sender_id
        return None

    async def listen(self, channel: IPushChannel, on_error: Optional[ErrorHandler] = None) -> None:
        """Subscribe to message and friendship changes involving self."""
        await self.close()
        bindings = [
            ChangeBinding.eq("direct_messages", "sender_id", self.self_id),
            ChangeBinding.eq("direct_messages", "receiver_id", self.self_id),
            ChangeBinding.eq("friendships", "user1_id", self.self_id),
            ChangeBinding.eq("friendships", "user2_id", self.self_id),
        ]
        self._subscription = await channel.subscribe(
            f"conversations:{self.self_id}",
            bindings,
            self._on_event,
            on_resync=self.refresh,
            on_error=on_error,
        )

    def _on_event(self, event: ChangeEvent) -> None:
        task = asyncio.get_running_loop().create_task(self._apply_logged(event))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _apply_logged(self, event: ChangeEvent) -> None:
        try:
            await self.apply_change(event)
        except Exception:
            logger.exception("Failed to update conversation index for %s", event.type.value)

    async def close(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()
        if self._subscription is not None:
            subscription, self._subscription = self._subscription, None
            await subscription.close()
