"""
Shared chat room.

Everyone signed in reads and writes the same room. Sending is not
optimistic: a line appears once the store has accepted it, either from
the insert response or from its push echo, whichever comes first.
"""

import logging
from typing import Callable, Optional

from modules.realtime.interfaces import IPushChannel, ISubscription, ErrorHandler
from modules.realtime.models import ChangeBinding, ChangeEvent, ChangeType

from .exceptions import ChatMessageTooLongError, EmptyChatMessageError
from .interfaces import IChatStore
from .models import ChatMessage
from .repository import TABLE, map_chat_row

logger = logging.getLogger(__name__)

Listener = Callable[[list[ChatMessage]], None]


class ChatRoom:
    """The shared room as seen by one user."""

    def __init__(
        self,
        user_id: str,
        author_name: str,
        store: IChatStore,
        max_length: int = 200,
        history_limit: int = 100,
    ):
        self.user_id = user_id
        self.author_name = author_name
        self._store = store
        self._max_length = max_length
        self._history_limit = history_limit
        self._messages: dict[str, ChatMessage] = {}
        self._listeners: list[Listener] = []
        self._subscription: Optional[ISubscription] = None

    @property
    def messages(self) -> list[ChatMessage]:
        """Messages oldest first."""
        ordered = sorted(self._messages.values(), key=lambda m: m.sort_key)
        return ordered[-self._history_limit:]

    def add_listener(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def _notify(self) -> None:
        messages = self.messages
        for listener in list(self._listeners):
            listener(messages)

    def _add(self, message: ChatMessage) -> bool:
        if message.id in self._messages:
            return False
        self._messages[message.id] = message
        return True

    async def load(self) -> list[ChatMessage]:
        """Replace local state with the newest history from the store."""
        history = await self._store.list_recent(self._history_limit)
        self._messages = {m.id: m for m in history}
        self._notify()
        return self.messages

    async def send(self, text: str) -> ChatMessage:
        """
        Post a line to the room.

        Raises:
            EmptyChatMessageError: Blank text, before any write
            ChatMessageTooLongError: Text over the room's limit
        """
        content = text.strip()
        if not content:
            raise EmptyChatMessageError()
        if len(content) > self._max_length:
            raise ChatMessageTooLongError(len(content), self._max_length)
        message = await self._store.insert(self.user_id, self.author_name, content)
        if self._add(message):
            self._notify()
        return message

    def apply_change(self, event: ChangeEvent) -> None:
        if event.table != TABLE or event.type != ChangeType.INSERT:
            return
        try:
            message = map_chat_row(event.record)
        except (KeyError, ValueError) as e:
            logger.debug("Dropping malformed chat push row: %s", e)
            return
        if self._add(message):
            self._notify()

    async def listen(self, channel: IPushChannel, on_error: Optional[ErrorHandler] = None) -> None:
        await self.close()
        self._subscription = await channel.subscribe(
            "chat-room",
            [ChangeBinding(table=TABLE, event=ChangeType.INSERT.value)],
            self.apply_change,
            on_resync=self.load,
            on_error=on_error,
        )

    async def close(self) -> None:
        if self._subscription is not None:
            subscription, self._subscription = self._subscription, None
            await subscription.close()

    @property
    def listening(self) -> bool:
        return self._subscription is not None and not self._subscription.closed
