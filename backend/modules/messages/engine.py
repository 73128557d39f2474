"""
Message Synchronization Engine.

Keeps one conversation's local log consistent while three writers feed
it: optimistic local sends, store confirmations, and rows pushed by the
realtime channel (the peer's messages and echoes of our own).

Rules:
- The log is ordered by created_at and never holds two entries with the
  same id.
- A send shows up immediately under a temporary id. Confirmation swaps
  it in place for the stored row; failure removes it.
- Read failures leave the log untouched. There is no automatic retry.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Callable, Optional

from pydantic import ValidationError as ModelValidationError

from shared.config import get_settings
from modules.realtime.interfaces import IPushChannel, ISubscription, ErrorHandler
from modules.realtime.models import ChangeBinding, ChangeEvent, ChangeType

from .interfaces import IMessageStore
from .log import MessageLog
from .models import DirectMessage, MessagePayload
from .pending import PendingWrites
from .repository import map_message_row
from .exceptions import EmptyMessageError, MessageTooLongError

logger = logging.getLogger(__name__)

TABLE = "direct_messages"

Listener = Callable[["MessageSyncEngine"], None]


class MessageSyncEngine:
    """
    The synchronized view of the conversation between self_id and peer_id.

    Owned by a single view; nothing else mutates its log.
    """

    def __init__(
        self,
        self_id: str,
        peer_id: str,
        store: IMessageStore,
        max_message_length: Optional[int] = None,
    ):
        self.self_id = self_id
        self.peer_id = peer_id
        self.draft = MessagePayload()
        self._store = store
        self._log = MessageLog()
        self._pending = PendingWrites()
        self._listeners: list[Listener] = []
        self._subscription: Optional[ISubscription] = None
        self._loaded = False
        self._max_length = max_message_length or get_settings().max_message_length

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def messages(self) -> list[DirectMessage]:
        return self._log.messages

    @property
    def in_flight(self) -> int:
        return len(self._pending.in_flight())

    @property
    def loaded(self) -> bool:
        return self._loaded

    def unread(self) -> list[DirectMessage]:
        return self._log.unread(self.peer_id, self.self_id)

    def add_listener(self, listener: Listener) -> Callable[[], None]:
        """Call listener after every change to the log. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def load_conversation(self) -> list[DirectMessage]:
        """
        Fetch the full ordered history.

        Raises:
            FetchError / StoreTimeoutError: The log keeps its last good state.
        """
        history = await self._store.list_conversation(self.self_id, self.peer_id)
        log = MessageLog(history)
        for ticket in self._pending.in_flight():
            log.insert(ticket.optimistic)
        self._log = log
        self._loaded = True
        self._notify()
        return self.messages

    async def send_message(self, payload: MessagePayload) -> DirectMessage:
        """
        Send a message with an optimistic local insert.

        Raises:
            EmptyMessageError / MessageTooLongError: Before anything changes.
            Any store error: After the optimistic entry has been removed.
        """
        if payload.is_empty:
            raise EmptyMessageError()
        if payload.game_content is None and len(payload.content) > self._max_length:
            raise MessageTooLongError(len(payload.content), self._max_length)

        optimistic = DirectMessage(
            id=f"temp-{uuid.uuid4()}",
            sender_id=self.self_id,
            receiver_id=self.peer_id,
            content=payload.content,
            kind=payload.kind,
            image_url=payload.image_url,
            voice_url=payload.voice_url,
            created_at=datetime.now(timezone.utc),
            pending=True,
        )
        ticket = self._pending.open(optimistic)
        self._log.insert(optimistic)
        self.draft = MessagePayload()
        self._notify()

        try:
            confirmed = await self._store.insert(self.self_id, self.peer_id, payload)
        except Exception as e:
            ticket.fail(e)
            self._pending.release(ticket)
            self._log.remove(ticket.temp_id)
            self._notify()
            logger.info("Rolled back optimistic message %s: %s", ticket.temp_id, e)
            raise

        ticket.confirm(confirmed)
        self._pending.release(ticket)
        if not self._log.replace(ticket.temp_id, confirmed):
            logger.debug("Optimistic entry %s gone before confirmation", ticket.temp_id)
        self._notify()
        return confirmed

    async def send_draft(self) -> DirectMessage:
        """Send whatever is in the compose draft."""
        return await self.send_message(self.draft)

    def on_peer_message_arrived(self, message: DirectMessage) -> bool:
        """
        Merge a message delivered by the push channel.

        Returns True when the log changed. Messages of other conversations
        and ids already present (including our own echoes) are ignored.
        """
        if not message.is_between(self.self_id, self.peer_id):
            logger.debug("Ignoring message %s from another conversation", message.id)
            return False
        if not self._log.insert(message):
            return False
        self._notify()
        return True

    async def mark_read(self) -> int:
        """
        Mark everything the peer sent us as read in one batched update.

        A no-op (no write) when the loaded log has nothing unread.
        """
        if self._loaded and not self.unread():
            return 0
        read_at = datetime.now(timezone.utc)
        changed = await self._store.mark_read(self.self_id, self.peer_id, read_at)
        if self._log.mark_read(self.peer_id, self.self_id, read_at):
            self._notify()
        return changed

    def note_read(self, read_at: datetime) -> bool:
        """Record a read that was already written elsewhere (e.g. mark-all). No store call."""
        if self._log.mark_read(self.peer_id, self.self_id, read_at):
            self._notify()
            return True
        return False

    async def clear_conversation(self) -> int:
        """Delete the conversation. The local log is cleared first, unconditionally."""
        self._log.clear()
        self._notify()
        return await self._store.delete_conversation(self.self_id, self.peer_id)

    async def resync(self) -> None:
        """Backfill after a push channel reconnect."""
        await self.load_conversation()

    # -------------------------------------------------------------------------
    # Push channel
    # -------------------------------------------------------------------------

    def apply_change(self, event: ChangeEvent) -> None:
        """Route one pushed row change into the log."""
        if event.table != TABLE:
            return
        try:
            if event.type == ChangeType.DELETE:
                message_id = event.old_record.get("id")
                if message_id is not None and self._log.remove(str(message_id)):
                    self._notify()
                return

            message = map_message_row(event.record)
        except (KeyError, ValueError, ModelValidationError) as e:
            logger.debug("Dropping malformed %s push row: %s", event.type.value, e)
            return

        if event.type == ChangeType.INSERT:
            self.on_peer_message_arrived(message)
        elif message.is_between(self.self_id, self.peer_id) and self._log.update(message):
            self._notify()

    async def listen(self, channel: IPushChannel, on_error: Optional[ErrorHandler] = None) -> None:
        """Subscribe to this conversation's rows, replacing any earlier subscription."""
        await self.close()
        bindings = [
            ChangeBinding.eq(TABLE, "sender_id", self.self_id),
            ChangeBinding.eq(TABLE, "receiver_id", self.self_id),
        ]
        self._subscription = await channel.subscribe(
            f"dm:{self.self_id}:{self.peer_id}",
            bindings,
            self.apply_change,
            on_resync=self.resync,
            on_error=on_error,
        )

    async def close(self) -> None:
        """Release the push subscription."""
        if self._subscription is not None:
            subscription, self._subscription = self._subscription, None
            await subscription.close()

    @property
    def listening(self) -> bool:
        return self._subscription is not None and not self._subscription.closed
