"""
Ordered, id-deduplicated message log for one conversation.

Messages are kept in (created_at, id) order. Inserts walk back from the
tail because nearly every arrival is the newest message.
"""

from datetime import datetime
from typing import Iterable, Iterator, Optional

from .models import DirectMessage


class MessageLog:
    """The local view of one two-party conversation."""

    def __init__(self, messages: Iterable[DirectMessage] = ()):
        self._messages: list[DirectMessage] = []
        self._ids: set[str] = set()
        for message in messages:
            self.insert(message)

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[DirectMessage]:
        return iter(list(self._messages))

    def __contains__(self, message_id: object) -> bool:
        return message_id in self._ids

    @property
    def messages(self) -> list[DirectMessage]:
        return list(self._messages)

    def get(self, message_id: str) -> Optional[DirectMessage]:
        for message in self._messages:
            if message.id == message_id:
                return message
        return None

    def last(self) -> Optional[DirectMessage]:
        return self._messages[-1] if self._messages else None

    def insert(self, message: DirectMessage) -> bool:
        """
        Insert at the position implied by created_at.

        Returns False without changes when the id is already present.
        """
        if message.id in self._ids:
            return False
        position = len(self._messages)
        while position > 0 and self._messages[position - 1].sort_key > message.sort_key:
            position -= 1
        self._messages.insert(position, message)
        self._ids.add(message.id)
        return True

    def replace(self, temp_id: str, confirmed: DirectMessage) -> bool:
        """
        Swap an optimistic entry for its confirmed version, in place.

        If the confirmed id is already present (its echo arrived first),
        the optimistic entry is dropped instead. Returns False when the
        optimistic entry is gone (e.g., the log was cleared meanwhile).
        """
        index = self._index_of(temp_id)
        if index is None:
            return False
        self._ids.discard(temp_id)
        if confirmed.id in self._ids:
            del self._messages[index]
            return True
        self._messages[index] = confirmed
        self._ids.add(confirmed.id)
        return True

    def update(self, message: DirectMessage) -> bool:
        """Replace the stored row with the same id (e.g., read_at changed)."""
        index = self._index_of(message.id)
        if index is None:
            return False
        self._messages[index] = message
        return True

    def remove(self, message_id: str) -> bool:
        index = self._index_of(message_id)
        if index is None:
            return False
        del self._messages[index]
        self._ids.discard(message_id)
        return True

    def clear(self) -> None:
        self._messages.clear()
        self._ids.clear()

    def unread(self, sender_id: str, receiver_id: str) -> list[DirectMessage]:
        """Confirmed messages from sender to receiver not yet read."""
        return [
            m for m in self._messages
            if m.sender_id == sender_id
            and m.receiver_id == receiver_id
            and m.read_at is None
            and not m.pending
        ]

    def mark_read(self, sender_id: str, receiver_id: str, read_at: datetime) -> int:
        """Set read_at on unread messages from sender to receiver. Never overwrites."""
        changed = 0
        for index, message in enumerate(self._messages):
            if (
                message.sender_id == sender_id
                and message.receiver_id == receiver_id
                and message.read_at is None
                and not message.pending
            ):
                self._messages[index] = message.model_copy(update={"read_at": read_at})
                changed += 1
        return changed

    def _index_of(self, message_id: str) -> Optional[int]:
        if message_id not in self._ids:
            return None
        for index, message in enumerate(self._messages):
            if message.id == message_id:
                return index
        return None
