"""
Message store interface.

The engine, the conversation index and the notification center depend
on IMessageStore rather than on the Supabase repository.
"""

from datetime import datetime
from typing import Optional, Protocol, runtime_checkable

from .models import DirectMessage, MessagePayload


@runtime_checkable
class IMessageStore(Protocol):
    """Durable storage for direct messages."""

    async def list_conversation(self, self_id: str, peer_id: str) -> list[DirectMessage]:
        """
        Full history of a conversation, oldest first.

        Raises:
            FetchError: If the store is unreachable
        """
        ...

    async def insert(self, sender_id: str, receiver_id: str, payload: MessagePayload) -> DirectMessage:
        """
        Persist a message and return it with its permanent id and server time.

        Raises:
            AuthorizationError: If the store rejects the write
            StoreWriteError: For any other write failure
        """
        ...

    async def mark_read(self, reader_id: str, sender_id: str, read_at: datetime) -> int:
        """Set read_at on unread messages from sender to reader. Returns rows changed."""
        ...

    async def mark_all_read(self, reader_id: str, read_at: datetime) -> int:
        """Set read_at on every unread message to reader. Returns rows changed."""
        ...

    async def delete_conversation(self, self_id: str, peer_id: str) -> int:
        """Delete the whole conversation. Returns rows deleted."""
        ...

    async def latest_between(self, self_id: str, peer_id: str) -> Optional[DirectMessage]:
        """Most recent message of a conversation, if any."""
        ...

    async def count_unread(self, reader_id: str) -> int:
        """Number of unread messages addressed to reader."""
        ...
