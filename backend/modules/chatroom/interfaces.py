"""
Chat room store interface.
"""

from typing import Protocol, runtime_checkable

from .models import ChatMessage


@runtime_checkable
class IChatStore(Protocol):
    """Durable storage for the shared room."""

    async def list_recent(self, limit: int) -> list[ChatMessage]:
        """The newest `limit` messages, oldest first."""
        ...

    async def insert(self, author_id: str, author_name: str, content: str) -> ChatMessage:
        """
        Persist a chat line and return it with its id and server time.

        Raises:
            StoreWriteError: If the store rejects the write
        """
        ...
