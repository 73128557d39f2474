"""
Chat room repository for database access.

Encapsulates all Supabase queries and data mapping for the messages table.
"""

import logging
from typing import Any

from shared.exceptions import FetchError
from shared.repository import BaseRepository
from .models import ChatMessage

logger = logging.getLogger(__name__)

TABLE = "messages"


def map_chat_row(data: dict[str, Any]) -> ChatMessage:
    """Map a messages row (from a query or a push event) to ChatMessage."""
    return ChatMessage(
        id=str(data["id"]),
        author_id=str(data["author_id"]),
        author_name=data.get("author_name") or "Anonymous",
        content=data.get("content") or "",
        created_at=data["created_at"],
    )


class ChatRepository(BaseRepository[ChatMessage]):
    """Repository for the shared chat room."""

    async def list_recent(self, limit: int) -> list[ChatMessage]:
        query = (
            self._db.table(TABLE)
            .select("*")
            .order("created_at", desc=True)
            .limit(limit)
        )
        result = await self._run(query, "load chat room")
        messages = []
        for row in result.data or []:
            try:
                messages.append(map_chat_row(row))
            except (KeyError, ValueError) as e:
                logger.warning("Skipping unreadable chat row %s: %s", row.get("id"), e)
        return sorted(messages, key=lambda m: m.sort_key)

    async def insert(self, author_id: str, author_name: str, content: str) -> ChatMessage:
        data = {
            "author_id": author_id,
            "author_name": author_name,
            "content": content,
        }
        query = self._db.table(TABLE).insert(data)
        result = await self._run(query, "send chat message", write=True)
        try:
            return map_chat_row(result.data[0])
        except (KeyError, ValueError) as e:
            raise FetchError(
                f"Chat message was sent but could not be read back: {e}",
                code="UNREADABLE_MESSAGE",
                details={"operation": "send chat message"},
            ) from e
