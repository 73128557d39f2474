"""
Notification count queries.

Counts use head requests so no rows are transferred.
"""

from datetime import datetime
from typing import Any

from shared.repository import BaseRepository
from modules.messages.repository import MessageRepository


class NotificationRepository(BaseRepository[int]):
    """Implements INotificationStore against Supabase."""

    def __init__(self, db, timeout: float | None = None) -> None:
        super().__init__(db, timeout)
        self._messages = MessageRepository(db, timeout)

    async def count_unread_messages(self, user_id: str) -> int:
        return await self._messages.count_unread(user_id)

    async def count_pending_requests(self, user_id: str) -> int:
        query = (
            self._count("friend_requests")
            .eq("receiver_id", user_id)
            .eq("status", "pending")
        )
        result = await self._run(query, "count friend requests")
        return result.count or 0

    async def count_recent_posts(self, user_id: str, since: datetime) -> int:
        query = (
            self._count("posts")
            .gte("created_at", since.isoformat())
            .neq("author_id", user_id)
        )
        result = await self._run(query, "count new posts")
        return result.count or 0

    async def count_recent_chat(self, user_id: str, since: datetime) -> int:
        query = (
            self._count("messages")
            .gte("created_at", since.isoformat())
            .neq("author_id", user_id)
        )
        result = await self._run(query, "count new chat messages")
        return result.count or 0

    async def mark_all_read(self, user_id: str, read_at: datetime) -> int:
        return await self._messages.mark_all_read(user_id, read_at)

    def _count(self, table: str) -> Any:
        return self._db.table(table).select("id", count="exact", head=True)
