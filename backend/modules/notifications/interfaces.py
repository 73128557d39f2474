"""
Notification store interface.
"""

from datetime import datetime
from typing import Protocol, runtime_checkable


@runtime_checkable
class INotificationStore(Protocol):
    """Counts used to seed the badges, plus the batched read-marking write."""

    async def count_unread_messages(self, user_id: str) -> int:
        ...

    async def count_pending_requests(self, user_id: str) -> int:
        ...

    async def count_recent_posts(self, user_id: str, since: datetime) -> int:
        """Posts by other users created at or after since."""
        ...

    async def count_recent_chat(self, user_id: str, since: datetime) -> int:
        """Chat room messages by other users created at or after since."""
        ...

    async def mark_all_read(self, user_id: str, read_at: datetime) -> int:
        """Mark every unread direct message to user_id as read."""
        ...
