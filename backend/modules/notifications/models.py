"""
Notification Aggregator data models.
"""

from enum import Enum
from pydantic import BaseModel


class NotificationCategory(str, Enum):
    MESSAGES = "messages"
    FRIEND_REQUESTS = "friend_requests"
    POSTS = "posts"
    CHAT = "chat"


class NotificationCounts(BaseModel):
    """Unread / unseen counters, one per category."""

    messages: int = 0
    friend_requests: int = 0
    posts: int = 0
    chat: int = 0

    model_config = {"frozen": True}

    @property
    def total(self) -> int:
        return self.messages + self.friend_requests + self.posts + self.chat

    def get(self, category: NotificationCategory) -> int:
        return getattr(self, category.value)

    def incremented(self, category: NotificationCategory) -> "NotificationCounts":
        return self.model_copy(update={category.value: self.get(category) + 1})

    def cleared(self, category: NotificationCategory) -> "NotificationCounts":
        return self.model_copy(update={category.value: 0})
