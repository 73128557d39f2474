"""
Conversation Index data models.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel

from modules.profiles.models import Profile
from modules.messages.models import DirectMessage


class Conversation(BaseModel):
    """One friend plus the newest message exchanged with them. Derived, never stored."""

    friend: Profile
    last_message: Optional[DirectMessage] = None

    model_config = {"frozen": True}

    @property
    def last_activity(self) -> Optional[datetime]:
        return self.last_message.created_at if self.last_message else None


def sort_conversations(conversations: list[Conversation]) -> list[Conversation]:
    """
    Newest last message first; conversations without messages go last.

    Python's sort is stable, so the message-less tail keeps its input order.
    """
    with_messages = [c for c in conversations if c.last_message is not None]
    without = [c for c in conversations if c.last_message is None]
    with_messages.sort(key=lambda c: c.last_message.sort_key, reverse=True)
    return with_messages + without
