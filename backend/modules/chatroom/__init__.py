"""
Chat room module.

Public API:
- ChatRoom: the shared room, loaded from history and kept live by push events
- IChatStore / ChatRepository
- ChatMessage
- Chat exceptions: EmptyChatMessageError, ChatMessageTooLongError
"""

from .exceptions import ChatMessageTooLongError, EmptyChatMessageError
from .interfaces import IChatStore
from .models import ChatMessage
from .repository import ChatRepository
from .service import ChatRoom

__all__ = [
    "ChatRoom",
    "IChatStore",
    "ChatRepository",
    "ChatMessage",
    "EmptyChatMessageError",
    "ChatMessageTooLongError",
]
