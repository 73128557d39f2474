"""
Message Synchronization Engine module.

Maintains an ordered, deduplicated per-conversation message log with
optimistic sends, store confirmations and realtime merges.

Public API:
- MessageSyncEngine: per-conversation engine
- IMessageStore: storage interface (MessageRepository implements it)
- DirectMessage, MessagePayload, MessageKind
"""

from .engine import MessageSyncEngine
from .interfaces import IMessageStore
from .log import MessageLog
from .models import DirectMessage, MessageKind, MessagePayload
from .pending import PendingStatus, PendingWrite, PendingWrites
from .exceptions import EmptyMessageError, MessageTooLongError

__all__ = [
    "MessageSyncEngine",
    "IMessageStore",
    "MessageLog",
    "DirectMessage",
    "MessageKind",
    "MessagePayload",
    "PendingStatus",
    "PendingWrite",
    "PendingWrites",
    "EmptyMessageError",
    "MessageTooLongError",
]
