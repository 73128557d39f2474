"""
Conversation Index module.

Public API:
- ConversationIndex: sorted per-friend summaries kept current by push events
- Conversation, sort_conversations
"""

from .models import Conversation, sort_conversations
from .service import ConversationIndex

__all__ = [
    "Conversation",
    "ConversationIndex",
    "sort_conversations",
]
