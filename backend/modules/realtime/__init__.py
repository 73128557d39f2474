"""
Push channel module.

Public API:
- IPushChannel / ISubscription: interfaces consumers depend on
- RealtimeService: Supabase Realtime implementation
- ChangeEvent, ChangeBinding, ChangeType
"""

from .interfaces import IPushChannel, ISubscription
from .models import ChangeBinding, ChangeEvent, ChangeType
from .service import PushSubscription, RealtimeService

__all__ = [
    "IPushChannel",
    "ISubscription",
    "PushSubscription",
    "RealtimeService",
    "ChangeBinding",
    "ChangeEvent",
    "ChangeType",
]
