"""
Notification Aggregator module.

Public API:
- NotificationCenter: per-session unread counters fed by the push channel
- NotificationCounts, NotificationCategory
- INotificationStore / NotificationRepository
"""

from .interfaces import INotificationStore
from .models import NotificationCategory, NotificationCounts
from .repository import NotificationRepository
from .service import NotificationCenter

__all__ = [
    "INotificationStore",
    "NotificationCategory",
    "NotificationCounts",
    "NotificationRepository",
    "NotificationCenter",
]
