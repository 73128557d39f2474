"""
Notification Aggregator.

NotificationCenter is an explicit per-session context object: the
application root builds it at sign-in, start() seeds and subscribes,
and stop() releases every channel at sign-out. Counters only move by
one per qualifying push event, or to zero on clear().
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from shared.config import get_settings
from modules.realtime.interfaces import IPushChannel, ISubscription, ErrorHandler
from modules.realtime.models import ChangeBinding, ChangeEvent, ChangeType

from .interfaces import INotificationStore
from .models import NotificationCategory, NotificationCounts

logger = logging.getLogger(__name__)

Listener = Callable[[NotificationCounts], None]

# Category -> (table, column, whether the user must match the column)
CATEGORY_SOURCES: dict[NotificationCategory, tuple[str, str, bool]] = {
    NotificationCategory.MESSAGES: ("direct_messages", "receiver_id", True),
    NotificationCategory.FRIEND_REQUESTS: ("friend_requests", "receiver_id", True),
    NotificationCategory.POSTS: ("posts", "author_id", False),
    NotificationCategory.CHAT: ("messages", "author_id", False),
}


class NotificationCenter:
    """Live unread counters for one signed-in user."""

    def __init__(
        self,
        user_id: str,
        store: INotificationStore,
        realtime: IPushChannel,
        on_error: Optional[ErrorHandler] = None,
    ):
        self.user_id = user_id
        self._store = store
        self._realtime = realtime
        self._on_error = on_error
        self._settings = get_settings()
        self._counts = NotificationCounts()
        self._listeners: list[Listener] = []
        self._subscriptions: list[ISubscription] = []

    @property
    def counts(self) -> NotificationCounts:
        return self._counts

    @property
    def total(self) -> int:
        return self._counts.total

    @property
    def running(self) -> bool:
        return bool(self._subscriptions)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call listener with the new counts on every change. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set(self, counts: NotificationCounts) -> None:
        if counts == self._counts:
            return
        self._counts = counts
        for listener in list(self._listeners):
            listener(counts)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def start(self) -> None:
        """Subscribe one channel per category, then seed the counters."""
        if self.running:
            return
        for category, (table, column, must_match) in CATEGORY_SOURCES.items():
            binding = (
                ChangeBinding.eq(table, column, self.user_id, event=ChangeType.INSERT.value)
                if must_match
                else ChangeBinding(table=table, event=ChangeType.INSERT.value)
            )
            subscription = await self._realtime.subscribe(
                f"notifications:{category.value}",
                [binding],
                self._handler(category),
                on_resync=self.refresh_counts,
                on_error=self._on_error,
            )
            self._subscriptions.append(subscription)
        await self.refresh_counts()
        logger.info("Notification center started for %s", self.user_id)

    async def stop(self) -> None:
        """Release every channel. Safe to call more than once."""
        subscriptions, self._subscriptions = self._subscriptions, []
        for subscription in subscriptions:
            await subscription.close()
        if subscriptions:
            logger.info("Notification center stopped for %s", self.user_id)

    async def refresh_counts(self) -> NotificationCounts:
        """Seed every counter from the store."""
        now = datetime.now(timezone.utc)
        posts_since = now - timedelta(hours=self._settings.recent_posts_window_hours)
        chat_since = now - timedelta(hours=self._settings.recent_chat_window_hours)
        counts = NotificationCounts(
            messages=await self._store.count_unread_messages(self.user_id),
            friend_requests=await self._store.count_pending_requests(self.user_id),
            posts=await self._store.count_recent_posts(self.user_id, posts_since),
            chat=await self._store.count_recent_chat(self.user_id, chat_since),
        )
        self._set(counts)
        return counts

    # -------------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------------

    def _handler(self, category: NotificationCategory) -> Callable[[ChangeEvent], None]:
        def handle(event: ChangeEvent) -> None:
            self.on_event(category, event)

        return handle

    def on_event(self, category: NotificationCategory, event: ChangeEvent) -> bool:
        """Count a pushed creation event if it qualifies. Returns True when counted."""
        table, column, must_match = CATEGORY_SOURCES[category]
        if event.type != ChangeType.INSERT or event.table != table:
            return False
        subject = event.record.get(column)
        if subject is None:
            return False
        qualifies = subject == self.user_id if must_match else subject != self.user_id
        if not qualifies:
            return False
        self._set(self._counts.incremented(category))
        return True

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    def clear(self, category: NotificationCategory) -> None:
        self._set(self._counts.cleared(category))

    async def mark_messages_as_read(self) -> int:
        """
        Clear the messages badge and mark every unread message as read.

        The badge is cleared first and stays cleared if the write fails;
        the error still propagates so the caller can report it.
        """
        self.clear(NotificationCategory.MESSAGES)
        return await self._store.mark_all_read(self.user_id, datetime.now(timezone.utc))
