"""
Push channel backed by Supabase Realtime.

Each PushSubscription owns one realtime channel. Channel errors and
timeouts are treated as transport drops: the channel is torn down and
rebuilt with a growing delay, and once it is back the owner's resync
hook runs so missed rows can be re-fetched.
"""

import asyncio
import logging
import uuid
from typing import Any, Optional

from realtime import RealtimeSubscribeStates
from supabase import AsyncClient

from shared.config import get_settings
from shared.exceptions import HuddleError, TransportError

from .interfaces import IPushChannel, EventHandler, ResyncHandler, ErrorHandler
from .models import ChangeBinding, ChangeEvent

logger = logging.getLogger(__name__)


class PushSubscription:
    """A realtime channel plus its reconnect bookkeeping."""

    def __init__(
        self,
        db: AsyncClient,
        topic: str,
        bindings: list[ChangeBinding],
        on_event: EventHandler,
        on_resync: Optional[ResyncHandler] = None,
        on_error: Optional[ErrorHandler] = None,
        resubscribe_delay: float = 1.0,
        max_attempts: int = 5,
    ):
        self._db = db
        self.topic = f"{topic}:{uuid.uuid4().hex[:8]}"
        self.bindings = list(bindings)
        self._on_event = on_event
        self._on_resync = on_resync
        self._on_error = on_error
        self._resubscribe_delay = resubscribe_delay
        self._max_attempts = max_attempts

        self._channel: Any = None
        self._closed = False
        self._attempts = 0
        self._needs_resync = False
        self._tasks: set[asyncio.Task] = set()

    @property
    def closed(self) -> bool:
        return self._closed

    async def open(self) -> "PushSubscription":
        """Create the channel, register bindings and join it."""
        channel = self._db.channel(self.topic)
        for binding in self.bindings:
            channel.on_postgres_changes(
                binding.event,
                callback=self._dispatch,
                table=binding.table,
                schema=binding.schema_name,
                filter=binding.filter,
            )
        self._channel = channel

        def on_state(state: RealtimeSubscribeStates, error: Optional[Exception] = None) -> None:
            # Late callbacks from a replaced channel are ignored.
            if channel is self._channel:
                self._on_state(state, error)

        await channel.subscribe(on_state)
        logger.debug("Subscribed %s (%d bindings)", self.topic, len(self.bindings))
        return self

    async def close(self) -> None:
        """Stop deliveries and release the channel."""
        if self._closed:
            return
        self._closed = True
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()
        if self._channel is not None:
            channel, self._channel = self._channel, None
            await self._db.remove_channel(channel)
        logger.debug("Unsubscribed %s", self.topic)

    # -------------------------------------------------------------------------
    # Platform callbacks
    # -------------------------------------------------------------------------

    def _dispatch(self, payload: Any) -> None:
        if self._closed:
            return
        event = ChangeEvent.from_payload(payload)
        if event is None:
            logger.debug("Ignoring non-row payload on %s", self.topic)
            return
        try:
            self._on_event(event)
        except Exception:
            logger.exception("Push handler failed on %s for %s", self.topic, event.type.value)

    def _on_state(self, state: RealtimeSubscribeStates, error: Optional[Exception] = None) -> None:
        if self._closed:
            return
        if state == RealtimeSubscribeStates.SUBSCRIBED:
            self._attempts = 0
            if self._needs_resync:
                self._needs_resync = False
                if self._on_resync is not None:
                    self._spawn(self._run_resync())
            return

        if state in (
            RealtimeSubscribeStates.CHANNEL_ERROR,
            RealtimeSubscribeStates.TIMED_OUT,
            RealtimeSubscribeStates.CLOSED,
        ):
            drop = TransportError(
                f"Realtime channel {self.topic} dropped: {state.value}",
                code="CHANNEL_DROPPED",
                details={"topic": self.topic, "state": state.value, "error": str(error) if error else None},
            )
            logger.warning(drop.message)
            if self._on_error is not None:
                self._on_error(drop)
            self._needs_resync = True
            self._spawn(self._resubscribe())

    # -------------------------------------------------------------------------
    # Recovery
    # -------------------------------------------------------------------------

    async def _resubscribe(self) -> None:
        self._attempts += 1
        if self._attempts > self._max_attempts:
            failure = TransportError(
                f"Gave up resubscribing {self.topic} after {self._max_attempts} attempts",
                code="RESUBSCRIBE_FAILED",
                details={"topic": self.topic},
            )
            logger.error(failure.message)
            if self._on_error is not None:
                self._on_error(failure)
            return

        await asyncio.sleep(self._resubscribe_delay * self._attempts)
        if self._closed:
            return

        logger.info("Resubscribing %s (attempt %d)", self.topic, self._attempts)
        try:
            if self._channel is not None:
                old, self._channel = self._channel, None
                await self._db.remove_channel(old)
            await self.open()
        except Exception as e:
            # Counts toward max_attempts; the last failure ends in RESUBSCRIBE_FAILED.
            logger.warning("Resubscribe attempt %d on %s failed: %s", self._attempts, self.topic, e)
            self._spawn(self._resubscribe())

    async def _run_resync(self) -> None:
        logger.info("Backfilling after reconnect on %s", self.topic)
        try:
            await self._on_resync()
        except HuddleError as e:
            failure = TransportError(
                f"Backfill after reconnect failed on {self.topic}: {e.message}",
                code="RESYNC_FAILED",
                details={"topic": self.topic, "cause": e.code},
            )
            logger.warning(failure.message)
            if self._on_error is not None:
                self._on_error(failure)

    def _spawn(self, coro) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)


class RealtimeService(IPushChannel):
    """
    Push channel over Supabase Realtime.

    Tracks every subscription it opens so close_all() can release them
    at sign-out.
    """

    def __init__(self, supabase_client: AsyncClient):
        self._db = supabase_client
        self._settings = get_settings()
        self._subscriptions: list[PushSubscription] = []

    async def subscribe(
        self,
        topic: str,
        bindings: list[ChangeBinding],
        on_event: EventHandler,
        on_resync: Optional[ResyncHandler] = None,
        on_error: Optional[ErrorHandler] = None,
    ) -> PushSubscription:
        subscription = PushSubscription(
            self._db,
            topic,
            bindings,
            on_event,
            on_resync=on_resync,
            on_error=on_error,
            resubscribe_delay=self._settings.realtime_resubscribe_delay_seconds,
            max_attempts=self._settings.realtime_max_resubscribe_attempts,
        )
        await subscription.open()
        self._subscriptions = [s for s in self._subscriptions if not s.closed]
        self._subscriptions.append(subscription)
        return subscription

    @property
    def open_subscriptions(self) -> int:
        return sum(1 for s in self._subscriptions if not s.closed)

    async def close_all(self) -> None:
        """Release every subscription opened through this service."""
        subscriptions, self._subscriptions = self._subscriptions, []
        for subscription in subscriptions:
            await subscription.close()
