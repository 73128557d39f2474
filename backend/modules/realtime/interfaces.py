"""
Push channel interface.

Consumers depend on IPushChannel so tests can drive events by hand.
"""

from typing import Awaitable, Callable, Optional, Protocol, runtime_checkable

from shared.exceptions import TransportError
from .models import ChangeBinding, ChangeEvent


EventHandler = Callable[[ChangeEvent], None]
ResyncHandler = Callable[[], Awaitable[None]]
ErrorHandler = Callable[[TransportError], None]


@runtime_checkable
class ISubscription(Protocol):
    """A live subscription. Closing it stops all deliveries."""

    @property
    def closed(self) -> bool:
        ...

    async def close(self) -> None:
        ...


@runtime_checkable
class IPushChannel(Protocol):
    """Subscribe to row changes matching a set of bindings."""

    async def subscribe(
        self,
        topic: str,
        bindings: list[ChangeBinding],
        on_event: EventHandler,
        on_resync: Optional[ResyncHandler] = None,
        on_error: Optional[ErrorHandler] = None,
    ) -> ISubscription:
        """
        Open a subscription.

        Args:
            topic: Channel name prefix (made unique per subscription)
            bindings: Row changes to receive
            on_event: Called for every matching change
            on_resync: Awaited after the channel recovers from a drop, so the
                owner can backfill anything missed
            on_error: Called when the channel drops or gives up

        Returns:
            The live subscription
        """
        ...
