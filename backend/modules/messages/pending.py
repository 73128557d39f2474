"""
Pending write tickets.

An optimistic insert opens a ticket; the store's answer settles it
exactly once as confirmed or failed. The engine uses the settled ticket
to decide whether to replace or remove the optimistic entry.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .models import DirectMessage


class PendingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    FAILED = "failed"


@dataclass
class PendingWrite:
    """One in-flight write, keyed by its temporary id."""

    optimistic: DirectMessage
    status: PendingStatus = PendingStatus.PENDING
    confirmed: Optional[DirectMessage] = None
    error: Optional[BaseException] = None

    @property
    def temp_id(self) -> str:
        return self.optimistic.id

    @property
    def settled(self) -> bool:
        return self.status != PendingStatus.PENDING

    def confirm(self, message: DirectMessage) -> None:
        if self.settled:
            raise RuntimeError(f"Pending write {self.temp_id} already {self.status.value}")
        self.status = PendingStatus.CONFIRMED
        self.confirmed = message

    def fail(self, error: BaseException) -> None:
        if self.settled:
            raise RuntimeError(f"Pending write {self.temp_id} already {self.status.value}")
        self.status = PendingStatus.FAILED
        self.error = error


@dataclass
class PendingWrites:
    """Registry of unsettled tickets."""

    _tickets: dict[str, PendingWrite] = field(default_factory=dict)

    def open(self, optimistic: DirectMessage) -> PendingWrite:
        ticket = PendingWrite(optimistic=optimistic)
        self._tickets[ticket.temp_id] = ticket
        return ticket

    def release(self, ticket: PendingWrite) -> None:
        """Forget a settled ticket."""
        if not ticket.settled:
            raise RuntimeError(f"Pending write {ticket.temp_id} is not settled")
        self._tickets.pop(ticket.temp_id, None)

    def in_flight(self) -> list[PendingWrite]:
        return [t for t in self._tickets.values() if not t.settled]

    def __contains__(self, temp_id: object) -> bool:
        return temp_id in self._tickets

    def __len__(self) -> int:
        return len(self._tickets)
