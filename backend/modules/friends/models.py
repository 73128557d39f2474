"""
Friendship Graph data models.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, model_validator

from modules.profiles.models import Profile


class FriendRequestStatus(str, Enum):
    """Lifecycle of a friend request."""

    PENDING = "pending"      # Sent, awaiting the receiver
    ACCEPTED = "accepted"    # Receiver accepted; a FriendEdge exists
    REJECTED = "rejected"    # Receiver declined


class FriendRequest(BaseModel):
    """A request from sender to receiver. Unique per (sender, receiver)."""

    id: str = Field(..., description="Request ID (UUID)")
    sender_id: str = Field(..., description="User who sent the request")
    receiver_id: str = Field(..., description="User who may answer it")
    status: FriendRequestStatus = Field(default=FriendRequestStatus.PENDING)
    created_at: datetime = Field(..., description="Creation time")
    updated_at: datetime = Field(..., description="Last update time")

    # Joined profiles (only populated by list queries)
    sender: Optional[Profile] = None
    receiver: Optional[Profile] = None

    @property
    def is_pending(self) -> bool:
        return self.status == FriendRequestStatus.PENDING


class FriendEdge(BaseModel):
    """
    Canonical record of an accepted friendship.

    The pair is unordered; user_a < user_b makes (x, y) and (y, x) the
    same edge, so one friendship can never be stored twice.
    """

    user_a: str
    user_b: str

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _check_canonical(self) -> "FriendEdge":
        if not self.user_a < self.user_b:
            raise ValueError("FriendEdge requires user_a < user_b")
        return self

    @classmethod
    def between(cls, first: str, second: str) -> "FriendEdge":
        """Build the edge for two users in either order."""
        low, high = sorted((first, second))
        return cls(user_a=low, user_b=high)

    def other(self, user_id: str) -> str:
        """The friend on the other side of the edge from user_id."""
        if user_id == self.user_a:
            return self.user_b
        if user_id == self.user_b:
            return self.user_a
        raise ValueError(f"{user_id} is not part of this edge")

    def involves(self, user_id: str) -> bool:
        return user_id in (self.user_a, self.user_b)
