"""
Friendship Graph module.

Public API:
- IFriendsService: Interface for the request/accept workflow
- FriendRequest, FriendRequestStatus, FriendEdge
"""

from .interfaces import IFriendsService
from .models import FriendEdge, FriendRequest, FriendRequestStatus
from .exceptions import (
    SelfFriendRequestError,
    AlreadyFriendsError,
    DuplicateFriendRequestError,
    FriendRequestNotFoundError,
    FriendRequestAccessDeniedError,
    InvalidFriendRequestStatusError,
)

__all__ = [
    # Interface
    "IFriendsService",
    # Models
    "FriendEdge",
    "FriendRequest",
    "FriendRequestStatus",
    # Exceptions
    "SelfFriendRequestError",
    "AlreadyFriendsError",
    "DuplicateFriendRequestError",
    "FriendRequestNotFoundError",
    "FriendRequestAccessDeniedError",
    "InvalidFriendRequestStatusError",
]
