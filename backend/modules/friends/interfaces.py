"""
Friendship Graph interface.

The Conversation Index and the application root depend on IFriendsService.
"""

from typing import Protocol, runtime_checkable

from modules.profiles.models import Profile
from .models import FriendRequest, FriendRequestStatus


@runtime_checkable
class IFriendsService(Protocol):
    """Request/accept workflow and the resulting friend list."""

    async def send_request(self, sender_id: str, username: str) -> FriendRequest:
        """
        Send a friend request to the user with the given username.

        Raises:
            ProfileNotFoundError: If no user has that username
            SelfFriendRequestError: If the username is the sender's own
            AlreadyFriendsError: If the two users are already friends
            DuplicateFriendRequestError: If a request already exists
        """
        ...

    async def respond(
        self,
        receiver_id: str,
        request_id: str,
        status: FriendRequestStatus,
    ) -> FriendRequest:
        """
        Accept or reject a pending request.

        Accepting creates exactly one FriendEdge; repeating it is harmless.

        Raises:
            FriendRequestNotFoundError: If the request does not exist
            FriendRequestAccessDeniedError: If the caller is not the receiver
        """
        ...

    async def list_pending(self, user_id: str) -> list[FriendRequest]:
        """Pending requests received by user_id, with sender profiles."""
        ...

    async def list_sent(self, user_id: str) -> list[FriendRequest]:
        """Pending requests sent by user_id, with receiver profiles."""
        ...

    async def list_friends(self, user_id: str) -> list[Profile]:
        """Profiles of everyone sharing a FriendEdge with user_id."""
        ...
