"""
Friendship Graph service.

Maintains symmetric friendships derived from the request/accept workflow.
"""

import logging

from shared.exceptions import ConflictError
from modules.profiles.models import Profile
from modules.profiles.service import ProfileService

from .interfaces import IFriendsService
from .models import FriendEdge, FriendRequest, FriendRequestStatus
from .repository import FriendRepository
from .exceptions import (
    SelfFriendRequestError,
    AlreadyFriendsError,
    DuplicateFriendRequestError,
    FriendRequestNotFoundError,
    FriendRequestAccessDeniedError,
    InvalidFriendRequestStatusError,
)

logger = logging.getLogger(__name__)


class FriendsService(IFriendsService):
    """
    Friend request workflow backed by Supabase.

    Implements IFriendsService protocol.
    """

    def __init__(self, repository: FriendRepository, profiles: ProfileService):
        self._repo = repository
        self._profiles = profiles

    async def send_request(self, sender_id: str, username: str) -> FriendRequest:
        """Send a friend request to the user with the given username."""
        receiver = await self._profiles.find_by_username(username)

        if receiver.id == sender_id:
            raise SelfFriendRequestError(sender_id)

        if await self._repo.edge_exists(FriendEdge.between(sender_id, receiver.id)):
            raise AlreadyFriendsError(sender_id, receiver.id)

        try:
            request = await self._repo.create_request(sender_id, receiver.id)
        except ConflictError as e:
            raise DuplicateFriendRequestError(sender_id, receiver.id) from e

        logger.info("Friend request %s sent from %s to %s", request.id, sender_id, receiver.id)
        return request.model_copy(update={"receiver": receiver})

    async def respond(
        self,
        receiver_id: str,
        request_id: str,
        status: FriendRequestStatus,
    ) -> FriendRequest:
        """Accept or reject a pending request."""
        if status not in (FriendRequestStatus.ACCEPTED, FriendRequestStatus.REJECTED):
            raise InvalidFriendRequestStatusError(status.value)

        request = await self._repo.get_request(request_id)
        if request is None:
            raise FriendRequestNotFoundError(request_id)

        if request.receiver_id != receiver_id:
            raise FriendRequestAccessDeniedError(request_id, receiver_id)

        if request.is_pending:
            updated = await self._repo.transition_pending(request_id, status)
            # Lost a race with another answer; take whatever won.
            request = updated or await self._repo.get_request(request_id) or request

        if request.status == FriendRequestStatus.ACCEPTED:
            await self._repo.ensure_edge(FriendEdge.between(request.sender_id, request.receiver_id))

        return request

    async def list_pending(self, user_id: str) -> list[FriendRequest]:
        return await self._repo.list_received(user_id, FriendRequestStatus.PENDING)

    async def list_sent(self, user_id: str) -> list[FriendRequest]:
        return await self._repo.list_sent(user_id, FriendRequestStatus.PENDING)

    async def list_friends(self, user_id: str) -> list[Profile]:
        """Profiles of everyone sharing a FriendEdge with user_id, sorted by name."""
        edges = await self._repo.list_edges(user_id)
        friend_ids = [edge.other(user_id) for edge in edges if edge.involves(user_id)]
        profiles = await self._profiles.get_profiles(friend_ids)
        friends = [profiles.get(fid) or Profile(id=fid) for fid in dict.fromkeys(friend_ids)]
        return sorted(friends, key=lambda p: p.display_name.lower())
