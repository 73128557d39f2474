"""Tests for modules/friends/service.py."""

import itertools
from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from shared.exceptions import ConflictError
from modules.friends.exceptions import (
    AlreadyFriendsError,
    DuplicateFriendRequestError,
    FriendRequestAccessDeniedError,
    FriendRequestNotFoundError,
    InvalidFriendRequestStatusError,
    SelfFriendRequestError,
)
from modules.friends.models import FriendEdge, FriendRequest, FriendRequestStatus
from modules.friends.service import FriendsService
from modules.profiles.exceptions import ProfileNotFoundError
from modules.profiles.models import Profile

NOW = datetime(2025, 6, 28, tzinfo=timezone.utc)


class InMemoryFriendRepository:
    """Mirrors the table constraints: unique (sender, receiver) and unique edges."""

    def __init__(self):
        self.requests: dict[str, FriendRequest] = {}
        self.edges: list[FriendEdge] = []
        self._ids = itertools.count(1)

    async def create_request(self, sender_id, receiver_id):
        if any(r.sender_id == sender_id and r.receiver_id == receiver_id for r in self.requests.values()):
            raise ConflictError("duplicate", code="CONFLICT")
        request = FriendRequest(
            id=f"req-{next(self._ids)}",
            sender_id=sender_id,
            receiver_id=receiver_id,
            created_at=NOW,
            updated_at=NOW,
        )
        self.requests[request.id] = request
        return request

    async def get_request(self, request_id):
        return self.requests.get(request_id)

    async def transition_pending(self, request_id, status):
        request = self.requests.get(request_id)
        if request is None or not request.is_pending:
            return None
        updated = request.model_copy(update={"status": status})
        self.requests[request_id] = updated
        return updated

    async def list_received(self, user_id, status):
        return [r for r in self.requests.values() if r.receiver_id == user_id and r.status == status]

    async def list_sent(self, user_id, status):
        return [r for r in self.requests.values() if r.sender_id == user_id and r.status == status]

    async def ensure_edge(self, edge):
        if edge not in self.edges:
            self.edges.append(edge)

    async def list_edges(self, user_id):
        return [e for e in self.edges if e.involves(user_id)]

    async def edge_exists(self, edge):
        return edge in self.edges


PROFILES = {
    "alice": Profile(id="u-alice", username="alice"),
    "bob": Profile(id="u-bob", username="bob"),
    "zed": Profile(id="u-zed", username="Zed"),
}


@pytest.fixture
def profiles():
    service = AsyncMock()

    async def find_by_username(username):
        if username not in PROFILES:
            raise ProfileNotFoundError(username, field="username")
        return PROFILES[username]

    async def get_profiles(ids):
        return {p.id: p for p in PROFILES.values() if p.id in ids}

    service.find_by_username.side_effect = find_by_username
    service.get_profiles.side_effect = get_profiles
    return service


@pytest.fixture
def repo():
    return InMemoryFriendRepository()


@pytest.fixture
def service(repo, profiles):
    return FriendsService(repo, profiles)


class TestSendRequest:
    @pytest.mark.asyncio
    async def test_sends_request_with_receiver_profile(self, service):
        request = await service.send_request("u-alice", "bob")
        assert request.receiver_id == "u-bob"
        assert request.receiver.username == "bob"
        assert request.is_pending

    @pytest.mark.asyncio
    async def test_self_request_is_rejected(self, service, repo):
        with pytest.raises(SelfFriendRequestError):
            await service.send_request("u-alice", "alice")
        assert repo.requests == {}

    @pytest.mark.asyncio
    async def test_unknown_username(self, service):
        with pytest.raises(ProfileNotFoundError):
            await service.send_request("u-alice", "nobody")

    @pytest.mark.asyncio
    async def test_duplicate_request_is_a_conflict(self, service):
        await service.send_request("u-alice", "bob")
        with pytest.raises(DuplicateFriendRequestError) as exc:
            await service.send_request("u-alice", "bob")
        assert exc.value.message == "Friend request already sent"

    @pytest.mark.asyncio
    async def test_already_friends(self, service, repo):
        await repo.ensure_edge(FriendEdge.between("u-alice", "u-bob"))
        with pytest.raises(AlreadyFriendsError):
            await service.send_request("u-alice", "bob")


class TestRespond:
    @pytest.mark.asyncio
    async def test_accept_creates_one_edge(self, service, repo):
        request = await service.send_request("u-alice", "bob")
        accepted = await service.respond("u-bob", request.id, FriendRequestStatus.ACCEPTED)

        assert accepted.status == FriendRequestStatus.ACCEPTED
        assert repo.edges == [FriendEdge.between("u-alice", "u-bob")]

    @pytest.mark.asyncio
    async def test_double_accept_keeps_a_single_edge(self, service, repo):
        """Accepting the same request twice never duplicates the edge."""
        request = await service.send_request("u-alice", "bob")
        await service.respond("u-bob", request.id, FriendRequestStatus.ACCEPTED)
        await service.respond("u-bob", request.id, FriendRequestStatus.ACCEPTED)

        assert len(repo.edges) == 1

    @pytest.mark.asyncio
    async def test_reject_after_accept_keeps_accepted(self, service, repo):
        request = await service.send_request("u-alice", "bob")
        await service.respond("u-bob", request.id, FriendRequestStatus.ACCEPTED)
        result = await service.respond("u-bob", request.id, FriendRequestStatus.REJECTED)

        assert result.status == FriendRequestStatus.ACCEPTED
        assert len(repo.edges) == 1

    @pytest.mark.asyncio
    async def test_reject_creates_no_edge(self, service, repo):
        request = await service.send_request("u-alice", "bob")
        await service.respond("u-bob", request.id, FriendRequestStatus.REJECTED)
        assert repo.edges == []

    @pytest.mark.asyncio
    async def test_only_receiver_may_answer(self, service):
        request = await service.send_request("u-alice", "bob")
        with pytest.raises(FriendRequestAccessDeniedError):
            await service.respond("u-alice", request.id, FriendRequestStatus.ACCEPTED)

    @pytest.mark.asyncio
    async def test_missing_request(self, service):
        with pytest.raises(FriendRequestNotFoundError):
            await service.respond("u-bob", "req-404", FriendRequestStatus.ACCEPTED)

    @pytest.mark.asyncio
    async def test_pending_is_not_a_response(self, service):
        with pytest.raises(InvalidFriendRequestStatusError):
            await service.respond("u-bob", "req-1", FriendRequestStatus.PENDING)


class TestListing:
    @pytest.mark.asyncio
    async def test_list_friends_sorted_by_name(self, service, repo):
        await repo.ensure_edge(FriendEdge.between("u-alice", "u-zed"))
        await repo.ensure_edge(FriendEdge.between("u-alice", "u-bob"))
        friends = await service.list_friends("u-alice")
        assert [f.username for f in friends] == ["bob", "Zed"]

    @pytest.mark.asyncio
    async def test_list_friends_keeps_unknown_profiles(self, service, repo):
        await repo.ensure_edge(FriendEdge.between("u-alice", "u-ghost"))
        [ghost] = await service.list_friends("u-alice")
        assert ghost.display_name == "Unknown User"

    @pytest.mark.asyncio
    async def test_pending_and_sent(self, service):
        await service.send_request("u-alice", "bob")
        assert len(await service.list_pending("u-bob")) == 1
        assert len(await service.list_sent("u-alice")) == 1
        assert await service.list_pending("u-alice") == []
