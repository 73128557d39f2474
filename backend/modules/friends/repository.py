"""
Friendship repository for database access.

Encapsulates all Supabase queries and data mapping for:
- friend_requests
- friendships (user1_id < user2_id)
"""

from datetime import datetime, timezone
from typing import Optional, Any

from shared.repository import BaseRepository
from modules.profiles.models import Profile
from .models import FriendEdge, FriendRequest, FriendRequestStatus


SENDER_JOIN = "sender:profiles!friend_requests_sender_id_fkey(id, username, avatar_url)"
RECEIVER_JOIN = "receiver:profiles!friend_requests_receiver_id_fkey(id, username, avatar_url)"


class FriendRepository(BaseRepository[FriendRequest]):
    """
    Repository for friend requests and friendship edges.

    Note: This repository does NOT perform authorization checks.
    The service layer verifies who may answer a request.
    """

    # -------------------------------------------------------------------------
    # Friend requests
    # -------------------------------------------------------------------------

    async def create_request(self, sender_id: str, receiver_id: str) -> FriendRequest:
        data = {
            "sender_id": sender_id,
            "receiver_id": receiver_id,
            "status": FriendRequestStatus.PENDING.value,
        }
        query = self._db.table("friend_requests").insert(data)
        result = await self._run(query, "send friend request", write=True)
        return self._map_to_request(result.data[0])

    async def get_request(self, request_id: str) -> Optional[FriendRequest]:
        query = self._db.table("friend_requests").select("*").eq("id", request_id)
        result = await self._run(query, "load friend request")
        if not result.data:
            return None
        return self._map_to_request(result.data[0])

    async def transition_pending(
        self,
        request_id: str,
        status: FriendRequestStatus,
    ) -> Optional[FriendRequest]:
        """
        Move a request out of pending.

        The update is filtered on status=pending so a request can leave
        pending only once. Returns None when nothing matched.
        """
        data = {
            "status": status.value,
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }
        query = (
            self._db.table("friend_requests")
            .update(data)
            .eq("id", request_id)
            .eq("status", FriendRequestStatus.PENDING.value)
        )
        result = await self._run(query, "answer friend request", write=True)
        if not result.data:
            return None
        return self._map_to_request(result.data[0])

    async def list_received(self, user_id: str, status: FriendRequestStatus) -> list[FriendRequest]:
        query = (
            self._db.table("friend_requests")
            .select(f"*, {SENDER_JOIN}")
            .eq("receiver_id", user_id)
            .eq("status", status.value)
            .order("created_at", desc=True)
        )
        result = await self._run(query, "load friend requests")
        return [self._map_to_request(row) for row in result.data]

    async def list_sent(self, user_id: str, status: FriendRequestStatus) -> list[FriendRequest]:
        query = (
            self._db.table("friend_requests")
            .select(f"*, {RECEIVER_JOIN}")
            .eq("sender_id", user_id)
            .eq("status", status.value)
            .order("created_at", desc=True)
        )
        result = await self._run(query, "load sent friend requests")
        return [self._map_to_request(row) for row in result.data]

    # -------------------------------------------------------------------------
    # Friendship edges
    # -------------------------------------------------------------------------

    async def ensure_edge(self, edge: FriendEdge) -> None:
        """Insert the edge unless it already exists."""
        data = {"user1_id": edge.user_a, "user2_id": edge.user_b}
        query = self._db.table("friendships").upsert(
            data,
            on_conflict="user1_id,user2_id",
            ignore_duplicates=True,
        )
        await self._run(query, "create friendship", write=True)

    async def list_edges(self, user_id: str) -> list[FriendEdge]:
        query = (
            self._db.table("friendships")
            .select("user1_id, user2_id")
            .or_(f"user1_id.eq.{user_id},user2_id.eq.{user_id}")
        )
        result = await self._run(query, "load friends")
        return [
            FriendEdge(user_a=str(row["user1_id"]), user_b=str(row["user2_id"]))
            for row in result.data
        ]

    async def edge_exists(self, edge: FriendEdge) -> bool:
        query = (
            self._db.table("friendships")
            .select("user1_id")
            .eq("user1_id", edge.user_a)
            .eq("user2_id", edge.user_b)
        )
        result = await self._run(query, "check friendship")
        return bool(result.data)

    # -------------------------------------------------------------------------
    # Private mapping methods
    # -------------------------------------------------------------------------

    def _map_to_request(self, data: dict[str, Any]) -> FriendRequest:
        """Map database row to FriendRequest model, with joined profiles if present."""
        return FriendRequest(
            id=str(data["id"]),
            sender_id=str(data["sender_id"]),
            receiver_id=str(data["receiver_id"]),
            status=FriendRequestStatus(data.get("status") or FriendRequestStatus.PENDING.value),
            created_at=data["created_at"],
            updated_at=data.get("updated_at") or data["created_at"],
            sender=self._map_joined_profile(data.get("sender")),
            receiver=self._map_joined_profile(data.get("receiver")),
        )

    @staticmethod
    def _map_joined_profile(data: Optional[dict[str, Any]]) -> Optional[Profile]:
        if not data:
            return None
        return Profile(
            id=str(data["id"]),
            username=data.get("username"),
            avatar_url=data.get("avatar_url"),
        )
