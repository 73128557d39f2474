"""
Profile repository for database access.

Encapsulates all Supabase queries and data mapping for the profiles table.
"""

from datetime import datetime, timezone
from typing import Optional, Any

from shared.repository import BaseRepository
from .models import Profile


PROFILE_COLUMNS = "id, username, avatar_url, created_at, updated_at"


class ProfileRepository(BaseRepository[Profile]):
    """
    Repository for profile data access.

    Note: This repository does NOT perform authorization checks.
    Row Level Security on the platform only lets owners update their row.
    """

    async def get_by_id(self, profile_id: str) -> Optional[Profile]:
        query = self._db.table("profiles").select(PROFILE_COLUMNS).eq("id", profile_id)
        result = await self._run(query, "load profile")
        if not result.data:
            return None
        return self._map_to_profile(result.data[0])

    async def get_many(self, profile_ids: list[str]) -> list[Profile]:
        """Load several profiles in one round trip. Unknown ids are skipped."""
        if not profile_ids:
            return []
        query = self._db.table("profiles").select(PROFILE_COLUMNS).in_("id", profile_ids)
        result = await self._run(query, "load profiles")
        return [self._map_to_profile(row) for row in result.data]

    async def get_by_username(self, username: str) -> Optional[Profile]:
        query = self._db.table("profiles").select(PROFILE_COLUMNS).eq("username", username)
        result = await self._run(query, "find user")
        if not result.data:
            return None
        return self._map_to_profile(result.data[0])

    async def create(self, profile_id: str, username: Optional[str]) -> Profile:
        data = {"id": profile_id, "username": username, "avatar_url": None}
        query = self._db.table("profiles").insert(data)
        result = await self._run(query, "create profile", write=True)
        return self._map_to_profile(result.data[0])

    async def update(
        self,
        profile_id: str,
        username: Optional[str],
        avatar_url: Optional[str],
    ) -> Optional[Profile]:
        data = {
            "username": username,
            "avatar_url": avatar_url,
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }
        query = self._db.table("profiles").update(data).eq("id", profile_id)
        result = await self._run(query, "update profile", write=True)
        if not result.data:
            return None
        return self._map_to_profile(result.data[0])

    def _map_to_profile(self, data: dict[str, Any]) -> Profile:
        """Map database row to Profile model."""
        return Profile(
            id=str(data["id"]),
            username=data.get("username"),
            avatar_url=data.get("avatar_url"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )
