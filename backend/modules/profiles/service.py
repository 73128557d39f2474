"""
Profile Directory service.

Resolves user identities (id, display name, avatar) for every other component.
"""

import logging
from typing import Optional

from shared.exceptions import ConflictError
from shared.models import AuthenticatedUser

from .models import Profile, ProfileUpdate
from .repository import ProfileRepository
from .exceptions import ProfileNotFoundError, UsernameTakenError

logger = logging.getLogger(__name__)


class ProfileService:
    """Profile lookups plus the owner's create/update path."""

    def __init__(self, repository: ProfileRepository):
        self._repo = repository

    async def get_profile(self, profile_id: str) -> Profile:
        profile = await self._repo.get_by_id(profile_id)
        if profile is None:
            raise ProfileNotFoundError(profile_id)
        return profile

    async def get_profiles(self, profile_ids: list[str]) -> dict[str, Profile]:
        """Batch lookup keyed by id."""
        profiles = await self._repo.get_many(list(dict.fromkeys(profile_ids)))
        return {p.id: p for p in profiles}

    async def find_by_username(self, username: str) -> Profile:
        username = username.strip()
        profile = await self._repo.get_by_username(username) if username else None
        if profile is None:
            raise ProfileNotFoundError(username, field="username")
        return profile

    async def get_or_create_profile(self, user: AuthenticatedUser) -> Profile:
        """
        Return the user's profile, creating it on first visit.

        The platform normally creates the row at sign-up; this covers
        accounts that predate that hook.
        """
        profile = await self._repo.get_by_id(user.id)
        if profile is not None:
            return profile
        logger.info("Creating missing profile for user %s", user.id)
        return await self._repo.create(user.id, user.handle)

    async def update_profile(self, user_id: str, update: ProfileUpdate) -> Profile:
        """
        Update the owner's profile.

        A blank username is stored as null.
        """
        username = update.username.strip() if update.username else None
        try:
            profile = await self._repo.update(user_id, username or None, update.avatar_url or None)
        except ConflictError as e:
            raise UsernameTakenError(username or "") from e
        if profile is None:
            raise ProfileNotFoundError(user_id)
        return profile
