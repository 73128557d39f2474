"""
Profile Directory module.

Public API:
- ProfileService: lookups and owner updates
- Profile, ProfileUpdate
"""

from .models import Profile, ProfileUpdate
from .service import ProfileService
from .exceptions import ProfileNotFoundError, UsernameTakenError

__all__ = [
    "Profile",
    "ProfileUpdate",
    "ProfileService",
    "ProfileNotFoundError",
    "UsernameTakenError",
]
