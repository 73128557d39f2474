"""
Profile Directory exceptions.
"""

from shared.exceptions import NotFoundError, ConflictError


class ProfileNotFoundError(NotFoundError):
    """Raised when no profile matches a lookup."""

    def __init__(self, key: str, field: str = "id"):
        super().__init__(
            "User not found",
            code="PROFILE_NOT_FOUND",
            details={field: key},
        )


class UsernameTakenError(ConflictError):
    """Raised when a username is already used by someone else."""

    def __init__(self, username: str):
        super().__init__(
            f"Username is already taken: {username}",
            code="USERNAME_TAKEN",
            details={"username": username},
        )
