"""
Authentication module interface.

Other modules should depend on IAuthService, not the concrete implementation.
This enables testing with mocks.
"""

from typing import Protocol, runtime_checkable

from shared.models import AuthenticatedUser
from .models import AuthSession


@runtime_checkable
class IAuthService(Protocol):
    """
    Interface for identity operations.

    The identity service supplies the current user's stable id and email.
    Everything else in Huddle treats that as a read-only fact.
    """

    async def sign_in(self, email: str, password: str) -> AuthSession:
        """
        Sign in with email and password.

        Returns:
            AuthSession for the signed-in user

        Raises:
            InvalidCredentialsError: If the platform rejects the credentials
        """
        ...

    async def validate_token(self, token: str) -> AuthenticatedUser:
        """
        Validate a JWT token and return the authenticated user.

        Args:
            token: JWT access token from Supabase Auth

        Returns:
            AuthenticatedUser with user ID and basic info

        Raises:
            AuthenticationError: If token is invalid or expired
        """
        ...

    async def sign_out(self) -> None:
        """End the current platform session."""
        ...
