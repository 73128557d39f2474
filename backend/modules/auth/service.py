"""
Authentication service implementation.

Signs in through Supabase Auth and validates the resulting JWTs.
"""

import logging
from datetime import datetime, timezone
from typing import Optional
import jwt

from supabase import AsyncClient, AuthError

from shared.config import get_settings
from shared.models import AuthenticatedUser

from .interfaces import IAuthService
from .models import AuthSession, JWTPayload
from .exceptions import (
    InvalidCredentialsError,
    InvalidTokenError,
    ExpiredTokenError,
    MissingTokenError,
)

logger = logging.getLogger(__name__)


class AuthService(IAuthService):
    """
    Implementation of the identity service.

    Uses Supabase Auth for sign-in and the project JWT secret to decode
    access tokens into AuthenticatedUser objects.
    """

    def __init__(self, supabase_client: AsyncClient):
        self._settings = get_settings()
        self._db = supabase_client

    async def sign_in(self, email: str, password: str) -> AuthSession:
        """Sign in with email and password and resolve the user from the token."""
        try:
            response = await self._db.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except AuthError as e:
            logger.info("Sign-in rejected for %s: %s", email, e)
            raise InvalidCredentialsError() from e

        if response.session is None:
            raise InvalidCredentialsError()

        user = await self.validate_token(response.session.access_token)
        return AuthSession(
            user=user,
            access_token=response.session.access_token,
            refresh_token=response.session.refresh_token or "",
        )

    async def validate_token(self, token: Optional[str]) -> AuthenticatedUser:
        """
        Validate a JWT token and return the authenticated user.

        This implementation validates Supabase JWTs using the JWT secret.
        """
        if not token:
            raise MissingTokenError()

        try:
            payload = jwt.decode(
                token,
                self._settings.supabase_jwt_secret,
                algorithms=["HS256"],
                audience="authenticated",
            )

            jwt_payload = JWTPayload(**payload)

            return AuthenticatedUser(
                id=jwt_payload.sub,
                email=jwt_payload.email or "",
                email_verified=jwt_payload.email_confirmed_at is not None,
                last_sign_in=datetime.fromtimestamp(jwt_payload.iat, tz=timezone.utc),
                role=jwt_payload.role if jwt_payload.role != "authenticated" else "user",
            )

        except jwt.ExpiredSignatureError:
            raise ExpiredTokenError()
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError(str(e))

    async def sign_out(self) -> None:
        """End the platform session."""
        await self._db.auth.sign_out()
