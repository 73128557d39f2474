"""
Authentication module.

Identity service: signs the user in and resolves who "self" is.

Public API:
- IAuthService: Interface for auth operations
- AuthSession: Signed-in user plus tokens
- Auth exceptions: InvalidTokenError, ExpiredTokenError, etc.
"""

from .interfaces import IAuthService
from .models import AuthSession, JWTPayload
from .exceptions import (
    InvalidTokenError,
    ExpiredTokenError,
    MissingTokenError,
    InvalidCredentialsError,
)

__all__ = [
    # Interface
    "IAuthService",
    # Models
    "AuthSession",
    "JWTPayload",
    # Exceptions
    "InvalidTokenError",
    "ExpiredTokenError",
    "MissingTokenError",
    "InvalidCredentialsError",
]
