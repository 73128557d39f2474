"""
Shared infrastructure for Huddle.

This package contains cross-cutting concerns that are used by multiple modules:
- config: Centralized settings management
- database: Supabase client factory
- exceptions: Base exception classes
- repository: Base repository with timeout and error mapping

Note: Business logic should NOT go here. This is for infrastructure only.
"""

from .config import Settings, get_settings
from .database import get_supabase_client, reset_client_cache
from .exceptions import (
    HuddleError,
    ValidationError,
    NotFoundError,
    FetchError,
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    StoreWriteError,
    StoreTimeoutError,
    TransportError,
    ExternalServiceError,
)
from .models import AuthenticatedUser

__all__ = [
    "Settings",
    "get_settings",
    "get_supabase_client",
    "reset_client_cache",
    "HuddleError",
    "ValidationError",
    "NotFoundError",
    "FetchError",
    "AuthenticationError",
    "AuthorizationError",
    "ConflictError",
    "StoreWriteError",
    "StoreTimeoutError",
    "TransportError",
    "ExternalServiceError",
    "AuthenticatedUser",
]
