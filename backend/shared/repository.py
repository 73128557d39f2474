"""
Base repository class for database access.

Provides a common abstraction layer for all repositories, encapsulating
Supabase client access, the store timeout, and the translation of
platform errors into the Huddle error taxonomy.
"""

import asyncio
from typing import Any, TypeVar, Generic

import httpx
from postgrest.exceptions import APIError
from supabase import AsyncClient

from .config import get_settings
from .exceptions import (
    AuthorizationError,
    ConflictError,
    FetchError,
    StoreTimeoutError,
    StoreWriteError,
)


T = TypeVar("T")

# PostgreSQL / PostgREST error codes
UNIQUE_VIOLATION = "23505"
AUTHORIZATION_CODES = {"42501", "PGRST301", "401", "403"}


class BaseRepository(Generic[T]):
    """
    Base class for all repositories.

    Provides common functionality for database operations:
    - Supabase client access via self._db
    - _run() to execute a query with a timeout and mapped errors
    - Generic type parameter for model type hints

    Subclasses should implement domain-specific data access methods
    and handle dict-to-Pydantic model mapping internally.

    Example:
        class ProfileRepository(BaseRepository[Profile]):
            async def get_by_id(self, profile_id: str) -> Optional[Profile]:
                query = self._db.table("profiles").select("*").eq("id", profile_id)
                result = await self._run(query, "load profile")
                if not result.data:
                    return None
                return self._map_to_profile(result.data[0])
    """

    def __init__(self, db: AsyncClient, timeout: float | None = None) -> None:
        """
        Initialize the repository with a Supabase client.

        Args:
            db: Supabase client instance for database operations.
            timeout: Seconds before a query is abandoned. Defaults to
                Settings.store_timeout_seconds.
        """
        self._db = db
        self._timeout = timeout if timeout is not None else get_settings().store_timeout_seconds

    async def _run(self, query: Any, operation: str, write: bool = False) -> Any:
        """
        Execute a query builder and return its response.

        Args:
            query: A PostgREST request builder (anything with execute()).
            operation: Short description used in error messages.
            write: Whether the query mutates data. Selects between
                StoreWriteError and FetchError for unclassified failures.

        Raises:
            StoreTimeoutError: The call exceeded the timeout.
            ConflictError: A unique constraint was violated.
            AuthorizationError: Row Level Security rejected the call.
            StoreWriteError / FetchError: Any other platform failure.
        """
        try:
            return await asyncio.wait_for(query.execute(), timeout=self._timeout)
        except asyncio.TimeoutError:
            raise StoreTimeoutError(operation, self._timeout)
        except APIError as e:
            raise self._translate(e, operation, write) from e
        except (httpx.HTTPError, OSError) as e:
            error_cls = StoreWriteError if write else FetchError
            raise error_cls(f"Failed to {operation}: {e}", details={"operation": operation}) from e

    @staticmethod
    def _translate(error: APIError, operation: str, write: bool) -> Exception:
        """Map a PostgREST APIError onto the error taxonomy."""
        code = str(error.code or "")
        details = {"operation": operation, "store_code": code}
        if code == UNIQUE_VIOLATION:
            return ConflictError(
                f"Failed to {operation}: already exists",
                code="CONFLICT",
                details=details,
            )
        if code in AUTHORIZATION_CODES:
            return AuthorizationError(
                f"Not allowed to {operation}",
                code="NOT_AUTHORIZED",
                details=details,
            )
        error_cls = StoreWriteError if write else FetchError
        return error_cls(f"Failed to {operation}: {error.message}", details=details)
