"""
Database client factory for Supabase.

The client runs as the signed-in user (anon key plus the user's session),
so every query is subject to Row Level Security on the platform side.
Realtime subscriptions need the async client, so only AsyncClient is used.
"""

from typing import Optional
from supabase import acreate_client, AsyncClient

from .config import get_settings

# Module-level client cache
_client: Optional[AsyncClient] = None


async def get_supabase_client() -> AsyncClient:
    """
    Get the shared Supabase client.

    Created lazily on first use with the anon key. After sign-in the
    platform auth layer attaches the user's session to this same client.

    Returns:
        Supabase async client
    """
    global _client

    if _client is None:
        settings = get_settings()
        if not settings.supabase_url or not settings.supabase_anon_key:
            raise RuntimeError(
                "Supabase configuration missing. "
                "Set SUPABASE_URL and SUPABASE_ANON_KEY environment variables."
            )
        _client = await acreate_client(
            settings.supabase_url,
            settings.supabase_anon_key,
        )

    return _client


def reset_client_cache() -> None:
    """
    Reset the cached database client.

    Useful for testing or after sign-out.
    """
    global _client
    _client = None
