"""
Centralized configuration for the Huddle client.

All settings are loaded from environment variables with sensible defaults.
Module-specific settings should be namespaced (e.g., SUPABASE_*, REALTIME_*).
"""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Huddle"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # Supabase
    supabase_url: str = ""
    supabase_anon_key: str = ""
    supabase_jwt_secret: str = ""

    # Data store
    store_timeout_seconds: float = 10.0

    # Realtime
    realtime_resubscribe_delay_seconds: float = 1.0
    realtime_max_resubscribe_attempts: int = 5

    # Attachments
    storage_bucket: str = "uploads"
    max_attachment_bytes: int = 10 * 1024 * 1024

    # Messaging
    max_message_length: int = 500

    # Chat room and post feed
    chat_max_length: int = 200
    chat_history_limit: int = 100
    post_max_length: int = 1000
    feed_limit: int = 50

    # Games
    rps_rounds_to_win: int = 2

    # Notification look-back windows
    recent_posts_window_hours: int = 24
    recent_chat_window_hours: int = 1


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
