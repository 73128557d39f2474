"""Tests for shared/config.py."""

import os
from unittest.mock import patch

from shared.config import Settings, get_settings


class TestSettings:
    def test_default_values(self):
        """Settings should have sensible defaults."""
        settings = Settings(_env_file=None)
        assert settings.app_name == "Huddle"
        assert settings.debug is False
        assert settings.app_version == "0.1.0"
        assert settings.max_message_length == 500
        assert settings.storage_bucket == "uploads"
        assert settings.rps_rounds_to_win == 2

    def test_notification_windows(self):
        """Look-back windows default to a day for posts and an hour for chat."""
        settings = Settings(_env_file=None)
        assert settings.recent_posts_window_hours == 24
        assert settings.recent_chat_window_hours == 1

    def test_loads_from_env(self):
        """Settings should load from environment variables."""
        with patch.dict(os.environ, {"DEBUG": "true", "MAX_MESSAGE_LENGTH": "120"}):
            settings = Settings(_env_file=None)
            assert settings.debug is True
            assert settings.max_message_length == 120

    def test_loads_supabase_config_from_env(self):
        """Settings should load Supabase configuration from environment variables."""
        with patch.dict(os.environ, {
            "SUPABASE_URL": "https://test.supabase.co",
            "SUPABASE_ANON_KEY": "test-anon-key",
        }):
            settings = Settings(_env_file=None)
            assert settings.supabase_url == "https://test.supabase.co"
            assert settings.supabase_anon_key == "test-anon-key"

    def test_loads_store_timeout_from_env(self):
        with patch.dict(os.environ, {"STORE_TIMEOUT_SECONDS": "2.5"}):
            assert Settings(_env_file=None).store_timeout_seconds == 2.5


class TestGetSettings:
    def test_get_settings_returns_settings_instance(self):
        """get_settings should return a Settings instance."""
        get_settings.cache_clear()
        settings = get_settings()
        assert isinstance(settings, Settings)

    def test_get_settings_is_cached(self):
        """get_settings should return the same instance on repeated calls."""
        get_settings.cache_clear()
        assert get_settings() is get_settings()
