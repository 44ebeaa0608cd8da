"""Tests for environment configuration."""

import os
from unittest.mock import patch

import pytest

from tokenserver.config import DEFAULT_POLL_INTERVAL_MS, load_settings, normalize_path
from tokenserver.feed.errors import ConfigError


class TestLoadSettings:
    """Tests for load_settings."""

    def test_missing_mint_is_fatal(self):
        """Test that JUP_TOKEN_MINT is required."""
        with pytest.raises(ConfigError, match="JUP_TOKEN_MINT"):
            load_settings({})

    def test_blank_mint_is_fatal(self):
        """Test that a whitespace-only mint is treated as missing."""
        with pytest.raises(ConfigError):
            load_settings({"JUP_TOKEN_MINT": "   "})

    def test_reads_os_environ_by_default(self):
        """Test that os.environ is used when no mapping is given."""
        with patch.dict(os.environ, {"JUP_TOKEN_MINT": " MINT "}, clear=True):
            settings = load_settings()

        assert settings.mint == "MINT"

    def test_defaults(self):
        """Test the defaults when only the mint is set."""
        settings = load_settings({"JUP_TOKEN_MINT": "MINT"})

        assert settings.poll_interval_ms == DEFAULT_POLL_INTERVAL_MS
        assert settings.poll_interval == 3.0
        assert settings.host == "0.0.0.0"
        assert settings.port == 4020
        assert settings.token_path == "/token"
        assert settings.price_path == "/jupiter-price"
        assert settings.cors_origin == "*"
        assert settings.price_enabled is True
        assert settings.log_level == "INFO"

    def test_overrides(self):
        """Test that every setting can be overridden."""
        settings = load_settings(
            {
                "JUP_TOKEN_MINT": "MINT",
                "TOKEN_POLL_INTERVAL_MS": "500",
                "TOKEN_SERVER_HOST": "127.0.0.1",
                "TOKEN_SERVER_PORT": "8080",
                "TOKEN_SERVER_PATH": "feed",
                "JUPITER_PRICE_PATH": "/price",
                "TOKEN_SERVER_CORS": "https://example.com",
                "JUPITER_PRICE_ENABLED": "0",
                "HTTP_TIMEOUT_SECONDS": "2.5",
                "LOG_LEVEL": "debug",
            }
        )

        assert settings.poll_interval == 0.5
        assert settings.host == "127.0.0.1"
        assert settings.port == 8080
        assert settings.token_path == "/feed"
        assert settings.price_path == "/price"
        assert settings.cors_origin == "https://example.com"
        assert settings.price_enabled is False
        assert settings.http_timeout == 2.5
        assert settings.log_level == "DEBUG"

    @pytest.mark.parametrize("value", ["abc", "0", "-5", "1.5"])
    def test_invalid_interval(self, value):
        """Test that a bad poll interval is a config error."""
        with pytest.raises(ConfigError, match="TOKEN_POLL_INTERVAL_MS"):
            load_settings({"JUP_TOKEN_MINT": "MINT", "TOKEN_POLL_INTERVAL_MS": value})

    def test_invalid_timeout(self):
        """Test that a bad HTTP timeout is a config error."""
        with pytest.raises(ConfigError, match="HTTP_TIMEOUT_SECONDS"):
            load_settings({"JUP_TOKEN_MINT": "MINT", "HTTP_TIMEOUT_SECONDS": "soon"})

    def test_send_timeout(self):
        """Test the WebSocket send timeout default and override."""
        assert load_settings({"JUP_TOKEN_MINT": "MINT"}).send_timeout == 5.0
        settings = load_settings({"JUP_TOKEN_MINT": "MINT", "WS_SEND_TIMEOUT_SECONDS": "0.5"})
        assert settings.send_timeout == 0.5

    def test_invalid_send_timeout(self):
        """Test that a bad send timeout is a config error."""
        with pytest.raises(ConfigError, match="WS_SEND_TIMEOUT_SECONDS"):
            load_settings({"JUP_TOKEN_MINT": "MINT", "WS_SEND_TIMEOUT_SECONDS": "-1"})

    @pytest.mark.parametrize("value", ["FOO", "verbose", "10"])
    def test_invalid_log_level(self, value):
        """Test that an unknown LOG_LEVEL is a config error rather than a startup crash."""
        with pytest.raises(ConfigError, match="LOG_LEVEL"):
            load_settings({"JUP_TOKEN_MINT": "MINT", "LOG_LEVEL": value})

    def test_log_level_case_insensitive(self):
        """Test that LOG_LEVEL is normalized to upper case."""
        settings = load_settings({"JUP_TOKEN_MINT": "MINT", "LOG_LEVEL": " warning "})
        assert settings.log_level == "WARNING"


class TestNormalizePath:
    """Tests for route path normalization."""

    def test_adds_leading_slash(self):
        assert normalize_path("token", "/x") == "/token"

    def test_keeps_leading_slash(self):
        assert normalize_path("/token", "/x") == "/token"

    def test_empty_uses_fallback(self):
        assert normalize_path("", "/token") == "/token"
        assert normalize_path(None, "/token") == "/token"
