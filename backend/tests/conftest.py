"""Pytest configuration and fixtures."""

import pytest

from tokenserver.config import Settings, load_settings

TEST_MINT = "So11111111111111111111111111111111111111112"


@pytest.fixture
def settings() -> Settings:
    """Settings for a test server with a short poll interval."""
    return load_settings(
        {
            "JUP_TOKEN_MINT": TEST_MINT,
            "TOKEN_POLL_INTERVAL_MS": "50",
        }
    )
