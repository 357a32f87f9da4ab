"""
Test Helpers
============

Shared test settings and sample payloads.
"""

from typing import Any

from pydantic_settings import SettingsConfigDict

from src.config.settings import Settings

SAMPLE_HTML = "<html><body><h1>Hello, World!</h1></body></html>"


# Test settings override
class TestSettings(Settings):
    """Test-specific settings."""

    __test__ = False

    environment: str = "testing"
    launch_browser_on_startup: bool = False
    rate_limit_max: int = 1000
    log_level: str = "WARNING"

    model_config = SettingsConfigDict(env_file=".env.test")


def make_settings(**overrides: Any) -> Settings:
    """Build test settings with field overrides."""
    return TestSettings(**overrides)
