"""
Unit Tests for Settings and Logging Configuration
=================================================
"""

import pytest
from pydantic import ValidationError

from src.config.logging import get_logging_config
from src.config.settings import Settings


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Remove server variables that would leak into Settings."""
    for name in (
        "PORT",
        "HTML2IMG_PORT",
        "HTML2IMG_ALLOWED_ORIGINS",
        "HTML2IMG_ENVIRONMENT",
        "HTML2IMG_DEFAULT_WIDTH",
        "HTML2IMG_DEFAULT_HEIGHT",
        "HTML2IMG_DEFAULT_TIMEOUT_MS",
    ):
        monkeypatch.delenv(name, raising=False)


def build_settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


class TestSettings:
    """Test environment-driven configuration."""

    def test_defaults(self):
        """Test production-safe defaults."""
        settings = build_settings()
        assert settings.port == 3000
        assert settings.environment == "production"
        assert settings.allowed_origins == ["*"]
        assert settings.rate_limit_max == 100
        assert settings.rate_limit_window_seconds == 900
        assert settings.max_body_size == 10 * 1024 * 1024
        assert settings.max_width == 3840
        assert settings.max_height == 2160
        assert not settings.expose_error_details

    def test_port_from_plain_variable(self, monkeypatch):
        """Test the conventional PORT variable is honored."""
        monkeypatch.setenv("PORT", "8080")
        assert build_settings().port == 8080

    def test_prefixed_port_wins(self, monkeypatch):
        """Test the prefixed variable takes precedence over PORT."""
        monkeypatch.setenv("PORT", "8080")
        monkeypatch.setenv("HTML2IMG_PORT", "9090")
        assert build_settings().port == 9090

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("https://a.example,https://b.example", ["https://a.example", "https://b.example"]),
            (" https://a.example , ", ["https://a.example"]),
            ('["https://a.example"]', ["https://a.example"]),
            ("*", ["*"]),
            ("", ["*"]),
        ],
    )
    def test_allowed_origins_from_environment(self, monkeypatch, raw, expected):
        """Test comma-separated and JSON origin lists."""
        monkeypatch.setenv("HTML2IMG_ALLOWED_ORIGINS", raw)
        assert build_settings().allowed_origins == expected

    def test_environment_from_variable(self, monkeypatch):
        """Test the environment is read from the prefixed variable."""
        monkeypatch.setenv("HTML2IMG_ENVIRONMENT", "development")
        settings = build_settings()
        assert settings.environment == "development"
        assert settings.expose_error_details

    def test_default_viewport_from_environment(self, monkeypatch):
        """Test the default viewport and timeout are read from the environment."""
        monkeypatch.setenv("HTML2IMG_DEFAULT_WIDTH", "640")
        monkeypatch.setenv("HTML2IMG_DEFAULT_HEIGHT", "480")
        monkeypatch.setenv("HTML2IMG_DEFAULT_TIMEOUT_MS", "5000")
        settings = build_settings()
        assert (settings.default_width, settings.default_height) == (640, 480)
        assert settings.default_timeout_ms == 5000

    def test_invalid_environment(self):
        """Test unknown environments are rejected."""
        with pytest.raises(ValidationError):
            build_settings(environment="staging")

    def test_log_level_normalized(self):
        """Test log levels are upper-cased and validated."""
        assert build_settings(log_level="debug").log_level == "DEBUG"
        with pytest.raises(ValidationError):
            build_settings(log_level="chatty")

    def test_rate_limit_must_be_positive(self):
        """Test a zero limit is rejected."""
        with pytest.raises(ValidationError):
            build_settings(rate_limit_max=0)

    def test_log_dir_created(self, tmp_path):
        """Test the log directory is created on load."""
        log_dir = tmp_path / "logs" / "app"
        settings = build_settings(log_dir=log_dir)
        assert settings.log_dir == log_dir
        assert log_dir.is_dir()


class TestLoggingConfig:
    """Test the logging dictConfig per environment."""

    def test_production_uses_json(self):
        """Test production logs through the JSON formatter."""
        config = get_logging_config(build_settings())
        assert config["handlers"]["console"]["formatter"] == "json"
        assert "file" not in config["handlers"]

    def test_development_uses_plain_console(self):
        """Test development logs through the standard formatter."""
        config = get_logging_config(build_settings(environment="development"))
        assert config["handlers"]["console"]["formatter"] == "standard"

    def test_file_handlers_with_log_dir(self, tmp_path):
        """Test rotating file handlers are added when a log directory is set."""
        config = get_logging_config(build_settings(environment="development", log_dir=tmp_path))
        assert config["handlers"]["file"]["filename"] == str(tmp_path / "app.log")
        assert config["handlers"]["error_file"]["level"] == "ERROR"
        assert config["loggers"][""]["handlers"] == ["console", "file", "error_file"]

    def test_no_file_handlers_when_testing(self, tmp_path):
        """Test file handlers are skipped in the testing environment."""
        config = get_logging_config(build_settings(environment="testing", log_dir=tmp_path))
        assert set(config["handlers"]) == {"console"}
