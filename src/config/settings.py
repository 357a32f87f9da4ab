"""
Application Settings
===================

Main application settings and environment configuration using Pydantic Settings.
Supports development, testing, and production environments.
"""

from typing import Annotated, Optional, List, Union
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
import json
from pathlib import Path


class Settings(BaseSettings):
    """Main application settings with environment variable support."""

    # Application Configuration
    app_name: str = Field(default="HTML to Image API", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(
        default="production", description="Environment: development, testing, production"
    )
    debug: bool = Field(default=False, description="Debug mode (enables API docs)")

    # Server Configuration
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(
        default=3000,
        description="Server port",
        validation_alias=AliasChoices("HTML2IMG_PORT", "PORT"),
    )

    # Rendering Configuration
    default_width: int = Field(default=1280, gt=0, description="Default viewport width")
    default_height: int = Field(default=720, gt=0, description="Default viewport height")
    max_width: int = Field(default=3840, description="Maximum viewport width")
    max_height: int = Field(default=2160, description="Maximum viewport height")
    default_timeout_ms: int = Field(
        default=30000, gt=0, description="Default load/wait timeout in milliseconds"
    )

    # Browser Configuration
    playwright_headless: bool = Field(default=True, description="Run browser in headless mode")
    launch_browser_on_startup: bool = Field(
        default=True, description="Launch the shared browser when the server starts"
    )

    # Security Configuration
    allowed_origins: Annotated[List[str], NoDecode] = Field(
        default=["*"], description="Allowed origins for CORS"
    )
    rate_limit_max: int = Field(
        default=100, gt=0, description="Maximum requests per client per window"
    )
    rate_limit_window_seconds: int = Field(
        default=15 * 60, gt=0, description="Rate limit window in seconds"
    )
    max_body_size: int = Field(
        default=10 * 1024 * 1024, gt=0, description="Maximum request body size in bytes"
    )

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_dir: Optional[Path] = Field(default=None, description="Directory for rotating log files")

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        allowed = {"development", "testing", "production"}
        if v not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"Log level must be one of: {allowed}")
        return v.upper()

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def parse_allowed_origins(cls, v: Union[str, List[str], None]) -> List[str]:
        """Parse allowed origins from string or list."""
        if v is None:
            return ["*"]
        if isinstance(v, str):
            # Handle JSON-like string: ["*"] or ["https://a", "https://b"]
            v = v.strip()
            if v.startswith("[") and v.endswith("]"):
                try:
                    return json.loads(v)
                except json.JSONDecodeError:
                    pass
            # Handle comma-separated string: "*" or "https://a,https://b"
            origins = [origin.strip() for origin in v.split(",") if origin.strip()]
            return origins or ["*"]
        return v

    @field_validator("log_dir")
    @classmethod
    def create_log_dir(cls, v: Optional[Path]) -> Optional[Path]:
        """Ensure the log directory exists."""
        if v is not None:
            v.mkdir(parents=True, exist_ok=True)
        return v

    @property
    def expose_error_details(self) -> bool:
        """Whether underlying error text is echoed back to clients."""
        return self.environment == "development"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_prefix="HTML2IMG_",
        extra="ignore",
        populate_by_name=True,
    )


# Global settings instance - will be initialized when needed
settings = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global settings
    if settings is None:
        settings = Settings()
    return settings
