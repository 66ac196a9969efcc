"""Configuration management for the Gong MCP server.

Settings are grouped by concern and loaded from the environment (and an
optional ``.env`` file) using Pydantic Settings.
"""

from typing import Self

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Valid logging levels
VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

DEFAULT_GONG_BASE_URL = "https://api.gong.io"


class MCPServerSettings(BaseSettings):
    """Main MCP server configuration."""

    model_config = SettingsConfigDict(
        env_prefix="MCP_", env_file=".env", extra="ignore"
    )

    server_name: str = Field(default="gong-mcp", description="MCP server name")

    version: str = Field(default="0.1.0", description="Server version")

    log_level: str = Field(default="INFO", description="Logging level")

    structured_logging: bool = Field(
        default=True, description="Enable structured JSON logging"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid Python logging level."""
        upper_v = v.upper()
        if upper_v not in VALID_LOG_LEVELS:
            raise ValueError(
                f"Invalid log level '{v}'. Must be one of: {sorted(VALID_LOG_LEVELS)}"
            )
        return upper_v

    @field_validator("server_name")
    @classmethod
    def validate_server_name(cls, v: str) -> str:
        """Validate server name is not empty."""
        if not v or not v.strip():
            raise ValueError("Server name cannot be empty")
        return v.strip()


class GongSettings(BaseSettings):
    """Gong API configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GONG_", env_file=".env", extra="ignore"
    )

    # Credentials
    access_key: str = Field(default="", description="Gong API access key")

    access_key_secret: str = Field(
        default="", description="Gong API access key secret"
    )

    base_url: str = Field(
        default=DEFAULT_GONG_BASE_URL, description="Gong API base URL"
    )

    # API settings
    api_timeout: int = Field(
        default=30, ge=5, le=120, description="API request timeout in seconds"
    )

    page_size: int = Field(
        default=100, ge=1, le=100, description="Records requested per page"
    )

    page_delay_seconds: float = Field(
        default=0.1,
        ge=0.0,
        le=5.0,
        description="Pause between paginated requests to avoid rate limiting",
    )

    # Caching settings
    user_cache_ttl_seconds: int = Field(
        default=3600,  # 1 hour
        ge=0,
        le=86400,
        description="How long the user directory snapshot stays fresh",
    )

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Strip trailing slashes so endpoint paths can be appended."""
        v = v.strip().rstrip("/")
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Invalid Gong base URL '{v}'. Must start with http(s)://")
        return v

    @model_validator(mode="after")
    def validate_gong_credentials(self) -> Self:
        """Validate that if one Gong credential is provided, both are."""
        if bool(self.access_key) != bool(self.access_key_secret):
            missing = (
                "GONG_ACCESS_KEY_SECRET" if self.access_key else "GONG_ACCESS_KEY"
            )
            raise ValueError(f"Incomplete Gong credentials. Missing: {missing}")
        return self

    @property
    def is_configured(self) -> bool:
        """Check if Gong credentials are fully configured."""
        return bool(self.access_key and self.access_key_secret)


class Settings:
    """Aggregated settings for the entire application."""

    def __init__(self) -> None:
        """Initialize all settings groups.

        Raises ValidationError if any group is invalid.
        """
        self.server = MCPServerSettings()
        self.gong = GongSettings()

    def validate(self) -> bool:
        """Validate settings required to serve requests.

        Returns:
            bool: True if all settings are valid

        Raises:
            ValueError: If any settings are invalid
        """
        if not self.gong.is_configured:
            raise ValueError(
                "GONG_ACCESS_KEY and GONG_ACCESS_KEY_SECRET environment variables are required"
            )
        return True

    @property
    def is_gong_configured(self) -> bool:
        """Check if Gong integration is fully configured."""
        return self.gong.is_configured


def get_settings() -> Settings:
    """Get or create global settings instance.

    Returns:
        Settings instance
    """
    global _settings
    if "_settings" not in globals():
        _settings = Settings()
    return _settings
