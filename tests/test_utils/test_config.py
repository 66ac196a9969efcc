"""Tests for configuration management."""

import pytest
from pydantic import ValidationError

from gong_mcp_server.utils.config import (
    GongSettings,
    MCPServerSettings,
    Settings,
)


@pytest.fixture(autouse=True)
def clear_gong_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Start every test without Gong credentials in the environment."""
    for var in ("GONG_ACCESS_KEY", "GONG_ACCESS_KEY_SECRET", "GONG_BASE_URL"):
        monkeypatch.delenv(var, raising=False)


@pytest.mark.unit
class TestMCPServerSettings:
    """Tests for MCP Server settings."""

    def test_default_values(self) -> None:
        """Test default configuration values."""
        settings = MCPServerSettings()
        assert settings.server_name == "gong-mcp"
        assert settings.version == "0.1.0"
        assert settings.log_level == "INFO"
        assert settings.structured_logging is True

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test environment variable override."""
        monkeypatch.setenv("MCP_SERVER_NAME", "custom-server")
        monkeypatch.setenv("MCP_LOG_LEVEL", "DEBUG")

        settings = MCPServerSettings()
        assert settings.server_name == "custom-server"
        assert settings.log_level == "DEBUG"

    def test_log_level_validation(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test log level validation."""
        for level in ["DEBUG", "debug", "Info", "WARNING", "ERROR", "CRITICAL"]:
            monkeypatch.setenv("MCP_LOG_LEVEL", level)
            settings = MCPServerSettings()
            assert settings.log_level == level.upper()

    def test_log_level_invalid(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test invalid log level raises error."""
        monkeypatch.setenv("MCP_LOG_LEVEL", "INVALID")
        with pytest.raises(ValidationError, match="Invalid log level"):
            MCPServerSettings()

    def test_server_name_validation(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test server name cannot be empty."""
        monkeypatch.setenv("MCP_SERVER_NAME", "")
        with pytest.raises(ValidationError, match="Server name cannot be empty"):
            MCPServerSettings()


@pytest.mark.unit
class TestGongSettings:
    """Tests for Gong settings."""

    def test_default_values(self) -> None:
        """Test default Gong configuration values."""
        settings = GongSettings()
        assert settings.access_key == ""
        assert settings.access_key_secret == ""
        assert settings.base_url == "https://api.gong.io"
        assert settings.api_timeout == 30
        assert settings.page_size == 100
        assert settings.page_delay_seconds == 0.1
        assert settings.user_cache_ttl_seconds == 3600
        assert settings.is_configured is False

    def test_credentials_from_env(self, gong_env_vars: None) -> None:
        """Test credentials are read from GONG_ variables."""
        settings = GongSettings()
        assert settings.access_key == "test-access-key"
        assert settings.access_key_secret == "test-access-secret"
        assert settings.is_configured is True

    def test_incomplete_credentials(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that a key without a secret is rejected."""
        monkeypatch.setenv("GONG_ACCESS_KEY", "only-the-key")
        with pytest.raises(ValidationError, match="GONG_ACCESS_KEY_SECRET"):
            GongSettings()

    def test_base_url_trailing_slash_stripped(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test base URL normalization."""
        monkeypatch.setenv("GONG_BASE_URL", "https://us-1234.api.gong.io/")
        assert GongSettings().base_url == "https://us-1234.api.gong.io"

    def test_base_url_requires_scheme(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test base URL must be http(s)."""
        monkeypatch.setenv("GONG_BASE_URL", "api.gong.io")
        with pytest.raises(ValidationError, match="Invalid Gong base URL"):
            GongSettings()

    def test_page_size_bounds(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test page size is capped at Gong's maximum."""
        monkeypatch.setenv("GONG_PAGE_SIZE", "500")
        with pytest.raises(ValidationError):
            GongSettings()


@pytest.mark.unit
class TestSettings:
    """Tests for aggregated settings."""

    def test_groups_loaded(self) -> None:
        """Test all settings groups are present."""
        settings = Settings()
        assert isinstance(settings.server, MCPServerSettings)
        assert isinstance(settings.gong, GongSettings)

    def test_validate_requires_credentials(self) -> None:
        """Test validation fails without Gong credentials."""
        settings = Settings()
        with pytest.raises(ValueError, match="GONG_ACCESS_KEY"):
            settings.validate()

    def test_validate_with_credentials(self, gong_env_vars: None) -> None:
        """Test validation passes with Gong credentials."""
        settings = Settings()
        assert settings.validate() is True
        assert settings.is_gong_configured is True
