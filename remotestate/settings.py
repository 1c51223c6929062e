"""
Remotestate Settings - Configuration management using Pydantic Settings.

Loads configuration from environment variables and .env files.
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RemoteStateSettings(BaseSettings):
    """
    Remotestate configuration settings.

    Settings are loaded from:
    1. Environment variables (highest priority)
    2. .env file in current directory
    3. Default values (lowest priority)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_prefix="RS_",  # All remotestate env vars must start with RS_
    )

    # Logging Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR) (env: RS_LOG_LEVEL)",
    )

    # Provisioning Configuration
    poll_timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Maximum seconds to wait for storage account creation; unset waits until done (env: RS_POLL_TIMEOUT_SECONDS)",
    )

    backend_state_file: Path = Field(
        default=Path(".terraform") / "terraform.tfstate",
        description="State file where the infrastructure tool records its backend (env: RS_BACKEND_STATE_FILE)",
    )


# Global settings instance
_settings: RemoteStateSettings | None = None


def get_settings() -> RemoteStateSettings:
    """
    Get the global settings instance.

    Creates the settings instance on first call, then returns cached instance.

    Returns:
        RemoteStateSettings instance
    """
    global _settings
    if _settings is None:
        _settings = RemoteStateSettings()
    return _settings


def reload_settings() -> RemoteStateSettings:
    """
    Reload settings from environment/files.

    Useful for testing or when .env file changes.

    Returns:
        Fresh RemoteStateSettings instance
    """
    global _settings
    _settings = RemoteStateSettings()
    return _settings
