"""Configuration loading for the suitewire reporting system.

This module provides centralized configuration management:
- Load settings from environment variables and .env files
- Validate configuration using pydantic
- Provide typed access to all settings
- Decide whether remote reporting applies to the current environment
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from suitewire.adapters.transport.http import normalize_addr


class Settings(BaseSettings):
    """Reporter configuration loaded from environment.

    Uses pydantic-settings for environment variable handling with
    .env file support via python-dotenv.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # CI detection
    ci: str = Field(
        default="",
        description="Set (to anything) by CI systems; remote reporting only runs on CI",
    )

    # Collector configuration
    remote_test_out_addr: str = Field(
        default="",
        description="Collector address (host:port) that receives suite reports",
    )
    request_timeout_seconds: float = Field(
        default=5.0,
        description="Upper bound for a single report request round-trip",
    )
    update_interval_seconds: float = Field(
        default=1.0,
        description="Minimum spacing between suite-update messages",
    )

    # Logging configuration
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING",
        description="Log level",
    )
    log_format: Literal["json", "text"] = Field(
        default="text",
        description="Log format",
    )

    @property
    def on_ci(self) -> bool:
        """Whether the CI marker variable is set."""
        return bool(self.ci.strip())

    @property
    def remote_report_enabled(self) -> bool:
        """Remote reporting applies on CI when a collector address is set."""
        return self.on_ci and bool(self.remote_test_out_addr.strip())

    @field_validator("request_timeout_seconds")
    @classmethod
    def validate_request_timeout(cls, v: float) -> float:
        """Ensure the request timeout is positive."""
        if v <= 0:
            raise ValueError("request_timeout_seconds must be positive")
        return v

    @field_validator("update_interval_seconds")
    @classmethod
    def validate_update_interval(cls, v: float) -> float:
        """Ensure the update interval is non-negative."""
        if v < 0:
            raise ValueError("update_interval_seconds must be non-negative")
        return v

    @field_validator("remote_test_out_addr")
    @classmethod
    def validate_remote_addr(cls, v: str) -> str:
        """Reject addresses that carry a scheme or path."""
        v = v.strip()
        if not v:
            return v
        return normalize_addr(v)


def load_settings(env_file: str | None = None) -> Settings:
    """Load reporter settings from environment.

    Args:
        env_file: Optional path to .env file. If not provided,
                 uses the default .env in the current directory.

    Returns:
        Validated Settings instance.

    Raises:
        ValidationError: If settings validation fails.
    """
    if env_file:
        return Settings(_env_file=env_file)  # type: ignore[call-arg]
    return Settings()


__all__ = ["Settings", "load_settings"]
