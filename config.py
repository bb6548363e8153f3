"""WMS Terminal — Configuration Management.

Strictly-typed configuration system using pydantic-settings.
All settings are loaded from environment variables (or a local ``.env``)
with validation.

    - The API key uses SecretStr to prevent accidental logging
    - All configuration is immutable after initialization
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class TerminalSettings(BaseSettings):
    """Remote inventory service connection.

    Attributes:
        api_url: Base URL of the inventory REST service.
        api_key: Key sent as bearer token and ``apikey`` header.
        device_id: Identifier stamped on every commit from this terminal.
        request_timeout_seconds: Client-side timeout for every HTTP call.
    """

    model_config = SettingsConfigDict(
        env_prefix="TERMINAL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_url: str = Field(default="", description="Inventory service base URL")
    api_key: SecretStr = Field(default=SecretStr(""), description="Inventory service API key")
    device_id: str = Field(default="TOUGHPAD01", min_length=1, description="Terminal device id")
    request_timeout_seconds: float = Field(default=10.0, gt=0, le=120, description="HTTP timeout (seconds)")

    @field_validator("api_url", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v: str | None) -> str:
        """Normalise the base URL so paths can be appended directly."""
        if v is None:
            return ""
        return str(v).strip().rstrip("/")

    @property
    def is_configured(self) -> bool:
        """True when both URL and key are present."""
        return bool(self.api_url) and bool(self.api_key.get_secret_value())


class SyncSettings(BaseSettings):
    """Offline queue and connectivity probe configuration.

    Attributes:
        data_dir: Directory holding the cache and queue files.
        interval_seconds: Background drain tick.
        probe_host: Well-known host used for the reachability check.
        probe_port: TCP port on the probe host.
        probe_timeout_seconds: Connect timeout for the probe.
    """

    model_config = SettingsConfigDict(
        env_prefix="SYNC_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    data_dir: Path = Field(default=Path("data"), description="Local state directory")
    interval_seconds: float = Field(default=5.0, gt=0, le=3600, description="Queue drain interval (seconds)")
    probe_host: str = Field(default="8.8.8.8", description="Reachability probe host")
    probe_port: int = Field(default=443, ge=1, le=65535, description="Reachability probe port")
    probe_timeout_seconds: float = Field(default=2.0, gt=0, le=30, description="Probe connect timeout (seconds)")


class LogSettings(BaseSettings):
    """Logging configuration.

    Attributes:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        format: Log output format (json for shipped devices, text for development).
    """

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    format: Literal["json", "text"] = Field(
        default="text",
        description="Log format",
    )


class Settings(BaseSettings):
    """Root application settings aggregating all configuration sections.

    Use get_settings() to obtain a cached singleton instance.

    Example:
        >>> settings = get_settings()
        >>> settings.sync.interval_seconds
        5.0
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = Field(default="WMS Terminal", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Deployment environment",
    )

    terminal: TerminalSettings = Field(default_factory=TerminalSettings)
    sync: SyncSettings = Field(default_factory=SyncSettings)
    log: LogSettings = Field(default_factory=LogSettings)

    @model_validator(mode="after")
    def validate_production_settings(self) -> "Settings":
        """Enforce quieter logging on shipped terminals."""
        if self.environment == "production" and self.log.level == "DEBUG":
            raise ValueError("DEBUG log level is not allowed in production")
        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings singleton.

    Raises:
        ValidationError: If settings are present but invalid.
    """
    return Settings()
