"""
Application Configuration

Pydantic-based settings management using environment variables.
Supports nested configuration, validation, and caching.

Usage:
    from basable.config import get_settings

    settings = get_settings()
    print(settings.auth.jwt_algorithm)
    print(settings.remote.base_url)
"""

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import AnyHttpUrl, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_HMAC_ALGORITHMS = {"HS256", "HS384", "HS512"}


class AuthSettings(BaseSettings):
    """Session token configuration."""

    jwt_secret: SecretStr = Field(
        default=SecretStr("basable-dev-secret"),
        description="Secret used to sign session tokens",
    )
    jwt_algorithm: str = Field(
        default="HS256",
        description="JWT signing algorithm (HMAC family)",
    )
    session_ttl_minutes: int = Field(
        default=60 * 24,
        gt=0,
        description="Lifetime of a minted session in minutes",
    )

    model_config = SettingsConfigDict(
        env_prefix="AUTH_",
        env_file=".env",
        extra="ignore",
    )

    @field_validator("jwt_algorithm")
    @classmethod
    def validate_algorithm(cls, v: str) -> str:
        """Only symmetric HMAC algorithms are supported."""
        value = v.strip().upper()
        if value not in _HMAC_ALGORITHMS:
            raise ValueError(f"AUTH_JWT_ALGORITHM must be one of {sorted(_HMAC_ALGORITHMS)}")
        return value


class RemoteSettings(BaseSettings):
    """Remote configuration server."""

    base_url: AnyHttpUrl | None = Field(
        None,
        description="Base URL of the remote config server (None = remote store disabled)",
    )
    api_key: SecretStr | None = Field(None, description="Bearer key for the remote server")
    timeout: float = Field(
        default=10.0,
        gt=0,
        description="Request timeout in seconds",
    )

    model_config = SettingsConfigDict(
        env_prefix="REMOTE_",
        env_file=".env",
        extra="ignore",
    )

    @field_validator("base_url", mode="before")
    @classmethod
    def normalize_url(cls, v: str | AnyHttpUrl | None) -> str | AnyHttpUrl | None:
        """Treat empty strings as missing."""
        if v == "":
            return None
        return v


class ConnectorSettings(BaseSettings):
    """Backend driver configuration."""

    connect_timeout: int = Field(
        default=10,
        gt=0,
        description="Seconds to wait when opening a backend connection",
    )
    query_timeout: int = Field(
        default=30,
        gt=0,
        description="Seconds to wait for introspection queries",
    )

    model_config = SettingsConfigDict(
        env_prefix="CONNECTOR_",
        env_file=".env",
        extra="ignore",
    )


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Application log level",
    )
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log message format",
    )
    date_format: str = Field(
        default="%Y-%m-%d %H:%M:%S",
        description="Log timestamp format",
    )
    file: Path | None = Field(
        default=None,
        description="Optional log file path (None = stdout only)",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=".env",
        extra="ignore",
    )

    def configure(self) -> None:
        """Configure Python logging with these settings."""
        handlers: list[logging.Handler] = [logging.StreamHandler()]

        if self.file:
            self.file.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(self.file))

        logging.basicConfig(
            level=getattr(logging, self.level),
            format=self.format,
            datefmt=self.date_format,
            handlers=handlers,
            force=True,  # Override any existing configuration
        )


class Settings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    Settings are nested by domain (auth, remote, connector, logging).

    Environment Variables:
        ENVIRONMENT: Deployment environment (development, staging, production)
        APP_NAME: Application name for logging
        DEBUG: Enable debug mode
        AUTH_*: Session token configuration (see AuthSettings)
        REMOTE_*: Remote config server (see RemoteSettings)
        CONNECTOR_*: Driver timeouts (see ConnectorSettings)
        LOG_*: Logging configuration (see LoggingSettings)

    Example:
        >>> settings = get_settings()
        >>> settings.auth.jwt_algorithm
        'HS256'
        >>> settings.remote.base_url is None
        True
    """

    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Deployment environment",
    )
    app_name: str = Field(
        default="Basable",
        description="Application name",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )

    # Nested settings
    auth: AuthSettings = Field(default_factory=AuthSettings)
    remote: RemoteSettings = Field(default_factory=RemoteSettings)
    connector: ConnectorSettings = Field(default_factory=ConnectorSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    def model_post_init(self, __context) -> None:
        """Configure logging and log configuration on initialization."""
        self.logging.configure()
        logger = logging.getLogger(__name__)
        logger.info(
            f"Settings loaded for {self.app_name} ({self.environment})",
            extra={
                "environment": self.environment,
                "debug": self.debug,
                "remote_enabled": self.remote.base_url is not None,
            },
        )


_DOTENV_PATH = Path(__file__).resolve().parents[1] / ".env"


def _apply_dotenv_precedence() -> None:
    env_source = os.getenv("BASABLE_ENV_SOURCE", "dotenv").lower()
    if env_source not in {"dotenv", "envfile", "file"}:
        return
    if _DOTENV_PATH.exists():
        load_dotenv(_DOTENV_PATH, override=True)


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses functools.lru_cache to ensure settings are loaded only once.

    Returns:
        Settings: Singleton settings instance
    """
    _apply_dotenv_precedence()
    return Settings()


def clear_settings_cache() -> None:
    """
    Clear the settings cache.

    Useful for testing when you need to reload settings with different
    environment variables.
    """
    get_settings.cache_clear()
