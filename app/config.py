"""
Configuration Management Module

This module handles all application configuration using Pydantic Settings.
Configuration is loaded from environment variables with strong typing and validation.

Design Decisions:
- Use Pydantic Settings for automatic environment variable loading
- Provide sensible defaults so the service starts against a local SQLite file
- Validate configuration at startup (fail-fast approach)
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Database credentials live inside DATABASE_URL and are never logged.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # =========================================================================
    # Database Configuration
    # =========================================================================
    database_url: str = Field(
        default="sqlite+aiosqlite:///./reviewers.db",
        description="SQLAlchemy async database URL"
    )

    database_echo: bool = Field(
        default=False,
        description="Echo SQL statements to the log"
    )

    database_pool_size: int = Field(
        default=10,
        ge=1,
        le=200,
        description="Connection pool size (ignored for SQLite)"
    )

    database_create_schema: bool = Field(
        default=True,
        description="Create missing tables on startup"
    )

    database_connect_attempts: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Startup attempts to reach the database"
    )

    database_connect_wait: float = Field(
        default=1.0,
        ge=0.0,
        description="Base delay between startup connection attempts in seconds"
    )

    # =========================================================================
    # Assignment Rules
    # =========================================================================
    max_reviewers: int = Field(
        default=2,
        ge=1,
        le=10,
        description="Reviewers assigned when a pull request is created"
    )

    # =========================================================================
    # Server Configuration
    # =========================================================================
    host: str = Field(
        default="0.0.0.0",
        description="Host to bind the server"
    )

    port: int = Field(
        default=8080,
        ge=1,
        le=65535,
        description="Port to bind the server"
    )

    # =========================================================================
    # Logging Configuration
    # =========================================================================
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )

    log_json_format: bool = Field(
        default=True,
        description="Enable JSON logging format"
    )

    log_requests: bool = Field(
        default=False,
        description="Enable request/response logging"
    )

    # =========================================================================
    # Validators
    # =========================================================================
    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v_upper

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Require an async driver in the URL."""
        v = v.strip()
        if not v:
            raise ValueError("DATABASE_URL must not be empty")
        if "+" not in v.split("://", 1)[0]:
            raise ValueError(
                "DATABASE_URL must name an async driver, "
                "e.g. postgresql+asyncpg:// or sqlite+aiosqlite://"
            )
        return v

    # =========================================================================
    # Computed Properties
    # =========================================================================
    @property
    def is_sqlite(self) -> bool:
        """True when the configured backend is SQLite."""
        return self.database_url.startswith("sqlite")


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses lru_cache to ensure settings are only loaded once,
    which is important for performance and consistency.

    Returns:
        Settings instance
    """
    return Settings()
