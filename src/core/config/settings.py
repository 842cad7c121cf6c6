# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Application configuration settings using Pydantic Settings.

This module provides centralized configuration management for the campus
records backend. Settings are loaded from environment variables with
sensible defaults.

The Settings class is the main entry point and aggregates all subsettings.
A singleton instance is provided via get_settings() for dependency injection.

Example:
    >>> from src.core.config.settings import get_settings
    >>> settings = get_settings()
    >>> settings.lending.per_diem_rate
    5.0
"""

from functools import lru_cache
from typing import Literal, Self

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Records database configuration.

    PostgreSQL (asyncpg) is the production backend. SQLite (aiosqlite) is
    supported for development and tests; set ``url`` directly to use it.

    Attributes:
        driver: SQLAlchemy async driver name.
        user: Database username.
        password: Database password.
        host: Database host address.
        port: Database port number.
        name: Database name.
        url_override: Explicit connection URL read from DATABASE_URL.
            Takes precedence over the individual components.
        pool_size: Connection pool size.
        max_overflow: Maximum overflow connections.
        transaction_timeout_seconds: Upper bound for a single unit of work.
    """

    model_config = SettingsConfigDict(
        env_prefix="DATABASE_",
        extra="ignore",
        populate_by_name=True,
    )

    driver: str = "postgresql+asyncpg"
    user: str = "records"
    password: SecretStr = SecretStr("records_password")
    host: str = "localhost"
    port: int = 5432
    name: str = "campus_records"
    url_override: str | None = Field(default=None, validation_alias="DATABASE_URL")
    pool_size: int = 10
    max_overflow: int = 20
    transaction_timeout_seconds: float = 30.0

    @property
    def url(self) -> str:
        """Build the async database URL from components."""
        if self.url_override:
            return self.url_override
        pwd = self.password.get_secret_value()
        return f"{self.driver}://{self.user}:{pwd}@{self.host}:{self.port}/{self.name}"

    @property
    def is_sqlite(self) -> bool:
        """Check whether the configured backend is SQLite."""
        return self.url.startswith("sqlite")


class LendingSettings(BaseSettings):
    """Library lending configuration.

    Attributes:
        per_diem_rate: Fine charged per day a loan is returned late.
        default_loan_days: Loan period used when no due date is supplied.
    """

    model_config = SettingsConfigDict(
        env_prefix="LENDING_",
        extra="ignore",
    )

    per_diem_rate: float = Field(default=5.0, ge=0)
    default_loan_days: int = Field(default=14, gt=0)


class SecuritySettings(BaseSettings):
    """Credential handling configuration.

    Attributes:
        bcrypt_rounds: Cost factor passed to bcrypt.gensalt().
        min_password_length: Shortest accepted plaintext password.
    """

    model_config = SettingsConfigDict(
        env_prefix="SECURITY_",
        extra="ignore",
    )

    bcrypt_rounds: int = 12
    min_password_length: int = 6


class Settings(BaseSettings):
    """Main application settings aggregating all subsettings.

    Use get_settings() to obtain a cached singleton instance.

    Attributes:
        environment: Current environment (development, staging, production).
        debug: Enable debug mode.
        log_level: Logging level.
        database: Records database settings.
        lending: Library lending settings.
        security: Credential settings.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # Environment
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "DEBUG"

    # Subsettings - loaded with their own env prefixes
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    lending: LendingSettings = Field(default_factory=LendingSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)

    @model_validator(mode="after")
    def validate_production_settings(self) -> Self:
        """Validate that production settings are properly configured.

        Raises:
            ValueError: If running in production with insecure defaults.
        """
        if self.environment == "production":
            if self.debug:
                raise ValueError(
                    "Debug mode must be disabled in production. Set DEBUG=false."
                )
            if self.database.password.get_secret_value() == "records_password":
                raise ValueError(
                    "Database password must be changed from default in production. "
                    "Set DATABASE_PASSWORD environment variable."
                )
        return self

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call clear_settings_cache() if you need to reload settings.

    Returns:
        Cached Settings instance.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache.

    Call this if you need to reload settings from environment.
    Useful for testing or dynamic configuration updates.
    """
    get_settings.cache_clear()
