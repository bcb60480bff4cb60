"""
Configuration management for the TreeHouse Books maintenance toolkit.

Uses pydantic-settings for type-safe configuration with environment variable support.
"""

from pathlib import Path
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class MongoSettings(BaseSettings):
    """MongoDB connection settings."""

    model_config = SettingsConfigDict(
        env_prefix="MONGO_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    uri: str = "mongodb://localhost:27017/treehouse"
    db: str = "treehouse"  # Used when the URI carries no default database
    server_selection_timeout_ms: int = 10000


class AdminSettings(BaseSettings):
    """Profile of the bootstrap admin account."""

    model_config = SettingsConfigDict(
        env_prefix="ADMIN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    okta_id: str = "admin-okta-id"
    first_name: str = "Admin"
    last_name: str = "User"
    email: str = "admin@example.com"
    password: str = ""  # Optional: seeded accounts may log in via SSO only


class TelemetrySettings(BaseSettings):
    """Sentry error reporting settings."""

    model_config = SettingsConfigDict(
        env_prefix="SENTRY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    dsn: str = ""
    enabled: bool = True
    environment: Optional[str] = None
    traces_sample_rate: float = 0.1

    @field_validator("traces_sample_rate")
    @classmethod
    def clamp_rate(cls, v: float) -> float:
        """Keep the sample rate within Sentry's accepted range."""
        return min(max(v, 0.0), 1.0)


class MaintenanceSettings(BaseSettings):
    """Settings shared by the maintenance commands."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_env: str = "development"

    # Logging
    log_level: str = "INFO"
    log_file: Optional[Path] = None  # audit trail of destructive runs
    log_retention: str = "30 days"

    # Backups of documents removed by destructive commands
    backup_dir: Path = Field(default=Path("./backups"))

    # Collections
    users_collection: str = "users"
    stops_collection: str = "travelingstops"

    # Unique index that blocked registrations after the move off Okta
    legacy_index: str = "oktaId_1"

    # Default import file for Traveling Tree House stops
    stops_file: Path = Field(default=Path("./scripts/sampleTravelingStops.json"))

    @field_validator("log_level")
    @classmethod
    def upper_level(cls, v: str) -> str:
        """loguru level names are upper case."""
        return v.upper()


class Settings(BaseSettings):
    """Main settings class that combines all settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Sub-settings
    mongo: MongoSettings = Field(default_factory=MongoSettings)
    admin: AdminSettings = Field(default_factory=AdminSettings)
    telemetry: TelemetrySettings = Field(default_factory=TelemetrySettings)
    maintenance: MaintenanceSettings = Field(default_factory=MaintenanceSettings)


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


# Convenience function for quick access
settings = get_settings()
