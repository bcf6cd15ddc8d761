"""Application settings using pydantic-settings.

Settings are loaded from environment variables with sensible defaults
for development. Production deployments should set all values explicitly.
"""

from datetime import timedelta
from functools import lru_cache

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Database connection settings.

    Environment variables:
        DIRECTORY_DB_HOST: Database host (default: localhost)
        DIRECTORY_DB_PORT: Database port (default: 5432)
        DIRECTORY_DB_DATABASE: Database name (default: directory)
        DIRECTORY_DB_USERNAME: Database user (default: directory)
        DIRECTORY_DB_PASSWORD: Database password (required in production)
        DIRECTORY_DB_POOL_MAX_CONNECTIONS: Maximum connections in pool (default: 10)
        DIRECTORY_DB_ECHO: Log every SQL statement (default: false)
    """

    model_config = SettingsConfigDict(
        env_prefix="DIRECTORY_DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    database: str = Field(default="directory", description="Database name")
    username: str = Field(default="directory", description="Database username")
    password: SecretStr = Field(
        default=SecretStr(""),
        description="Database password",
    )
    pool_max_connections: int = Field(
        default=10,
        description="Maximum connections in pool",
        ge=1,
        le=100,
    )
    echo: bool = Field(default=False, description="Log SQL statements")

    @property
    def connection_string(self) -> str:
        """Generate a connection string (without password for logging)."""
        return f"postgresql://{self.username}@{self.host}:{self.port}/{self.database}"


class DirectorySettings(BaseSettings):
    """Directory behaviour settings.

    Environment variables:
        DIRECTORY_LOCKOUT_MAX_ATTEMPTS: Failed logins that lock an account (default: 5)
        DIRECTORY_LOCKOUT_MINUTES: Length of the lockout window (default: 30)
        DIRECTORY_TEMPORARY_SECRET: Secret for accounts created by provisioning
        DIRECTORY_SCIM_BASE_LOCATION: Base URL of the SCIM resources (default: /scim/v2)
        DIRECTORY_SCIM_PAGE_SIZE: Default SCIM page size (default: 100)
        DIRECTORY_PROVISIONING_CHECKPOINT_INTERVAL: Records between job saves (default: 100)
        DIRECTORY_PROVISIONING_MAX_ROWS: Largest accepted feed (default: 5000)
        DIRECTORY_BOOTSTRAP_ADMIN_LOGIN: Initial administrator (default: admin)
        DIRECTORY_BOOTSTRAP_ADMIN_EMAIL: Initial administrator email
        DIRECTORY_BOOTSTRAP_ADMIN_SECRET: Initial administrator secret; unset skips the admin
        DIRECTORY_LOG_LEVEL: Minimum log level (default: INFO)
    """

    model_config = SettingsConfigDict(
        env_prefix="DIRECTORY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    lockout_max_attempts: int = Field(default=5, ge=1)
    lockout_minutes: int = Field(default=30, ge=1)
    temporary_secret: SecretStr = Field(default=SecretStr("ChangeMe123!"))
    scim_base_location: str = Field(default="/scim/v2")
    scim_page_size: int = Field(default=100, ge=1)
    provisioning_checkpoint_interval: int = Field(default=100, ge=1)
    provisioning_max_rows: int | None = Field(default=5000, ge=1)
    bootstrap_admin_login: str | None = Field(default="admin")
    bootstrap_admin_email: str | None = Field(default="admin@directory.local")
    bootstrap_admin_secret: SecretStr | None = Field(default=None)
    log_level: str = Field(default="INFO")

    @property
    def lockout_duration(self) -> timedelta:
        return timedelta(minutes=self.lockout_minutes)


@lru_cache
def get_database_settings() -> DatabaseSettings:
    """Get cached database settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return DatabaseSettings()


@lru_cache
def get_directory_settings() -> DirectorySettings:
    """Get cached directory settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return DirectorySettings()
