"""Application settings using pydantic-settings.

Settings are loaded from environment variables with sensible defaults
for development. Production deployments should set all values explicitly.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Database connection settings.

    Environment variables:
        STOREFRONT_DB_HOST: Database host (default: localhost)
        STOREFRONT_DB_PORT: Database port (default: 5432)
        STOREFRONT_DB_DATABASE: Database name (default: storefront)
        STOREFRONT_DB_USERNAME: Database user (default: storefront)
        STOREFRONT_DB_PASSWORD: Database password (required in production)
        STOREFRONT_DB_POOL_MIN_CONNECTIONS: Minimum connections in pool (default: 2)
        STOREFRONT_DB_POOL_MAX_CONNECTIONS: Maximum connections in pool (default: 10)
        STOREFRONT_DB_ECHO: Log emitted SQL (default: false)
    """

    model_config = SettingsConfigDict(
        env_prefix="STOREFRONT_DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    database: str = Field(default="storefront", description="Database name")
    username: str = Field(default="storefront", description="Database username")
    password: SecretStr = Field(
        default=SecretStr(""),
        description="Database password",
    )
    pool_min_connections: int = Field(
        default=2,
        description="Minimum connections in pool",
        ge=1,
        le=100,
    )
    pool_max_connections: int = Field(
        default=10,
        description="Maximum connections in pool",
        ge=1,
        le=100,
    )
    echo: bool = Field(default=False, description="Log emitted SQL statements")

    @model_validator(mode="after")
    def validate_pool_settings(self) -> "DatabaseSettings":
        """Validate pool max >= min."""
        if self.pool_max_connections < self.pool_min_connections:
            raise ValueError(
                f"pool_max_connections ({self.pool_max_connections}) must be >= "
                f"pool_min_connections ({self.pool_min_connections})"
            )
        return self

    @property
    def connection_string(self) -> str:
        """Generate a connection string (without password for logging)."""
        return f"postgresql://{self.username}@{self.host}:{self.port}/{self.database}"


class IdentityProviderSettings(BaseSettings):
    """Hosted identity provider (Clerk Backend API) settings.

    Environment variables:
        STOREFRONT_IDP_BASE_URL: Backend API base URL
        STOREFRONT_IDP_SECRET_KEY: Backend API secret key
        STOREFRONT_IDP_TIMEOUT_SECONDS: Per-request timeout (default: 10)
    """

    model_config = SettingsConfigDict(
        env_prefix="STOREFRONT_IDP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    base_url: str = Field(
        default="https://api.clerk.com",
        description="Identity provider backend API base URL",
    )
    secret_key: SecretStr = Field(
        default=SecretStr(""),
        description="Identity provider backend API secret key",
    )
    timeout_seconds: float = Field(
        default=10.0,
        description="Per-request timeout for identity provider calls",
        gt=0,
    )


class NotificationSettings(BaseSettings):
    """Transactional email API settings.

    Environment variables:
        STOREFRONT_MAIL_API_URL: Send endpoint of the email API
        STOREFRONT_MAIL_API_KEY: API key for the email API
        STOREFRONT_MAIL_SENDER: From address for platform emails
        STOREFRONT_MAIL_TIMEOUT_SECONDS: Per-request timeout (default: 10)
    """

    model_config = SettingsConfigDict(
        env_prefix="STOREFRONT_MAIL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_url: str = Field(
        default="https://api.resend.com/emails",
        description="Send endpoint of the transactional email API",
    )
    api_key: SecretStr = Field(
        default=SecretStr(""),
        description="Email API key",
    )
    sender: str = Field(
        default="Storefront <noreply@storefront.local>",
        description="From address for platform emails",
    )
    timeout_seconds: float = Field(
        default=10.0,
        description="Per-request timeout for email delivery",
        gt=0,
    )


class ProvisioningSettings(BaseSettings):
    """Tenant provisioning saga settings.

    Environment variables:
        STOREFRONT_PROVISIONING_DEFAULT_TEMPLATE_SLUG: Fallback template (default: healingbuds)
        STOREFRONT_PROVISIONING_STEP_TIMEOUT_SECONDS: Timeout per saga step (default: 15)
        STOREFRONT_PROVISIONING_STRICT_IDENTITY_LINK: Roll back when metadata
            linking fails instead of continuing (default: false)
    """

    model_config = SettingsConfigDict(
        env_prefix="STOREFRONT_PROVISIONING_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    default_template_slug: str = Field(
        default="healingbuds",
        description="Template slug used when the requested one does not exist",
    )
    step_timeout_seconds: float = Field(
        default=15.0,
        description="Timeout applied to each provisioning step",
        gt=0,
    )
    strict_identity_link: bool = Field(
        default=False,
        description="Treat identity metadata linking as a compensable step",
    )


class PlatformSettings(BaseSettings):
    """Platform-wide routing and administration settings.

    Environment variables:
        STOREFRONT_PLATFORM_PLATFORM_DOMAIN: Apex domain tenants get subdomains of
        STOREFRONT_PLATFORM_ADMIN_TOKEN: Bearer token for platform admin routes
    """

    model_config = SettingsConfigDict(
        env_prefix="STOREFRONT_PLATFORM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    platform_domain: str = Field(
        default="storefront.local",
        description="Apex domain; tenants are served at <subdomain>.<platform_domain>",
    )
    admin_token: SecretStr = Field(
        default=SecretStr(""),
        description="Bearer token required by platform admin routes",
    )


class Settings(BaseSettings):
    """Main application settings aggregating all configuration sections."""

    model_config = SettingsConfigDict(
        env_prefix="STOREFRONT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application metadata
    app_name: str = Field(default="Storefront API", description="Application name")
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="info", description="Minimum log level")
    storage_backend: Literal["postgres", "memory"] = Field(
        default="postgres",
        description="Record store backing the application",
    )

    @property
    def database(self) -> DatabaseSettings:
        """Get database settings."""
        return get_database_settings()


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


@lru_cache
def get_database_settings() -> DatabaseSettings:
    """Get cached database settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return DatabaseSettings()


@lru_cache
def get_identity_provider_settings() -> IdentityProviderSettings:
    """Get cached identity provider settings."""
    return IdentityProviderSettings()


@lru_cache
def get_notification_settings() -> NotificationSettings:
    """Get cached notification settings."""
    return NotificationSettings()


@lru_cache
def get_provisioning_settings() -> ProvisioningSettings:
    """Get cached provisioning settings."""
    return ProvisioningSettings()


@lru_cache
def get_platform_settings() -> PlatformSettings:
    """Get cached platform settings."""
    return PlatformSettings()
