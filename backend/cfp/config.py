"""Configuration settings"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Settings priority:
#
# - Arguments passed when instantiating Settings(...)
# - Environment variables from the OS
# - .env file (if configured via SettingsConfigDict(env_file=...))
# - Default values in this class


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file="../.env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application settings
    APP_NAME: str = "CFP Server"

    # OS settings
    ENVIRONMENT: str = Field(
        default="development",
        description="Execution mode (development/test/production)",
    )
    PORT: int = Field(default=4000, description="Listening port")

    # Browser client
    CLIENT_URL: str = Field(
        default="http://localhost:3000",
        description="Allowed browser origin (CORS and OAuth popup postMessage target)",
    )

    # Session token settings
    JWT_SECRET: str = Field(
        default="fallback-secret",
        description="Secret used to sign session tokens",
    )
    JWT_ALGORITHM: str = Field(default="HS256", description="Token signing algorithm")
    JWT_EXPIRE_MINUTES: int = Field(default=15, description="Token lifetime")

    # Cookie settings
    OAUTH_STATE_COOKIE_MAX_AGE: int = Field(
        default=600, description="Lifetime of the OAuth state cookie (seconds)"
    )
    SESSION_COOKIE_MAX_AGE: int = Field(
        default=86400, description="Lifetime of the session cookie (seconds)"
    )

    # GitHub OAuth settings
    GITHUB_CLIENT_ID: str = Field(default="", description="GitHub OAuth client ID")
    GITHUB_CLIENT_SECRET: str = Field(
        default="", description="GitHub OAuth client secret"
    )
    GITHUB_REDIRECT_URI: str = Field(
        default="http://localhost:4000/api/v1/auth/github/callback",
        description="GitHub OAuth callback URL",
    )

    # Database settings
    POSTGRES_HOST: str = Field(
        default="localhost",
        description="PostgreSQL server",
    )
    POSTGRES_PORT: int = Field(default=5432, description="Database port")
    POSTGRES_DB_NAME: str = Field(default="cfp", description="Database name")

    # Database credentials
    POSTGRES_DB_USER: str = Field(
        default="undefined", description="Database application user"
    )
    POSTGRES_DB_PASSWORD: str = Field(
        default="undefined", description="Database application password"
    )

    # Full connection URL, takes precedence over the POSTGRES_* settings
    DATABASE_URL: str | None = Field(default=None, description="Database URL")

    # Connection pool
    DB_POOL_SIZE: int = Field(default=5, description="Pooled connections")
    DB_MAX_OVERFLOW: int = Field(default=10, description="Connections above pool size")
    DB_ECHO: bool = Field(default=False, description="Log every SQL statement")

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT.lower() == "development"

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
