"""Application settings using Pydantic Settings for typed configuration.

This module centralizes all configuration and provides type-safe access to settings.
Settings are loaded from environment variables with sensible defaults.
Business logic never reads settings directly: it receives an `AuthConfig`
built once by `Settings.auth_config()`.
"""

from dataclasses import dataclass
from datetime import timedelta
from functools import lru_cache

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


@dataclass(frozen=True)
class AuthConfig:
    """Immutable auth policy and secrets handed to the auth service."""

    access_token_secret: str
    refresh_token_secret: str
    access_token_ttl: timedelta = timedelta(minutes=15)
    refresh_token_ttl: timedelta = timedelta(days=7)
    verification_token_ttl_hours: int = 24
    reset_token_ttl_hours: int = 1
    bcrypt_rounds: int = 12
    frontend_url: str = "http://localhost:3000"
    google_client_id: str | None = None
    encrypt_session_tokens: bool = False
    auto_create_on_google_login: bool = False
    require_verified_email: bool = True


class Settings(BaseSettings):
    """Application-wide settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Environment
    env_name: str = Field(default="development", alias="ENV_NAME")
    app_name: str = Field(default="FTIP Unpad Alumni Club", alias="APP_NAME")

    # Database
    database_url: str = Field(alias="DATABASE_URL")

    # Admin panel
    session_secret_key: str = Field(alias="SESSION_SECRET_KEY")

    # CORS
    cors_origins: str = Field(default="*", alias="CORS_ORIGINS")

    # Session tokens
    access_token_secret: str = Field(alias="ACCESS_TOKEN_SECRET")
    refresh_token_secret: str = Field(alias="REFRESH_TOKEN_SECRET")
    access_token_expires_minutes: int = Field(
        default=15, alias="ACCESS_TOKEN_EXPIRES_MINUTES", ge=1, le=24 * 60
    )
    refresh_token_expires_days: int = Field(
        default=7, alias="REFRESH_TOKEN_EXPIRES_DAYS", ge=1, le=90
    )
    bcrypt_rounds: int = Field(default=12, alias="BCRYPT_ROUNDS", ge=4, le=16)

    # Transport encryption
    encryption_key: str = Field(alias="ENCRYPTION_KEY")
    encrypt_session_tokens: bool = Field(
        default=False, alias="ENCRYPT_SESSION_TOKENS"
    )
    decrypt_request_fields: bool = Field(
        default=False, alias="DECRYPT_REQUEST_FIELDS"
    )

    # Google identity
    google_client_id: str | None = Field(default=None, alias="GOOGLE_CLIENT_ID")
    google_client_secret: str | None = Field(
        default=None, alias="GOOGLE_CLIENT_SECRET"
    )
    google_redirect_uri: str | None = Field(default=None, alias="GOOGLE_REDIRECT_URI")
    auto_create_on_google_login: bool = Field(
        default=False, alias="AUTO_CREATE_ON_GOOGLE_LOGIN"
    )

    # Email (Resend)
    resend_api_key: str | None = Field(default=None, alias="RESEND_API_KEY")
    app_domain: str = Field(default="resend.dev", alias="APP_DOMAIN")
    client_url: str = Field(default="http://localhost:3000", alias="CLIENT_URL")

    @computed_field
    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS_ORIGINS into a list."""
        origins = []
        for o in self.cors_origins.split(","):
            trimmed = o.strip()
            if trimmed:
                origins.append(trimmed)
        return origins

    @computed_field
    @property
    def is_secure_cookie(self) -> bool:
        """Determine if cookies should be set with Secure flag."""
        return self.env_name.lower() not in {"dev", "development", "local", "test"}

    @computed_field
    @property
    def access_token_ttl(self) -> timedelta:
        return timedelta(minutes=self.access_token_expires_minutes)

    @computed_field
    @property
    def refresh_token_ttl(self) -> timedelta:
        return timedelta(days=self.refresh_token_expires_days)

    def auth_config(self) -> AuthConfig:
        """Build the auth service configuration from these settings."""
        return AuthConfig(
            access_token_secret=self.access_token_secret,
            refresh_token_secret=self.refresh_token_secret,
            access_token_ttl=self.access_token_ttl,
            refresh_token_ttl=self.refresh_token_ttl,
            bcrypt_rounds=self.bcrypt_rounds,
            frontend_url=self.client_url.rstrip("/"),
            google_client_id=self.google_client_id,
            encrypt_session_tokens=self.encrypt_session_tokens,
            auto_create_on_google_login=self.auto_create_on_google_login,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
