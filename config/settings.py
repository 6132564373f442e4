"""
Central configuration using Pydantic BaseSettings.

Validates all env vars at startup (fail-fast). Signing secrets refuse
to start in production but get safe defaults in TESTING mode.

Usage:
    from config.settings import get_settings

    settings = get_settings()
    print(settings.auth.jwt_admin_secret.get_secret_value())

The settings object is built once and handed to the components that need
it (token issuers, notification sender, database manager); business logic
never reads the environment directly.

Lazy initialization: get_settings() creates the singleton on first call.
Tests can reset via get_settings.cache_clear().
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings

_PROJECT_ROOT = Path(__file__).parent.parent

_TEST_ADMIN_SECRET = "test-admin-secret-not-for-production"
_TEST_CLIENT_SECRET = "test-client-secret-not-for-production"


def _is_testing() -> bool:
    """Check if running in test mode."""
    return (
        os.getenv("TESTING", "").lower() in ("true", "1")
        or os.getenv("FLASK_ENV", "") == "testing"
    )


# =============================================================================
# Nested Settings Groups
# =============================================================================


class AuthSettings(BaseSettings):
    """JWT signing and password policy configuration."""

    model_config = {"env_prefix": "", "extra": "ignore"}

    # Administrators and clients sign with distinct secrets so a leaked
    # client secret cannot forge admin tokens.
    jwt_admin_secret: SecretStr = SecretStr("")
    jwt_client_secret: SecretStr = SecretStr("")
    jwt_algorithm: str = "HS256"
    token_expiration_hours: int = 24

    # Password hashing / policy
    bcrypt_rounds: int = 10
    admin_password_min_length: int = 8
    client_password_min_length: int = 6
    password_max_length: int = 72  # bcrypt truncates at 72 bytes


class MailSettings(BaseSettings):
    """Outgoing SMTP configuration for transactional email."""

    model_config = {"env_prefix": "MAIL_", "extra": "ignore"}

    host: str = "localhost"
    port: int = 465
    username: str = ""
    password: SecretStr = SecretStr("")
    sender_address: str = "no-reply@localhost"
    sender_name: str = "Lifts For Life"
    use_ssl: bool = True
    enabled: bool = True
    max_workers: int = 2
    timeout_seconds: int = 10


class LinkSettings(BaseSettings):
    """Base URLs used to build links embedded in emails."""

    model_config = {"env_prefix": "", "extra": "ignore"}

    api_base_url: str = "http://localhost:5000"
    web_base_url: str = "http://localhost:3000"


class DatabaseSettings(BaseSettings):
    """Database configuration."""

    model_config = {"env_prefix": "", "extra": "ignore"}

    database_path: Path = _PROJECT_ROOT / "data" / "rental.db"
    database_pool_size: int = 10


class RateLimitSettings(BaseSettings):
    """Rate limiting configuration."""

    model_config = {"env_prefix": "RATE_LIMIT_", "extra": "ignore"}

    enabled: bool = True
    default: str = "500 per minute"
    auth: str = "10 per minute"
    storage: Optional[str] = None  # Falls back to in-memory storage


# =============================================================================
# Root Settings
# =============================================================================


class AppSettings(BaseSettings):
    """Root application settings composing all sub-settings."""

    model_config = {"env_prefix": "", "extra": "ignore", "env_file": ".env", "env_file_encoding": "utf-8"}

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"
    log_file: str = ""

    # Server
    cors_origins: str = "http://localhost:3000"

    # Nested groups (initialized separately to support env_prefix)
    auth: AuthSettings = None  # type: ignore[assignment]
    mail: MailSettings = None  # type: ignore[assignment]
    links: LinkSettings = None  # type: ignore[assignment]
    database: DatabaseSettings = None  # type: ignore[assignment]
    rate_limit: RateLimitSettings = None  # type: ignore[assignment]

    @model_validator(mode="before")
    @classmethod
    def _init_nested(cls, values):
        """Initialize nested settings from environment."""
        if values.get("auth") is None:
            values["auth"] = AuthSettings()
        if values.get("mail") is None:
            values["mail"] = MailSettings()
        if values.get("links") is None:
            values["links"] = LinkSettings()
        if values.get("database") is None:
            values["database"] = DatabaseSettings()
        if values.get("rate_limit") is None:
            values["rate_limit"] = RateLimitSettings()
        return values

    @model_validator(mode="after")
    def _validate_required_secrets(self):
        """Require both signing secrets in production; default them in TESTING mode."""
        admin_secret = self.auth.jwt_admin_secret.get_secret_value()
        client_secret = self.auth.jwt_client_secret.get_secret_value()

        if _is_testing():
            if not admin_secret:
                self.auth.jwt_admin_secret = SecretStr(_TEST_ADMIN_SECRET)
            if not client_secret:
                self.auth.jwt_client_secret = SecretStr(_TEST_CLIENT_SECRET)
            return self

        for name, value in (("JWT_ADMIN_SECRET", admin_secret), ("JWT_CLIENT_SECRET", client_secret)):
            if not value:
                raise ValueError(
                    f"{name} env var is required. "
                    "Generate one with: python -c \"import secrets; print(secrets.token_hex(32))\""
                )

        if admin_secret == client_secret:
            raise ValueError("JWT_ADMIN_SECRET and JWT_CLIENT_SECRET must differ")

        return self

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """
    Get the application settings singleton.

    Lazy-initialized on first call. Validates all env vars (fail-fast).
    Tests can reset via: get_settings.cache_clear()
    """
    return AppSettings()
