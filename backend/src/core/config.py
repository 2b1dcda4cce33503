"""Application configuration using pydantic-settings."""
from dataclasses import dataclass
from functools import lru_cache
from urllib.parse import urlparse

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when a required setting is missing for the requested operation."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


@dataclass(frozen=True)
class FieldLimits:
    """Maximum lengths for user-supplied prompt fields."""

    max_name_length: int = 255
    max_description_length: int = 2000
    max_content_length: int = 100_000


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Database
    database_url: str

    # Auth0 - login (authorization code flow) and token validation
    auth0_domain: str = ""
    auth0_audience: str = ""
    auth0_client_id: str = ""
    auth0_client_secret: str = ""

    # Auth0 Management API (machine-to-machine app, used by the seed script)
    auth0_management_client_id: str = ""
    auth0_management_client_secret: str = ""
    auth0_connection: str = "Username-Password-Authentication"

    # Development mode - bypasses auth for local development
    dev_mode: bool = False

    # Public base URL of this app, used to build the Auth0 callback/logout URLs
    app_url: str = "http://localhost:8000"

    # CORS - comma-separated list of allowed origins (stored as string, parsed via property)
    cors_origins_str: str = Field(
        default="http://localhost:8000",
        validation_alias="CORS_ORIGINS",
    )

    # Browser session cookie holding the Auth0 access token
    session_cookie_name: str = "prompt_manager_session"
    session_cookie_secure: bool = False

    # Field length limits
    max_name_length: int = FieldLimits.max_name_length
    max_description_length: int = FieldLimits.max_description_length
    max_content_length: int = FieldLimits.max_content_length

    log_level: str = "INFO"

    @model_validator(mode="after")
    def validate_dev_mode_security(self) -> "Settings":
        """
        Prevent DEV_MODE from being enabled with a production database.

        DEV_MODE completely bypasses authentication, so it may only be used with a
        local database server or a file/in-memory SQLite database.
        """
        if not self.dev_mode:
            return self

        try:
            parsed = urlparse(self.database_url)
        except ValueError:
            parsed = None

        if parsed is not None and parsed.scheme.startswith("sqlite"):
            return self

        hostname = (parsed.hostname or "") if parsed is not None else ""
        local_hosts = {"localhost", "127.0.0.1", "0.0.0.0", "::1"}
        if hostname.lower() not in local_hosts:
            raise ValueError(
                f"DEV_MODE cannot be enabled with a non-local database. "
                f"Database host '{hostname}' appears to be a production database. "
                f"DEV_MODE bypasses all authentication and must only be used locally.",
            )

        return self

    @property
    def cors_origins(self) -> list[str]:
        """Parse comma-separated CORS origins string into a list."""
        if not self.cors_origins_str:
            return []
        return [origin.strip() for origin in self.cors_origins_str.split(",") if origin.strip()]

    @property
    def auth0_issuer(self) -> str:
        """Get the Auth0 issuer URL."""
        return f"https://{self.auth0_domain}/"

    @property
    def auth0_jwks_url(self) -> str:
        """Get the Auth0 JWKS URL for fetching public keys."""
        return f"https://{self.auth0_domain}/.well-known/jwks.json"

    @property
    def auth0_callback_url(self) -> str:
        """URL Auth0 redirects back to after a successful login."""
        return f"{self.app_url.rstrip('/')}/auth/callback"

    @property
    def field_limits(self) -> FieldLimits:
        """Field length limits enforced by the prompt service."""
        return FieldLimits(
            max_name_length=self.max_name_length,
            max_description_length=self.max_description_length,
            max_content_length=self.max_content_length,
        )

    def require_management_credentials(self) -> None:
        """
        Ensure the Auth0 Management API credentials are configured.

        Raises:
            ConfigurationError: If the domain, client id, or client secret is missing.
        """
        missing = [
            name
            for name, value in (
                ("AUTH0_DOMAIN", self.auth0_domain),
                ("AUTH0_MANAGEMENT_CLIENT_ID", self.auth0_management_client_id),
                ("AUTH0_MANAGEMENT_CLIENT_SECRET", self.auth0_management_client_secret),
            )
            if not value
        ]
        if missing:
            raise ConfigurationError(
                f"Missing required environment variable(s): {', '.join(missing)}",
            )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
