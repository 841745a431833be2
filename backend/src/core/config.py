"""Application configuration using pydantic-settings."""
from functools import lru_cache
from pathlib import Path
from urllib.parse import urlparse

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


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
    db_pool_size: int = Field(default=5, validation_alias="DB_POOL_SIZE")
    db_max_overflow: int = Field(default=10, validation_alias="DB_MAX_OVERFLOW")

    # Auth0 - the session layer that resolves the request user
    auth0_domain: str = Field(default="", validation_alias="AUTH0_DOMAIN")
    auth0_audience: str = Field(default="", validation_alias="AUTH0_AUDIENCE")

    # Development mode - bypasses auth for local development
    dev_mode: bool = Field(default=False, validation_alias="DEV_MODE")

    # CORS - comma-separated list of allowed origins (stored as string, parsed via property)
    cors_origins_str: str = Field(
        default="http://localhost:5173",
        validation_alias="CORS_ORIGINS",
    )

    # Object storage for archived bookmark images
    storage_path: Path = Field(default=Path("data/storage"), validation_alias="STORAGE_PATH")
    image_fetch_timeout: float = Field(default=10.0, validation_alias="IMAGE_FETCH_TIMEOUT")
    max_image_bytes: int = Field(default=5_000_000, validation_alias="MAX_IMAGE_BYTES")

    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    @model_validator(mode="after")
    def validate_dev_mode_security(self) -> "Settings":
        """
        Prevent DEV_MODE from being enabled with a production database.

        DEV_MODE completely bypasses authentication, so we must ensure it's only
        used with local development databases to prevent accidental production exposure.
        SQLite databases are always local.
        """
        if not self.dev_mode:
            return self

        try:
            parsed = urlparse(self.database_url)
            scheme = parsed.scheme or ""
            hostname = parsed.hostname or ""
        except Exception:
            # If we can't parse the URL, block DEV_MODE (fail-safe)
            scheme = ""
            hostname = ""

        if scheme.startswith("sqlite"):
            return self

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
    def is_sqlite(self) -> bool:
        """Whether the configured database is SQLite (no connection pool sizing)."""
        return self.database_url.startswith("sqlite")

    @property
    def auth0_issuer(self) -> str:
        """Get the Auth0 issuer URL."""
        return f"https://{self.auth0_domain}/"

    @property
    def auth0_jwks_url(self) -> str:
        """Get the Auth0 JWKS URL for fetching public keys."""
        return f"https://{self.auth0_domain}/.well-known/jwks.json"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
