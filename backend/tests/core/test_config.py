"""Tests for application configuration."""
from pathlib import Path

import pytest

from core.config import Settings


class TestCorsOriginsParsing:
    """Tests for CORS origins parsing from environment variables."""

    def test_parse_multiple_origins_comma_separated(self) -> None:
        """Multiple comma-separated origins are parsed correctly."""
        settings = Settings(
            _env_file=None,
            database_url="postgresql://test",
            CORS_ORIGINS="http://localhost:5173,https://example.com",
            DEV_MODE="false",
        )
        assert settings.cors_origins == [
            "http://localhost:5173",
            "https://example.com",
        ]

    def test_parse_origins_with_whitespace_and_trailing_comma(self) -> None:
        settings = Settings(
            _env_file=None,
            database_url="postgresql://test",
            CORS_ORIGINS="  http://localhost:5173 , https://example.com ,",
            DEV_MODE="false",
        )
        assert settings.cors_origins == [
            "http://localhost:5173",
            "https://example.com",
        ]

    def test_parse_empty_string(self) -> None:
        """Empty string results in empty list."""
        settings = Settings(
            _env_file=None,
            database_url="postgresql://test",
            CORS_ORIGINS="",
            DEV_MODE="false",
        )
        assert settings.cors_origins == []


class TestAuth0Config:
    """Tests for Auth0 configuration."""

    def test_auth0_urls_derived_from_domain(self) -> None:
        settings = Settings(
            _env_file=None,
            database_url="postgresql://test",
            AUTH0_DOMAIN="test.auth0.com",
            AUTH0_AUDIENCE="https://test-api",
            DEV_MODE="false",
        )
        assert settings.auth0_audience == "https://test-api"
        assert settings.auth0_issuer == "https://test.auth0.com/"
        assert settings.auth0_jwks_url == "https://test.auth0.com/.well-known/jwks.json"


class TestStorageConfig:
    """Tests for image storage settings."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("STORAGE_PATH", raising=False)
        settings = Settings(_env_file=None, database_url="postgresql://test", DEV_MODE="false")
        assert settings.storage_path == Path("data/storage")
        assert settings.image_fetch_timeout == 10.0
        assert settings.max_image_bytes == 5_000_000

    def test_overrides(self) -> None:
        settings = Settings(
            _env_file=None,
            database_url="postgresql://test",
            STORAGE_PATH="/var/lib/bookmarks",
            IMAGE_FETCH_TIMEOUT="2.5",
            MAX_IMAGE_BYTES="1024",
            DEV_MODE="false",
        )
        assert settings.storage_path == Path("/var/lib/bookmarks")
        assert settings.image_fetch_timeout == 2.5
        assert settings.max_image_bytes == 1024


class TestDevModeSecurityValidation:
    """Tests for DEV_MODE security guard against production database usage."""

    @pytest.mark.parametrize(
        "database_url",
        [
            "postgresql://localhost:5432/test",
            "postgresql://127.0.0.1:5432/test",
            "postgresql://[::1]:5432/test",
            "sqlite+aiosqlite:///./bookmarks.db",
        ],
    )
    def test__dev_mode_allowed_with_local_database(self, database_url: str) -> None:
        settings = Settings(_env_file=None, database_url=database_url, DEV_MODE="true")
        assert settings.dev_mode is True

    @pytest.mark.parametrize(
        "database_url",
        [
            "postgresql://prod-db.railway.app:5432/bookmarks",
            "postgresql://192.168.1.100:5432/test",
            "postgresql:///test",
        ],
    )
    def test__dev_mode_blocked_with_non_local_database(self, database_url: str) -> None:
        with pytest.raises(
            ValueError,
            match="DEV_MODE cannot be enabled with a non-local database",
        ):
            Settings(_env_file=None, database_url=database_url, DEV_MODE="true")

    def test__dev_mode_disabled_allows_production_database(self) -> None:
        """Production database is allowed when DEV_MODE is disabled."""
        settings = Settings(
            _env_file=None,
            database_url="postgresql://prod-db.railway.app:5432/bookmarks",
            DEV_MODE="false",
        )
        assert settings.dev_mode is False
        assert settings.is_sqlite is False
