"""Application configuration using pydantic-settings."""

from functools import cached_property, lru_cache
from typing import Self

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # Comma-separated list of allowed CORS origins (in addition to localhost defaults)
    # Example: "https://app.example.com,https://staging.example.com"
    cors_allowed_origins: str = ""

    # Use "redis://host:port" in production for distributed rate limiting
    # memory:// only works for single-instance deployments
    ratelimit_storage_uri: str = "memory://"

    # Open preview pages live in process memory and are dropped after this
    # many seconds without being opened again
    preview_page_ttl_seconds: int = 3600
    preview_page_max_open: int = 1000

    # Feature flags: production defaults
    # Set DEBUG=true in .env for local development
    debug: bool = False  # Enables docs and CORS localhost
    enable_docs: bool = False  # Swagger UI at /docs

    @model_validator(mode="after")
    def validate_config(self) -> Self:
        if self.preview_page_ttl_seconds <= 0:
            raise ValueError("PREVIEW_PAGE_TTL_SECONDS must be a positive number.")
        if self.preview_page_max_open <= 0:
            raise ValueError("PREVIEW_PAGE_MAX_OPEN must be a positive number.")
        return self

    @cached_property
    def allowed_origins(self) -> list[str]:
        """Combines localhost (dev only) and cors_allowed_origins."""
        origins: list[str] = []

        # Only include localhost origins in debug mode
        if self.debug:
            origins.extend(
                [
                    "http://localhost:3000",
                    "http://localhost:8000",
                ]
            )

        if self.cors_allowed_origins:
            for origin in self.cors_allowed_origins.split(","):
                origin = origin.strip()
                if origin and origin not in origins:
                    origins.append(origin)

        return origins


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache.

    Call this in tests to reset settings between test cases.
    After clearing, the next get_settings() call will create
    a fresh Settings instance with current environment variables.

    Example:
        def test_something(monkeypatch):
            monkeypatch.setenv("PREVIEW_PAGE_TTL_SECONDS", "60")
            clear_settings_cache()
            settings = get_settings()  # Fresh instance
    """
    get_settings.cache_clear()
