"""Typed settings configuration - single source of truth."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str | None = None

    # Cache
    redis_url: str | None = None

    # Logging
    log_level: str = "INFO"

    # Sharing
    share_slug_bytes: int = 8

    # Pagination
    default_page_size: int = 10
    max_page_size: int = 100

    # Catalog
    popular_cities_limit: int = 10
    city_detail_activities_limit: int = 20

    # Rate limiting (requests per window)
    crud_ops_per_min: int = 60
    rate_limit_window_sec: int = 60


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
