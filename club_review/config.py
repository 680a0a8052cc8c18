"""Application configuration settings."""
from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Configuration values loaded from environment variables or a .env file."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    database_url: str = Field(
        default="sqlite:///./club_review.db",
        description="SQLAlchemy connection URL",
        min_length=1,
    )
    log_level: str = Field(default="INFO", description="Root logging level")
    default_page_size: int = Field(default=10, gt=0)
    max_page_size: int = Field(default=100, gt=0)
    max_bulk_size: int = Field(
        default=200,
        gt=0,
        description="Largest number of ids accepted by one bulk transition",
    )
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""
    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""
    get_settings.cache_clear()
