"""Application configuration models."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, HttpUrl, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_STORAGE_KEY = "moviedb-watchlist"


class Settings(BaseSettings):
    """Settings loaded from environment variables or a .env file."""

    app_name: str = Field(default="MovieDB Watchlist", alias="APP_NAME")
    server_host: str = Field(default="0.0.0.0", alias="HOST")
    server_port: int = Field(default=3000, alias="PORT")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", alias="LOG_LEVEL"
    )

    tmdb_api_key: str | None = Field(default=None, alias="TMDB_API_KEY")
    tmdb_base_url: HttpUrl = Field(
        default="https://api.themoviedb.org/3", alias="TMDB_BASE_URL"
    )
    tmdb_image_base_url: HttpUrl = Field(
        default="https://image.tmdb.org/t/p", alias="TMDB_IMAGE_BASE_URL"
    )
    tmdb_language: str | None = Field(default=None, alias="TMDB_LANGUAGE")
    http_timeout_seconds: float = Field(
        default=15.0, alias="HTTP_TIMEOUT", gt=0, le=120
    )

    watchlist_storage: Literal["memory", "file", "database"] = Field(
        default="database", alias="WATCHLIST_STORAGE"
    )
    watchlist_storage_key: str = Field(
        default=DEFAULT_STORAGE_KEY, alias="WATCHLIST_STORAGE_KEY"
    )
    watchlist_file_path: str = Field(
        default="./watchlist-store", alias="WATCHLIST_FILE_PATH"
    )

    database_url: str = Field(
        default="sqlite+aiosqlite:///./moviedb.db", alias="DATABASE_URL"
    )

    environment: Literal["development", "production"] = Field(
        default="development", alias="ENVIRONMENT"
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalise_log_level(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @field_validator("watchlist_storage_key", mode="before")
    @classmethod
    def _parse_storage_key(cls, value: object) -> str:
        """Trim the storage key and reject blank values."""

        if value is None:
            return DEFAULT_STORAGE_KEY
        key = str(value).strip()
        if not key:
            raise ValueError("WATCHLIST_STORAGE_KEY must not be blank")
        return key

    @property
    def tmdb_base(self) -> str:
        """Return the API base URL without a trailing slash."""

        return str(self.tmdb_base_url).rstrip("/")

    @property
    def image_base(self) -> str:
        return str(self.tmdb_image_base_url).rstrip("/")

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()  # type: ignore[call-arg]


settings = get_settings()
