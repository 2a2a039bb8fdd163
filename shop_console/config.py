"""
Configuration for the shop console.

Values come from environment variables (or a local .env file) and are
validated once per process.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Main application settings."""

    api_url: str = Field(default="http://localhost:8080", alias="SHOP_CONSOLE_API_URL")

    # Location lookup used by shop registration
    geolocation_url: str = Field(default="http://ip-api.com/json", alias="GEOLOCATION_URL")
    geolocation_timeout: float = Field(default=10.0, alias="GEOLOCATION_TIMEOUT")

    # Per-shop product fetches on the admin dashboard
    max_workers: int = Field(default=8, alias="MAX_WORKERS")

    debug: bool = Field(default=False, alias="DEBUG")
    log_json: bool = Field(default=False, alias="LOG_JSON")

    @field_validator("api_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v):
        return v.rstrip("/")

    @field_validator("debug", "log_json", mode="before")
    @classmethod
    def parse_flag(cls, v):
        if isinstance(v, str):
            return v.lower() in ("1", "true", "yes")
        return bool(v)

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
