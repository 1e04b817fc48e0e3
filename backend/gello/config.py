"""Application configuration using Pydantic Settings.

Every value is read from exactly one environment variable (case-insensitive),
optionally through a ``.env`` file. Settings are loaded once per process via
``get_settings()``.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Gello"
    app_version: str = "0.1.0"
    environment: Literal["development", "staging", "production", "test"] = "development"
    debug: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_json: bool = False

    # API
    api_prefix: str = "/api"
    allowed_origins: list[str] = Field(default_factory=lambda: ["http://localhost:3000"])

    # Supabase
    supabase_url: str = "http://localhost:54321"
    supabase_publishable_key: SecretStr = SecretStr("")
    supabase_service_role_key: SecretStr = SecretStr("")
    supabase_jwt_secret: SecretStr = SecretStr("super-secret-jwt-token-with-at-least-32-characters-long")
    supabase_jwt_audience: str = "authenticated"
    supabase_timeout_seconds: float = 10.0

    # Session cookies
    access_token_cookie: str = "sb-access-token"
    refresh_token_cookie: str = "sb-refresh-token"
    access_token_max_age: int = 60 * 60  # 1 hour
    refresh_token_max_age: int = 7 * 24 * 60 * 60  # 7 days

    # CSRF
    csrf_secret_key: SecretStr = SecretStr("change-me-in-production")
    csrf_cookie_name: str = "gello-csrf"
    csrf_header_name: str = "X-CSRF-Token"

    # Points
    leaderboard_default_limit: int = 100
    leaderboard_max_limit: int = 1000
    default_story_points: int = 1

    @property
    def cookie_secure(self) -> bool:
        """Session cookies are only marked secure in production (HTTPS)."""
        return self.environment == "production"

    @property
    def rest_url(self) -> str:
        return f"{self.supabase_url.rstrip('/')}/rest/v1"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
