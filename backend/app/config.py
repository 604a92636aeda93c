"""Typed settings configuration - single source of truth."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database (service-role connection string for the hosted Postgres)
    database_url: str | None = None
    db_pool_size: int = 5

    # Auth (hosted auth service tokens)
    supabase_jwt_secret: str = ""
    jwt_audience: str = "authenticated"
    jwt_algorithms: list[str] = ["HS256"]
    auth_cookie_name: str = "sb-access-token"

    # UI
    ui_origin: str = "http://localhost:3000"

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
