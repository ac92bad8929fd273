"""Centralized application configuration using Pydantic settings."""
from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-driven configuration shared across services."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    database_url: str = Field(
        default="sqlite:///./hotel.db",
        description="SQLAlchemy database URL. Defaults to local SQLite for development.",
    )
    run_db_migrations: bool = Field(
        default=False,
        description="Whether this service should create/update database tables on startup.",
    )
    seed_rooms_on_startup: bool = Field(
        default=False,
        description="Populate the default room inventory on startup when the rooms table is empty.",
    )
    jwt_secret: str = Field(default="super-secret", description="JWT signing secret")
    jwt_algorithm: str = Field(default="HS256", description="JWT signing algorithm")
    access_token_expire_minutes: int = Field(default=120, description="Token lifetime in minutes")
    cors_origins: List[str] = Field(default_factory=lambda: ["*"], description="Allowed CORS origins")
    default_rate_limit: str = Field(default="30/minute", description="Global rate limiting rule")
    rate_limiting_enabled: bool = Field(default=True, description="Toggle to disable SlowAPI limits (useful in tests)")
    log_dir: str = Field(default="logs", description="Directory for per-service audit logs")

    hotel_name: str = "The Grand Hotel"
    hotel_address: str = "123 Paradise Street, Mumbai, India"
    hotel_phone: str = "+91 98XXX XXXXX"
    hotel_email: str = "contact@grandhotel.com"
    hotel_website: str = "www.grandhotel.com"
    currency_label: str = "Rs."

    users_service_port: int = 8001
    rooms_service_port: int = 8002
    bookings_service_port: int = 8003
    admin_service_port: int = 8004


@lru_cache
def get_settings() -> Settings:
    """Return a cached instance of the Settings object."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the cached Settings instance (useful for tests)."""

    get_settings.cache_clear()
