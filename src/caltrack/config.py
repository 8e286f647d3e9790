"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    backend_base_url: str = "http://localhost:5001"
    product_db_base_url: str = "https://world.openfoodfacts.org"
    http_timeout_seconds: float = 10.0
    fallback_product_name: str = "Unknown Product"
    user_agent: str = "caltrack/0.1"
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_prefix="CALTRACK_",
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
