"""Application configuration."""
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str = "sqlite+aiosqlite:///./restaurant_pos.db"

    # Restaurant
    restaurant_name: str = "Restaurant"
    currency_symbol: str = "₹"

    # Catalog
    catalog_file: Optional[str] = None  # Bundled defaults override (YAML)
    seed_remote_catalog: bool = True

    # Local snapshot cache; in-memory when unset
    cache_dir: Optional[str] = None

    # Logging
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )


settings = Settings()
