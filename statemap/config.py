"""
Application Configuration — Pydantic Settings

Centralized configuration management using environment variables.
Loads from .env file automatically with sensible defaults.
"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Statemap settings loaded from environment variables.
    
    Priority: Environment variables > .env file > defaults
    """
    
    PROJECT_NAME: str = "Statemap Timeline"
    
    # === Header Defaults ===
    # Used by TimelineStore.from_settings() when the caller does not
    # supply header metadata explicitly.
    STATEMAP_TITLE: str = "statemap"
    STATEMAP_HOST: Optional[str] = None
    STATEMAP_ENTITY_KIND: Optional[str] = None
    
    # === Logging ===
    LOG_LEVEL: str = "INFO"
    
    # === Settings Configuration ===
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


# Singleton instance
settings = Settings()
