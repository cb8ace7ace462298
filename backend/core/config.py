"""
Upkeep — Configuration settings.

Loads from environment variables with sensible defaults.
"""

from typing import Optional
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # Database
    database_url: str = "sqlite:///./upkeep.db"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    log_level: str = "INFO"

    # Security - leave empty to disable perimeter auth (trusted network mode)
    api_key: Optional[str] = None

    # Frontend - comma-separated list in .env, e.g. CORS_ORIGINS=http://localhost:3000,http://example.com
    # Default is empty (no cross-origin).
    cors_origins: str = ""

    # Calendar day boundaries ("today", "overdue") are computed in this zone
    time_zone: str = "UTC"

    # Open-ended schedules are projected this many months past today
    projection_horizon_months: int = 3

    # Default number of upcoming occurrences returned by the agenda view
    agenda_default_limit: int = 10

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
