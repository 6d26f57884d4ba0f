"""
Configuration settings for the application
"""

from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    """Application settings"""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Database
    DATABASE_URL: str = "sqlite:///./wedding_rsvp.db"
    USE_FIREBASE: bool = False
    FIREBASE_CREDENTIALS_JSON: str | None = None
    FIREBASE_CREDENTIALS_FILE: str | None = None
    FIREBASE_CREDENTIALS_B64: str | None = None

    # Sessions
    GUEST_SESSION_DAYS: int = 30
    ADMIN_SESSION_HOURS: int = 24
    GUEST_COOKIE_NAME: str = "guest_session"
    ADMIN_COOKIE_NAME: str = "admin_session"
    COOKIE_SECURE: bool = False

    # Application
    BASE_URL: str = "http://localhost:8000"
    WEDDING_DATE: str = "2026-01-24T16:00:00"
    LOG_LEVEL: str = "INFO"

    # CORS
    ALLOW_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:8000",
    ]

    # Rate limiting
    RATE_LIMIT_PER_MINUTE: int = 30

settings = Settings()
