"""Application configuration loaded via pydantic settings."""

from typing import List
import secrets

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Strongly-typed application settings with environment overrides."""

    # Application
    APP_NAME: str = "Timesheet Tracker"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False

    # Security
    SECRET_KEY: str = secrets.token_urlsafe(32)
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # Sign-in account (development credentials)
    AUTH_EMAIL: str = "user@timesheets.local"
    AUTH_PASSWORD: str = "Timesheet1234!"
    AUTH_FULL_NAME: str = "Timesheet User"

    # Timesheet store: "memory" or "sqlite"
    STORE_BACKEND: str = "memory"
    DATABASE_URL: str = "sqlite:///./timesheet_tracker/timesheets.db"
    SEED_MOCK_DATA: bool = True

    # CORS
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8000"]

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_LEVELS: str = "TRACE,ERROR,WARNING,INFO"
    LOG_FILE_PATH: str = "./timesheet_tracker/logs/app.log"

    class Config:
        """Configure environment file loading behavior."""

        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


settings = Settings()
