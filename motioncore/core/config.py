"""
Application configuration.
All values loaded from environment variables or a local .env file.
"""
from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    APP_NAME: str = "MotionCore"

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./motioncore.db"
    DATABASE_ECHO: bool = False

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"  # json or console

    # Transfer Debug Logging - logs every exported/imported item
    # WARNING: item payloads contain personal health data
    TRANSFER_DEBUG_LOG: bool = False

    # Export / Import
    EXPORT_DIR: Optional[str] = None  # Falls back to the system temp directory
    EXPORT_FORMAT_VERSION: int = 1  # Only this version is accepted on import

    def export_filename(self, kind_label: str, timestamp: int) -> str:
        """Build the export filename for a data kind (e.g. "Export", "Outdoor")."""
        return f"{self.APP_NAME}-{kind_label}-{timestamp}.json"

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance, injectable via FastAPI Depends."""
    return Settings()


settings = get_settings()
