"""
Core application configuration using Pydantic Settings.

All environment variables are loaded here and validated.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # App Configuration
    APP_NAME: str = "Mailroom"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./mailroom.db"
    DB_CREATE_TABLES: bool = True  # create_all on startup (idempotent)

    # Security
    SECRET_KEY: str  # For JWT signing and CSRF tokens
    SESSION_SECRET_KEY: str  # For signing the session cookie
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_HOURS: int = 24
    SESSION_MAX_AGE_HOURS: int = 24

    # Argon2id cost (libsodium "interactive" profile by default)
    PASSWORD_HASH_OPSLIMIT: int = 2
    PASSWORD_HASH_MEMLIMIT: int = 67108864  # 64 MiB

    # Rate Limiting
    RATE_LIMIT_STORAGE_URI: str = "memory://"
    RATE_LIMIT_AUTH: str = "20/minute"

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Sentry Monitoring
    SENTRY_DSN: Optional[str] = None

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.ENVIRONMENT.lower() == "production"

    @property
    def session_max_age_seconds(self) -> int:
        """Session cookie lifetime in seconds."""
        return self.SESSION_MAX_AGE_HOURS * 3600

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")


# Global settings instance
settings = Settings()
