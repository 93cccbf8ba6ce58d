"""
Application configuration using Pydantic Settings.

Environment-based infrastructure switching is controlled by the ENVIRONMENT variable.
"""

from functools import lru_cache
from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Largest id set the document store accepts in a single "fetch by ids" query.
STORE_MAX_IDS_PER_QUERY = 10


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ===========================================
    # Environment
    # ===========================================
    ENVIRONMENT: Literal["local"] = "local"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # ===========================================
    # Database
    # ===========================================
    DATABASE_URL: str = "sqlite+aiosqlite:///./tracker.db"
    DATABASE_ECHO: bool = False

    # Batch size for id-set lookups (never above the store limit)
    LOOKUP_BATCH_SIZE: int = Field(default=STORE_MAX_IDS_PER_QUERY, ge=1, le=STORE_MAX_IDS_PER_QUERY)

    # ===========================================
    # Auth
    # ===========================================
    AUTH_PROVIDER: Literal["mock", "jwt"] = "mock"
    JWT_SECRET: str = ""
    JWT_ISSUER: str = "project-tracker"
    JWT_EXPIRE_MINUTES: int = 60 * 24 * 7
    JWT_EMAIL_CLAIM: str = "email"
    JWT_NAME_CLAIM: str = "name"

    # ===========================================
    # Display
    # ===========================================
    # IANA timezone used as "local" when labelling due dates
    DISPLAY_TIMEZONE: str = "UTC"

    # ===========================================
    # Server
    # ===========================================
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    ALLOWED_ORIGINS: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"]
    )

    # ===========================================
    # Realtime
    # ===========================================
    REALTIME_KEEPALIVE_SECONDS: float = 15.0

    @property
    def is_local(self) -> bool:
        """Check if running in local environment."""
        return self.ENVIRONMENT == "local"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache ensures settings are loaded only once.
    """
    return Settings()
