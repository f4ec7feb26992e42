"""
Configuration settings for the Arcade Market API.

Loads environment variables from .env file and provides typed configuration.
"""

from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field

# Values shipped in the sample .env; treated as "not configured"
PLACEHOLDER_SUPABASE_URL = "https://your-project-id.supabase.co"
PLACEHOLDER_SUPABASE_KEY = "your_supabase_anon_key_here"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API Configuration
    API_PREFIX: str = "/api"
    CORS_ORIGINS: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"],
        description="Allowed CORS origins",
    )

    # Security Configuration
    SECRET_KEY: str = Field(
        default="change-me-in-production-3f1c9b0e8d7a6c5b4a39281706f5e4d3",
        description="Secret key for JWT",
    )
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(
        default=60 * 24, description="Access token expiration time in minutes"
    )
    PASSWORD_HASH_ROUNDS: int = Field(
        default=12, description="bcrypt cost factor"
    )
    RATE_LIMIT_ENABLED: bool = Field(
        default=True, description="Rate limit login endpoints"
    )

    # Remote database (hosted PostgREST service)
    SUPABASE_PROJECT_URL: Optional[str] = Field(
        default=None, description="Hosted database project URL"
    )
    SUPABASE_API_KEY: Optional[str] = Field(
        default=None, description="Hosted database API key"
    )
    SUPABASE_TIMEOUT: float = Field(
        default=30.0, description="Remote database request timeout in seconds"
    )

    # Embedded database
    DATABASE_URL: str = Field(
        default="sqlite:///./data/marketplace.db", description="SQLite database URL"
    )
    DATABASE_ECHO: bool = Field(
        default=False, description="Echo SQL queries (for debugging)"
    )

    # Bootstrap admin account
    DEFAULT_ADMIN_USERNAME: str = "admin"
    DEFAULT_ADMIN_EMAIL: str = "admin@kamukunji.com"
    DEFAULT_ADMIN_PASSWORD: str = "admin123"

    # Push notifications (delivery handled outside this service)
    VAPID_PUBLIC_KEY: Optional[str] = Field(
        default=None, description="Public VAPID key handed to browsers"
    )

    # Logging Configuration
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    ENABLE_FILE_LOGGING: bool = Field(
        default=False, description="Enable logging to file"
    )
    LOG_DIR: str = Field(default="./logs", description="Directory for log files")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False

    def remote_backend_configured(self) -> bool:
        """True when real (non-placeholder) remote credentials are present."""
        url = (self.SUPABASE_PROJECT_URL or "").strip()
        key = (self.SUPABASE_API_KEY or "").strip()
        if not url or not key:
            return False
        return url != PLACEHOLDER_SUPABASE_URL and key != PLACEHOLDER_SUPABASE_KEY
