"""Core application configuration and settings.

Handles environment variables, storage backend selection and the tuning knobs
of the simulated real-time behaviour (live feed, mentor replies).
"""
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings


# Load environment variables
ROOT = Path(__file__).resolve().parents[2]
load_dotenv(dotenv_path=ROOT / ".env", override=False)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application Settings
    environment: str = Field(default="development", alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # API Settings
    api_prefix: str = Field(default="/api", alias="API_PREFIX")
    cors_origins: list[str] = Field(
        default_factory=lambda: [
            "http://localhost:8080",
            "http://127.0.0.1:8080"
        ],
        alias="CORS_ORIGINS"
    )

    # Storage: "memory" keeps everything in process, "redis" uses the
    # connection settings below for repositories and persisted slices.
    storage_backend: str = Field(default="memory", alias="STORAGE_BACKEND")
    persistence_key_prefix: str = Field(default="voicementor_", alias="PERSISTENCE_KEY_PREFIX")

    # Redis Configuration
    redis_host: str = Field(default="localhost", alias="REDIS_HOST")
    redis_port: int = Field(default=6379, alias="REDIS_PORT")
    redis_password: Optional[str] = Field(default=None, alias="REDIS_PASSWORD")
    redis_db: int = Field(default=0, alias="REDIS_DB")

    # Simulated live feed
    live_feed_enabled: bool = Field(default=True, alias="LIVE_FEED_ENABLED")
    live_feed_interval_seconds: float = Field(default=10.0, gt=0, alias="LIVE_FEED_INTERVAL_SECONDS")
    live_feed_probability: float = Field(default=0.3, ge=0, le=1, alias="LIVE_FEED_PROBABILITY")

    # Simulated mentor replies
    mentor_reply_enabled: bool = Field(default=True, alias="MENTOR_REPLY_ENABLED")
    mentor_reply_min_delay: float = Field(default=2.0, ge=0, alias="MENTOR_REPLY_MIN_DELAY")
    mentor_reply_max_delay: float = Field(default=5.0, ge=0, alias="MENTOR_REPLY_MAX_DELAY")

    class Config:
        case_sensitive = False
        env_file = ".env"
        populate_by_name = True

    def validate_required_settings(self):
        """Validate settings that cannot be expressed as field constraints."""
        if self.storage_backend not in ("memory", "redis"):
            raise ValueError(
                f"STORAGE_BACKEND must be 'memory' or 'redis', got '{self.storage_backend}'."
            )
        if self.mentor_reply_min_delay > self.mentor_reply_max_delay:
            raise ValueError(
                "MENTOR_REPLY_MIN_DELAY must not exceed MENTOR_REPLY_MAX_DELAY."
            )


# Global settings instance
settings = Settings()

# Validate settings on module import (only in non-test environments)
if settings.environment != "test":
    try:
        settings.validate_required_settings()
    except ValueError as e:
        print(f"Configuration Error: {e}")
        if settings.environment == "production":
            raise
