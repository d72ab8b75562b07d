"""Configuration settings for the smurf analysis core."""

from __future__ import annotations

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Process settings loaded from environment variables."""

    # Riot API
    riot_api_key: str = Field(default="", description="Static X-Riot-Token value")
    riot_platform: str = Field(default="na1", description="Default platform routing value")
    request_timeout_seconds: float = Field(default=30.0, gt=0)

    # Rate limiting
    max_requests_per_second: float = Field(default=20.0, gt=0)
    max_queue_size: int = Field(default=1000, ge=1)

    # Cache
    cache_dir: str = Field(default="storage")
    memory_cache_size: int = Field(default=1000, ge=1)

    # Orchestration
    normal_mode_concurrency: int = Field(default=20, ge=1)
    fast_mode_batch_size: int = Field(default=5, ge=1)
    fast_mode_batch_pause_seconds: float = Field(default=0.2, ge=0)

    # Logging
    log_level: str = Field(default="INFO")
    log_json: bool = Field(default=True)

    @field_validator("riot_platform")
    @classmethod
    def normalize_platform(cls, v: str) -> str:
        """Platform values are lowercase on the wire (na1, euw1, kr)."""
        return v.strip().lower()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Reject log levels the stdlib logging module doesn't know."""
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix for environment variables
        extra="ignore",
    )


def get_settings() -> Settings:
    """Get application settings instance."""
    return Settings()


# Create a global settings instance lazily
settings: Settings | None = None


def get_global_settings() -> Settings:
    """Get or create the global settings instance."""
    global settings
    if settings is None:
        settings = get_settings()
    return settings
