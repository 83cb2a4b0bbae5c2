"""
Configuration management for Platformer Sync.
Uses pydantic-settings for environment variable parsing.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8080)

    # World dimensions
    screen_width: float = Field(
        default=800,
        description="World width in pixels"
    )
    screen_height: float = Field(
        default=600,
        description="World height in pixels"
    )
    world_seed: int | None = Field(
        default=None,
        description="Seed for coin placement and player colors. None uses system randomness"
    )

    # Broadcast
    broadcast_interval_ms: int = Field(
        default=100,
        gt=0,
        description="Period of the unconditional state broadcast in milliseconds"
    )
    send_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Upper bound for a single send to one connection"
    )

    # Static assets
    static_dir: str = Field(
        default="static",
        description="Directory served at the root path"
    )

    # Debug
    debug_mode: bool = Field(
        default=False,
        description="Enable debug endpoints"
    )
    log_level: str = Field(default="INFO")


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Use dependency injection in FastAPI routes.
    """
    return Settings()
