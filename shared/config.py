"""
Shared configuration management for the leaderboard service.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="LEADERBOARD_",
        env_file=".env",
        case_sensitive=False,
        extra="allow"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")

    # Cache
    redis_url: str = Field(default="redis://redis-cluster:6379/0")
    season_ttl_seconds: int = Field(default=24 * 60 * 60)
    leaderboard_ttl_seconds: int = Field(default=10 * 60)

    # Origin API
    pubg_api_endpoint: str = Field(default="https://api.pubg.com/shards/pc-na")
    pubg_api_key: str = Field(default="")
    game_mode: str = Field(default="squad-fpp")
    origin_timeout_seconds: float = Field(default=10.0)

    # Read path
    request_timeout_seconds: float = Field(default=15.0)
    # "refetch" treats a leaderboard cache error as a miss, "fail" surfaces it
    leaderboard_cache_error_policy: str = Field(default="refetch")

    # Background refresh
    season_refresh_interval_seconds: float = Field(default=24 * 60 * 60)
    leaderboard_refresh_interval_seconds: float = Field(default=10 * 60)


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str
    port: int
    host: str = "0.0.0.0"

    def __init__(self, service_name: str, port: int, **kwargs):
        super().__init__(service_name=service_name, port=port, **kwargs)


def get_config(service_name: str, port: int, **overrides) -> ServiceConfig:
    """Get configuration for a specific service."""
    return ServiceConfig(service_name=service_name, port=port, **overrides)
