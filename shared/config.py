"""
Shared configuration management for the Tangle Explorer services.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="EXPLORER_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")

    # Backend gateway that fans requests out to nodes and indexers
    api_endpoint: str = Field(default="http://localhost:4000")
    request_timeout: float = Field(default=10.0)
    request_retries: int = Field(default=3)
    request_backoff_seconds: float = Field(default=0.5)

    # Tangle cache
    stale_time_seconds: float = Field(default=60.0)
    sweep_interval_seconds: float = Field(default=60.0)

    # Network registry; built-in networks are used when unset
    networks_file: Optional[str] = Field(default=None)


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str
    port: int
    host: str = "0.0.0.0"

    def __init__(self, service_name: str, port: int, **kwargs):
        super().__init__(service_name=service_name, port=port, **kwargs)


def get_config(service_name: str, port: int) -> ServiceConfig:
    """Get configuration for a specific service."""
    return ServiceConfig(service_name=service_name, port=port)
