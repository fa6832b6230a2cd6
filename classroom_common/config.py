"""Centralized application configuration using Pydantic settings."""
from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-driven configuration for the classroom booking service."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    app_name: str = Field(default="Classroom Booking Service", description="Title exposed in the OpenAPI docs")
    seed_data: bool = Field(default=True, description="Load the demo rooms, bookings and users on startup.")
    cors_origins: List[str] = Field(default_factory=lambda: ["*"], description="Allowed CORS origins")
    default_rate_limit: str = Field(default="60/minute", description="Global rate limiting rule")
    rate_limiting_enabled: bool = Field(default=True, description="Toggle to disable SlowAPI limits (useful in tests)")
    metrics_enabled: bool = Field(default=True, description="Expose Prometheus metrics on /metrics")
    log_dir: str = Field(default="logs", description="Directory receiving the per-service audit logs")
    room_cache_ttl: int = Field(default=60, description="TTL (s) for cached room status results")

    suggestion_limit: int = Field(default=3, description="Alternatives offered when a slot is taken")
    suggestion_step_minutes: int = Field(default=30, description="Granularity of the alternative-slot scan")
    suggestion_horizon_hours: int = Field(default=6, description="How far past the requested start to scan")
    max_recurring_occurrences: int = Field(default=366, description="Upper bound on bookings generated per template")
    stream_heartbeat_seconds: float = Field(default=10.0, description="Heartbeat interval of the live event stream")

    rabbitmq_enabled: bool = Field(default=False, description="Forward store events to RabbitMQ")
    rabbitmq_host: str = Field(default="rabbitmq", description="RabbitMQ broker host")
    rabbitmq_queue: str = Field(default="bookings", description="Durable queue receiving store events")

    service_port: int = 8000


@lru_cache
def get_settings() -> Settings:
    """Return a cached instance of the Settings object."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the cached Settings instance (useful for tests)."""

    get_settings.cache_clear()
