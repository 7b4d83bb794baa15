"""Application configuration using Pydantic Settings.

All environment variables are read through this module.
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Database configuration settings."""

    model_config = SettingsConfigDict(env_prefix="DB_", case_sensitive=False)

    url: str = Field(
        ...,
        alias="DATABASE_URL",
        description="PostgreSQL connection URL (postgresql+asyncpg://...)",
    )
    pool_size: int = Field(
        default=20,
        description="Connection pool size",
    )
    max_overflow: int = Field(
        default=10,
        description="Maximum number of connections to create above pool_size",
    )
    echo: bool = Field(
        default=False,
        description="Enable SQL query logging (development only)",
    )

    @field_validator("url")
    @classmethod
    def use_asyncpg_driver(cls, v: str) -> str:
        """Rewrite plain postgres URLs to the asyncpg driver."""
        for scheme in ("postgresql://", "postgres://"):
            if v.startswith(scheme):
                return "postgresql+asyncpg://" + v[len(scheme):]
        if not v.startswith("postgresql+asyncpg://"):
            raise ValueError("DATABASE_URL must be a PostgreSQL URL")
        return v


class RedisSettings(BaseSettings):
    """Redis configuration for status-change notifications."""

    model_config = SettingsConfigDict(env_prefix="REDIS_", case_sensitive=False)

    url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL",
    )
    status_channel_prefix: str = Field(
        default="service-status",
        description="Pub/sub channel prefix; channel is '<prefix>.<service_id>'",
    )


class ObservabilitySettings(BaseSettings):
    """Observability configuration settings (OpenTelemetry, logging, metrics)."""

    model_config = SettingsConfigDict(env_prefix="OTEL_", case_sensitive=False)

    # OpenTelemetry Tracing
    traces_exporter: Literal["otlp", "console", "none"] = Field(
        default="otlp",
        description="Span exporter: 'otlp' (collector), 'console' (stdout) or 'none'",
    )
    exporter_otlp_endpoint: str = Field(
        default="http://localhost:4317",
        description="OTLP exporter endpoint (gRPC)",
    )
    exporter_otlp_insecure: bool = Field(
        default=True,
        description="Send spans over plaintext gRPC; disable when the collector uses TLS",
    )
    service_name: str = Field(
        default="uptime-engine",
        description="Service name for traces and metrics",
    )
    trace_sample_rate: float = Field(
        default=0.1,
        ge=0.0,
        le=1.0,
        description="Trace sampling rate (0.0 to 1.0)",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    log_json_format: bool = Field(
        default=True,
        description="Enable JSON structured logging",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize to upper case and reject unknown level names."""
        level = v.upper()
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if level not in allowed:
            raise ValueError(f"log_level must be one of {sorted(allowed)}")
        return level


class BackgroundTaskSettings(BaseSettings):
    """Background task configuration settings."""

    model_config = SettingsConfigDict(case_sensitive=False)

    status_recalculation_interval_minutes: int = Field(
        default=60,
        ge=1,
        description="Interval between full service status recalculations (minutes)",
    )
    status_recalculation_max_concurrency: int = Field(
        default=1,
        ge=1,
        description="Services recalculated concurrently per organization",
    )
    status_recalculation_on_startup: bool = Field(
        default=False,
        description="Run the first recalculation when the worker starts",
    )


class MetricsSettings(BaseSettings):
    """Prometheus scrape endpoint of the worker."""

    model_config = SettingsConfigDict(env_prefix="METRICS_", case_sensitive=False)

    port: int = Field(
        default=9464,
        ge=0,
        le=65535,
        description="Port serving /metrics; 0 disables the endpoint",
    )
    addr: str = Field(
        default="0.0.0.0",
        description="Bind address of the metrics endpoint",
    )


class NotificationSettings(BaseSettings):
    """Status-change notification backend selection."""

    model_config = SettingsConfigDict(env_prefix="NOTIFIER_", case_sensitive=False)

    backend: Literal["log", "redis"] = Field(
        default="log",
        description="Notifier backend: 'log' (structured log only) or 'redis' (pub/sub)",
    )


class Settings(BaseSettings):
    """Main application settings.

    Aggregates all configuration modules and provides a single settings object.
    Load from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    environment: str = Field(
        default="development",
        description="Application environment (development, staging, production)",
    )

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    redis: RedisSettings = Field(default_factory=RedisSettings)
    observability: ObservabilitySettings = Field(
        default_factory=ObservabilitySettings
    )
    background_tasks: BackgroundTaskSettings = Field(
        default_factory=BackgroundTaskSettings
    )
    notifications: NotificationSettings = Field(default_factory=NotificationSettings)
    metrics: MetricsSettings = Field(default_factory=MetricsSettings)


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get global settings instance (singleton pattern).

    Returns:
        Settings instance loaded from environment
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
