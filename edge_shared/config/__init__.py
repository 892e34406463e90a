"""Shared configuration base classes.

Provides the logging and outbound HTTP settings every provider client relies
on, so the service settings only add provider specific knobs.
"""

from pydantic_settings import BaseSettings


class BaseLoggingConfig(BaseSettings):
    """Common logging configuration."""

    app_log_level: str = "INFO"
    app_log_redaction_patterns: list[str] = [
        "password",
        "token",
        "secret",
        "key",
        "authorization",
        "cookie",
        "session",
    ]
    app_environment: str = "production"


class BaseHttpConfig(BaseSettings):
    """Outbound HTTP settings shared by all vendor clients."""

    http_timeout_seconds: float = 30.0
    http_max_connections: int = 100

    # Retry policy; 0 means exactly one attempt per vendor call
    upstream_retries: int = 0
    upstream_retry_base_delay: float = 0.5
    upstream_retry_max_delay: float = 4.0


class BaseServiceConfig(BaseLoggingConfig, BaseHttpConfig):
    """Base configuration combining logging and HTTP settings.

    The otel_service_name should be overridden by the service.
    """

    otel_service_name: str = "unknown"


__all__ = ["BaseLoggingConfig", "BaseHttpConfig", "BaseServiceConfig"]
