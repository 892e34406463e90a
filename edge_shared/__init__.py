"""Shared utilities and components for the edge dashboard."""

from .constants import Provider
from .config import BaseHttpConfig, BaseLoggingConfig, BaseServiceConfig

__all__ = [
    "Provider",
    "BaseServiceConfig",
    "BaseLoggingConfig",
    "BaseHttpConfig",
]
