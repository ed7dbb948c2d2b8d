"""Configuration package - schemas and configuration loading."""

from .manager import DEFAULT_CONFIG, ConfigurationManager, get_config
from .schemas import AppConfig, LoggingConfig, ProviderConfig, RetryConfig

__all__ = [
    "DEFAULT_CONFIG",
    "ConfigurationManager",
    "get_config",
    "AppConfig",
    "ProviderConfig",
    "RetryConfig",
    "LoggingConfig",
]
