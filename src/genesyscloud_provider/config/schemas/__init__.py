"""Configuration schemas package."""

from .app_schema import AppConfig, validate_config
from .logging_schema import LogFileConfig, LoggingConfig
from .provider_schema import REGION_DOMAINS, ProviderConfig
from .retry_schema import RetryConfig

__all__ = [
    # Main configuration
    "AppConfig",
    "validate_config",
    # Provider configuration
    "ProviderConfig",
    "REGION_DOMAINS",
    # Polling configuration
    "RetryConfig",
    # Logging configuration
    "LoggingConfig",
    "LogFileConfig",
]
