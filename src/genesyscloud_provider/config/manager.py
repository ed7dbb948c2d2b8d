# src/genesyscloud_provider/config/manager.py
import copy
import json
import os
import re
from typing import Any, Dict, Optional, Tuple

import yaml
from pydantic import ValidationError as PydanticValidationError

from genesyscloud_provider.config.schemas import AppConfig, validate_config
from genesyscloud_provider.domain.core.exceptions import ConfigurationError

DEFAULT_CONFIG: Dict[str, Any] = {
    "version": "1.0",
    "environment": "${GENESYSCLOUD_ENVIRONMENT:development}",

    # Platform API connection
    "provider": {
        "oauthclient_id": "${GENESYSCLOUD_OAUTHCLIENT_ID:}",
        "oauthclient_secret": "${GENESYSCLOUD_OAUTHCLIENT_SECRET:}",
        "aws_region": "${GENESYSCLOUD_REGION:us-east-1}",
        "api_url": "${GENESYSCLOUD_API_URL:}",
        "token_pool_size": 10,
        "request_timeout": 30.0,
        "max_retries": 3,
        "retry_base_delay": 1.0,
        "sdk_debug": False,
    },

    # Polling deadlines for resource operations
    "retry": {
        "backoff_seconds": 1.0,
        "read_timeout": 300.0,
        "lookup_timeout": 15.0,
        "delete_timeout": 30.0,
    },

    # Logging configuration
    "logging": {
        "level": "${LOG_LEVEL:INFO}",
        "destination": "${LOG_DESTINATION:stdout}",
        "format": "${LOG_FORMAT:console}",
        "file": {
            "path": "${GENESYSCLOUD_LOG_DIR:.}/genesyscloud-provider.log",
            "max_size_mb": 10,
            "backup_count": 5,
        },
    },
}

# Environment variables applied after the configuration file (highest priority)
ENV_MAPPINGS: Dict[str, Tuple[str, ...]] = {
    "GENESYSCLOUD_OAUTHCLIENT_ID": ("provider", "oauthclient_id"),
    "GENESYSCLOUD_OAUTHCLIENT_SECRET": ("provider", "oauthclient_secret"),
    "GENESYSCLOUD_REGION": ("provider", "aws_region"),
    "GENESYSCLOUD_API_URL": ("provider", "api_url"),
    "GENESYSCLOUD_TOKEN_POOL_SIZE": ("provider", "token_pool_size"),
    "GENESYSCLOUD_SDK_DEBUG": ("provider", "sdk_debug"),
    "LOG_LEVEL": ("logging", "level"),
    "LOG_DESTINATION": ("logging", "destination"),
    "LOG_FILE": ("logging", "file", "path"),
}

_VARIABLE = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::([^}]*))?\}")


class ConfigurationManager:
    """
    Manages provider configuration with defaults and overrides.

    This class handles:
    - Loading default configuration
    - Applying configuration file overrides (YAML or JSON)
    - Applying environment variable overrides
    - Variable interpolation
    - Configuration validation
    """

    def __init__(self, config_file: Optional[str] = None):
        """
        Initialize configuration manager with defaults.

        Args:
            config_file: Optional path to a configuration file. If not provided,
                        GENESYSCLOUD_CONFIG_FILE is used when set.
        """
        self._config = copy.deepcopy(DEFAULT_CONFIG)

        config_file = config_file or os.environ.get("GENESYSCLOUD_CONFIG_FILE")
        if config_file:
            self._load_config_file(config_file)

        # Load environment variables (highest priority)
        self._load_env_vars()

        self._app_config = self.validate_config()

    def _load_config_file(self, config_path: str) -> None:
        """Load configuration from file."""
        try:
            with open(config_path, "r") as f:
                if config_path.endswith((".yml", ".yaml")):
                    user_config = yaml.safe_load(f) or {}
                else:
                    user_config = json.load(f)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Failed to load configuration from {config_path}: {str(e)}")

        if not isinstance(user_config, dict):
            raise ConfigurationError(f"Configuration file {config_path} must contain a mapping")
        self.update_config(user_config)

    def _load_env_vars(self) -> None:
        """Load and apply environment variable overrides."""
        for env_var, path in ENV_MAPPINGS.items():
            if env_var in os.environ:
                self._set_nested_value(self._config, path, os.environ[env_var])

    def _set_nested_value(self, config: Dict[str, Any], path: Tuple[str, ...], value: Any) -> None:
        """Set a nested configuration value."""
        current = config
        for key in path[:-1]:
            current = current.setdefault(key, {})
        current[path[-1]] = value

    def _interpolate_values(self, config: Any) -> Any:
        """Interpolate ${VAR} and ${VAR:default} references in configuration values."""
        if isinstance(config, str):
            def replace(match: "re.Match[str]") -> str:
                name, default = match.group(1), match.group(2)
                if name in os.environ:
                    return os.environ[name]
                return default if default is not None else match.group(0)
            return _VARIABLE.sub(replace, config)
        elif isinstance(config, dict):
            return {k: self._interpolate_values(v) for k, v in config.items()}
        elif isinstance(config, list):
            return [self._interpolate_values(v) for v in config]
        return config

    def update_config(self, user_config: Dict[str, Any]) -> None:
        """
        Update configuration with user-provided values.

        Args:
            user_config: Configuration dictionary from user config file
        """
        def deep_update(target: Dict[str, Any], source: Dict[str, Any]) -> None:
            for key, value in source.items():
                if key in target and isinstance(target[key], dict) and isinstance(value, dict):
                    deep_update(target[key], value)
                else:
                    target[key] = value

        deep_update(self._config, user_config)

    def get_config(self) -> Dict[str, Any]:
        """
        Get the complete configuration with all interpolations applied.

        Returns:
            Dict containing the complete configuration
        """
        config = self._interpolate_values(self._config)
        # An empty API URL means "derive from region"
        if not config.get("provider", {}).get("api_url"):
            config.setdefault("provider", {})["api_url"] = None
        return config

    @property
    def app_config(self) -> AppConfig:
        return self._app_config

    def validate_config(self) -> AppConfig:
        """
        Validate the configuration.

        Returns:
            Validated AppConfig

        Raises:
            ConfigurationError: If configuration is invalid with detailed error messages
        """
        try:
            return validate_config(self.get_config())
        except PydanticValidationError as e:
            errors = [
                f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
                for err in e.errors()
            ]
            raise ConfigurationError(
                "Configuration validation failed:\n" + "\n".join(errors),
                missing_fields=[".".join(str(p) for p in err["loc"]) for err in e.errors() if err["type"] == "missing"],
            )


def get_config(config_file: Optional[str] = None) -> AppConfig:
    """Load and validate configuration."""
    return ConfigurationManager(config_file).app_config
