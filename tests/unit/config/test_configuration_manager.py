"""Tests for configuration loading, overrides and validation."""

import json
import os
from unittest.mock import patch

import pytest
import yaml

from genesyscloud_provider.config import ConfigurationManager, get_config
from genesyscloud_provider.config.schemas import AppConfig, ProviderConfig, RetryConfig
from genesyscloud_provider.domain.core.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def isolated_environment():
    """Run every test without provider variables from the outer environment."""
    names = [
        "GENESYSCLOUD_CONFIG_FILE",
        "GENESYSCLOUD_OAUTHCLIENT_ID",
        "GENESYSCLOUD_OAUTHCLIENT_SECRET",
        "GENESYSCLOUD_REGION",
        "GENESYSCLOUD_API_URL",
        "GENESYSCLOUD_TOKEN_POOL_SIZE",
        "GENESYSCLOUD_SDK_DEBUG",
        "GENESYSCLOUD_ENVIRONMENT",
        "LOG_LEVEL",
        "LOG_DESTINATION",
        "LOG_FILE",
    ]
    saved = {name: os.environ.pop(name) for name in names if name in os.environ}
    yield
    os.environ.update(saved)


class TestConfigurationManager:
    """Test configuration defaults and overrides."""

    def test_defaults(self):
        config = ConfigurationManager().app_config

        assert isinstance(config, AppConfig)
        assert config.provider.aws_region == "us-east-1"
        assert config.provider.api_url is None
        assert config.provider.base_url == "https://api.mypurecloud.com"
        assert config.provider.login_url == "https://login.mypurecloud.com"
        assert config.retry.backoff_seconds == 1.0
        assert config.retry.read_timeout == 300.0
        assert config.retry.lookup_timeout == 15.0
        assert config.retry.delete_timeout == 30.0
        assert config.logging.level == "INFO"

    def test_environment_overrides(self):
        env = {
            "GENESYSCLOUD_OAUTHCLIENT_ID": "env-id",
            "GENESYSCLOUD_OAUTHCLIENT_SECRET": "env-secret",
            "GENESYSCLOUD_REGION": "eu-west-1",
            "GENESYSCLOUD_TOKEN_POOL_SIZE": "4",
            "LOG_LEVEL": "debug",
        }
        with patch.dict(os.environ, env):
            config = ConfigurationManager().app_config

        assert config.provider.oauthclient_id == "env-id"
        assert config.provider.oauthclient_secret.get_secret_value() == "env-secret"
        assert config.provider.base_url == "https://api.mypurecloud.ie"
        assert config.provider.token_pool_size == 4
        assert config.provider.has_credentials()
        assert config.logging.level == "DEBUG"

    def test_yaml_file_is_deep_merged(self, tmp_path):
        config_file = tmp_path / "provider.yml"
        config_file.write_text(yaml.safe_dump({
            "provider": {"aws_region": "ap-southeast-2"},
            "retry": {"read_timeout": 60},
        }))

        config = ConfigurationManager(str(config_file)).app_config

        assert config.provider.domain == "mypurecloud.com.au"
        assert config.provider.max_retries == 3
        assert config.retry.read_timeout == 60.0
        assert config.retry.backoff_seconds == 1.0

    def test_json_file(self, tmp_path):
        config_file = tmp_path / "provider.json"
        config_file.write_text(json.dumps({"provider": {"api_url": "https://api.example.test/"}}))

        config = ConfigurationManager(str(config_file)).app_config

        assert config.provider.base_url == "https://api.example.test"

    def test_config_file_from_environment(self, tmp_path):
        config_file = tmp_path / "provider.yaml"
        config_file.write_text("environment: staging\n")

        with patch.dict(os.environ, {"GENESYSCLOUD_CONFIG_FILE": str(config_file)}):
            config = get_config()

        assert config.environment == "staging"

    def test_environment_beats_config_file(self, tmp_path):
        config_file = tmp_path / "provider.yaml"
        config_file.write_text("provider:\n  oauthclient_id: file-id\n")

        with patch.dict(os.environ, {"GENESYSCLOUD_OAUTHCLIENT_ID": "env-id"}):
            config = ConfigurationManager(str(config_file)).app_config

        assert config.provider.oauthclient_id == "env-id"

    def test_interpolation_in_file_values(self, tmp_path):
        config_file = tmp_path / "provider.yaml"
        config_file.write_text("logging:\n  file:\n    path: ${TEST_LOG_ROOT:/var/log}/provider.log\n")

        config = ConfigurationManager(str(config_file)).app_config
        assert config.logging.file.path == "/var/log/provider.log"

        with patch.dict(os.environ, {"TEST_LOG_ROOT": "/tmp/logs"}):
            config = ConfigurationManager(str(config_file)).app_config
        assert config.logging.file.path == "/tmp/logs/provider.log"

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Failed to load configuration"):
            ConfigurationManager(str(tmp_path / "missing.yml"))

    def test_non_mapping_file_raises(self, tmp_path):
        config_file = tmp_path / "provider.yml"
        config_file.write_text("- just\n- a list\n")

        with pytest.raises(ConfigurationError, match="must contain a mapping"):
            ConfigurationManager(str(config_file))

    def test_invalid_values_raise_with_details(self):
        with patch.dict(os.environ, {"GENESYSCLOUD_REGION": "mars-north-1"}):
            with pytest.raises(ConfigurationError) as exc_info:
                ConfigurationManager()

        assert "provider.aws_region" in str(exc_info.value)

    def test_update_config_then_get_config(self):
        manager = ConfigurationManager()

        manager.update_config({"retry": {"lookup_timeout": 5}})

        assert manager.get_config()["retry"]["lookup_timeout"] == 5
        assert manager.validate_config().retry.lookup_timeout == 5.0


class TestSchemas:
    """Test schema validators."""

    @pytest.mark.parametrize("backoff", [0, -0.5])
    def test_backoff_must_be_positive(self, backoff):
        with pytest.raises(ValueError):
            RetryConfig(backoff_seconds=backoff)

    def test_timeouts_must_not_be_negative(self):
        with pytest.raises(ValueError):
            RetryConfig(read_timeout=-1)

    @pytest.mark.parametrize("size", [0, 21])
    def test_pool_size_bounds(self, size):
        with pytest.raises(ValueError):
            ProviderConfig(token_pool_size=size)

    def test_region_is_normalized(self):
        assert ProviderConfig(aws_region="US-EAST-2").base_url == "https://api.use2.us-gov-pure.cloud"

    def test_environment_must_be_known(self):
        with pytest.raises(ValueError):
            AppConfig(environment="qa")

    def test_missing_credentials(self):
        assert not ProviderConfig().has_credentials()
