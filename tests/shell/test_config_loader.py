"""Tests for the Configuration Loader module.

Tests configuration loading from YAML files and environment variables.
"""

import os
from unittest.mock import patch

import pytest
import yaml

from quake_alert.core.config import DEFAULT_IMAGE_BASE_URL, validate_config
from quake_alert.core.intensity import Intensity, InvalidConfigValue
from quake_alert.shell.config_loader import (
    _resolve_value,
    load_config,
    load_config_from_dict,
    load_config_from_env,
)


class TestResolveValue:
    """Tests for _resolve_value function."""

    def test_returns_non_string_unchanged(self):
        assert _resolve_value(123) == 123
        assert _resolve_value(None) is None

    def test_returns_plain_string_unchanged(self):
        assert _resolve_value("hello") == "hello"

    def test_resolves_env_var_placeholder(self):
        with patch.dict(os.environ, {"TEST_TOKEN": "xoxb-from-env"}):
            assert _resolve_value("${TEST_TOKEN}") == "xoxb-from-env"

    def test_returns_placeholder_if_env_var_not_set(self):
        with patch.dict(os.environ, {}, clear=True):
            assert _resolve_value("${UNDEFINED_VAR}") == "${UNDEFINED_VAR}"


class TestLoadConfigFromDict:
    """Tests for load_config_from_dict function."""

    def test_full(self):
        config = load_config_from_dict({
            "slack_bot_token": "xoxb-abc",
            "slack_channel_id": "C0123456789",
            "min_intensity": "5+",
            "environment": "Production",
            "image_base_url": "https://cdn.example.com/img",
            "reconnect_delay_seconds": 2,
            "max_reconnect_delay_seconds": 30,
        })

        assert config.slack_bot_token == "xoxb-abc"
        assert config.slack_channel_id == "C0123456789"
        assert config.min_intensity == Intensity.FIVE_UPPER
        assert config.environment == "production"
        assert config.image_base_url == "https://cdn.example.com/img"
        assert config.reconnect_delay_seconds == 2.0
        assert config.max_reconnect_delay_seconds == 30.0

    def test_defaults(self):
        config = load_config_from_dict({})

        assert config.min_intensity == Intensity.THREE
        assert config.environment == "development"
        assert config.image_base_url == DEFAULT_IMAGE_BASE_URL
        assert config.reconnect_delay_seconds == 5.0

    def test_numeric_threshold_from_yaml(self):
        """YAML parses `min_intensity: 4` as an int."""
        assert load_config_from_dict({"min_intensity": 4}).min_intensity == Intensity.FOUR

    def test_invalid_threshold_raises(self):
        with pytest.raises(InvalidConfigValue):
            load_config_from_dict({"min_intensity": "8"})

    def test_resolves_placeholders(self):
        with patch.dict(os.environ, {"MY_TOKEN": "xoxb-secret"}):
            config = load_config_from_dict({"slack_bot_token": "${MY_TOKEN}"})
        assert config.slack_bot_token == "xoxb-secret"


class TestLoadConfigFromEnv:
    """Tests for load_config_from_env function."""

    def test_reads_environment(self):
        env = {
            "SLACK_BOT_TOKEN": "xoxb-env",
            "SLACK_CHANNEL_ID": "C0123456789",
            "MIN_INTENSITY": "5弱",
            "APP_ENV": "production",
        }
        with patch.dict(os.environ, env, clear=True):
            config = load_config_from_env()

        assert config.slack_bot_token == "xoxb-env"
        assert config.min_intensity == Intensity.FIVE_LOWER
        assert config.is_production is True

    def test_empty_environment_uses_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            config = load_config_from_env()

        assert config.slack_bot_token == ""
        assert config.min_intensity == Intensity.THREE

    def test_invalid_threshold(self):
        with patch.dict(os.environ, {"MIN_INTENSITY": "strong"}, clear=True):
            with pytest.raises(InvalidConfigValue):
                load_config_from_env()


class TestLoadConfig:
    """Tests for load_config function (YAML)."""

    def test_loads_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump({
            "slack_bot_token": "xoxb-file",
            "slack_channel_id": "C0123456789",
            "min_intensity": "4",
        }))

        with patch.dict(os.environ, {}, clear=True):
            config = load_config(path)

        assert config.slack_bot_token == "xoxb-file"
        assert config.min_intensity == Intensity.FOUR

    def test_environment_overrides_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("min_intensity: '4'\n")

        with patch.dict(os.environ, {"MIN_INTENSITY": "6-"}, clear=True):
            config = load_config(str(path))

        assert config.min_intensity == Intensity.SIX_LOWER

    def test_empty_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")

        with patch.dict(os.environ, {}, clear=True):
            assert load_config(path).min_intensity == Intensity.THREE

    def test_zero_threshold_is_rejected(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("min_intensity: 0\n")

        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(InvalidConfigValue):
                load_config(path)

    def test_zero_reconnect_delay_is_kept(self, tmp_path):
        """A zero delay reaches validation instead of becoming the default."""
        path = tmp_path / "config.yaml"
        path.write_text("reconnect_delay_seconds: 0\n")

        with patch.dict(os.environ, {}, clear=True):
            config = load_config(path)

        assert config.reconnect_delay_seconds == 0
        assert [e.field for e in validate_config(config).critical_errors] == [
            "slack_bot_token",
            "slack_channel_id",
            "reconnect_delay_seconds",
        ]

    def test_null_values_use_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("min_intensity:\nreconnect_delay_seconds: null\n")

        with patch.dict(os.environ, {}, clear=True):
            config = load_config(path)

        assert config.min_intensity == Intensity.THREE
        assert config.reconnect_delay_seconds == 5.0

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")

    def test_non_mapping(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- just\n- a list\n")

        with pytest.raises(ValueError):
            load_config(path)
