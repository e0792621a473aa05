"""Configuration Loader - Imperative Shell.

This module handles loading configuration from YAML files and
environment variables. All I/O is contained here.

Models (Config, ValidationResult) are defined in quake_alert/core/config.py
to avoid information leakage between layers.
"""

import logging
import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from quake_alert.core.config import DEFAULT_IMAGE_BASE_URL, Config
from quake_alert.core.intensity import parse_threshold


logger = logging.getLogger(__name__)


# Environment variable for each config key
ENV_KEYS = {
    "slack_bot_token": "SLACK_BOT_TOKEN",
    "slack_channel_id": "SLACK_CHANNEL_ID",
    "min_intensity": "MIN_INTENSITY",
    "environment": "APP_ENV",
    "image_base_url": "IMAGE_BASE_URL",
    "reconnect_delay_seconds": "RECONNECT_DELAY_SECONDS",
    "max_reconnect_delay_seconds": "MAX_RECONNECT_DELAY_SECONDS",
}


def _resolve_value(value: Any) -> Any:
    """Resolve a ${VAR} placeholder from the environment.

    Non-string values and plain strings are returned unchanged. A
    placeholder whose variable is not set is returned as-is.
    """
    if not isinstance(value, str):
        return value

    if value.startswith("${") and value.endswith("}"):
        var_name = value[2:-1]
        env_value = os.environ.get(var_name)
        if env_value:
            return env_value
        logger.warning("Environment variable %s not set", var_name)

    return value


def load_config_from_dict(data: Mapping[str, Any]) -> Config:
    """Load configuration from a dictionary.

    Args:
        data: Configuration dictionary (keys as in Config)

    Returns:
        Parsed Config object

    Raises:
        InvalidConfigValue: If min_intensity is not a valid threshold
        ValueError: If a numeric setting is not a number
    """
    values = {
        key: _resolve_value(value)
        for key, value in data.items()
        if value is not None
    }
    defaults = Config()

    # Only missing keys fall back; a present falsy value (0, "") is validated as given
    return Config(
        slack_bot_token=str(values.get("slack_bot_token", "")).strip(),
        slack_channel_id=str(values.get("slack_channel_id", "")).strip(),
        min_intensity=parse_threshold(str(values.get("min_intensity", "3"))),
        environment=str(values.get("environment", defaults.environment)).strip().lower(),
        image_base_url=str(values.get("image_base_url", DEFAULT_IMAGE_BASE_URL)),
        reconnect_delay_seconds=float(
            values.get("reconnect_delay_seconds", defaults.reconnect_delay_seconds)
        ),
        max_reconnect_delay_seconds=float(
            values.get("max_reconnect_delay_seconds", defaults.max_reconnect_delay_seconds)
        ),
    )


def load_config(config_path: str | Path) -> Config:
    """Load configuration from a YAML file.

    This method performs file I/O. Environment variables override values
    from the file.

    Args:
        config_path: Path to YAML config file

    Returns:
        Parsed Config object

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If config file is invalid YAML
        InvalidConfigValue: If min_intensity is not a valid threshold
    """
    path = Path(config_path)

    logger.info("Loading configuration from %s", path)

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping")

    for key, env_var in ENV_KEYS.items():
        if os.environ.get(env_var):
            data[key] = os.environ[env_var]

    return load_config_from_dict(data)


def load_config_from_env() -> Config:
    """Load configuration from environment variables.

    Environment variables:
        SLACK_BOT_TOKEN: Slack bot token (xoxb-...)
        SLACK_CHANNEL_ID: Target channel ID
        MIN_INTENSITY: Threshold token (1, 2, 3, 4, 5-, 5+, 6-, 6+, 7)
        APP_ENV: 'development' or 'production'
        IMAGE_BASE_URL: Base URL for accessory images
        RECONNECT_DELAY_SECONDS: Initial reconnect delay
        MAX_RECONNECT_DELAY_SECONDS: Maximum reconnect delay

    Returns:
        Config object from environment

    Raises:
        InvalidConfigValue: If MIN_INTENSITY is not a valid threshold
    """
    data = {
        key: os.environ[env_var]
        for key, env_var in ENV_KEYS.items()
        if os.environ.get(env_var)
    }
    return load_config_from_dict(data)
