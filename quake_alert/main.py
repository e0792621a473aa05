"""Process Entry Point.

This module is a thin wrapper that configures logging, loads and
validates configuration, wires termination signals to a stop event and
runs the orchestrator until it is set.
"""

import asyncio
import logging
import os
import signal
import sys

import yaml

from quake_alert.core.config import Config, validate_config
from quake_alert.core.intensity import InvalidConfigValue
from quake_alert.orchestrator import Orchestrator
from quake_alert.shell.config_loader import load_config, load_config_from_env


logger = logging.getLogger(__name__)


def configure_logging(environment: str | None = None) -> None:
    """Configure logging from LOG_LEVEL, defaulting by environment.

    Safe to call again once the configured environment is known; later
    calls only adjust the root level.

    Args:
        environment: 'development' or 'production' (defaults to APP_ENV)
    """
    if environment is None:
        environment = os.environ.get("APP_ENV", "development").strip().lower()
    default_level = "DEBUG" if environment == "development" else "INFO"
    level = getattr(logging, os.environ.get("LOG_LEVEL", default_level).upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logging.getLogger().setLevel(level)
    # websockets logs every frame at DEBUG
    logging.getLogger("websockets").setLevel(logging.INFO)


def _get_config() -> Config:
    """Load configuration from file or environment."""
    config_path = os.environ.get("CONFIG_PATH")

    if config_path:
        return load_config(config_path)
    return load_config_from_env()


def _install_signal_handlers(loop: asyncio.AbstractEventLoop, stop_event: asyncio.Event) -> None:
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:
            # Windows event loops have no add_signal_handler
            signal.signal(sig, lambda *_: loop.call_soon_threadsafe(stop_event.set))


async def run(config: Config) -> int:
    """Run the orchestrator until a termination signal arrives."""
    stop_event = asyncio.Event()
    orchestrator = Orchestrator(config)

    loop = asyncio.get_running_loop()
    _install_signal_handlers(loop, stop_event)
    loop.set_exception_handler(orchestrator.handle_loop_exception)

    return await orchestrator.run(stop_event)


def main() -> int:
    """Load configuration and run until stopped.

    Returns:
        Process exit status
    """
    configure_logging()

    try:
        config = _get_config()
    except InvalidConfigValue as e:
        logger.error("Configuration error: %s", e)
        return 1
    except (OSError, ValueError, yaml.YAMLError) as e:
        logger.error("Failed to load configuration: %s", e)
        return 1

    # The config file may name a different environment than APP_ENV
    configure_logging(config.environment)

    result = validate_config(config)

    for warning in result.warnings:
        logger.warning("Config warning: %s: %s", warning.field, warning.message)

    if not result.valid:
        logger.error("Environment variable validation failed:")
        for error in result.critical_errors:
            logger.error("  - %s: %s", error.field, error.message)
        logger.error("Please check your environment and ensure all required variables are set.")
        return 1

    try:
        return asyncio.run(run(config))
    except Exception:
        logger.exception("Fatal error during startup")
        return 1


if __name__ == "__main__":
    sys.exit(main())
