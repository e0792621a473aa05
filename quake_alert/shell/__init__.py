"""Imperative Shell - I/O and side effects.

This module contains all code that interacts with external systems:
- P2P earthquake feed client (WebSocket)
- Slack Web API client (HTTP)
- Configuration loading (environment/files)

Keep this layer thin and simple. All business logic should be in core.
"""

from quake_alert.shell.p2pquake_client import (
    P2PQuakeClient,
    StreamHandlers,
    UpstreamConnectionError,
)
from quake_alert.shell.slack_client import SlackClient, SlackResponse
from quake_alert.shell.config_loader import load_config, load_config_from_env

__all__ = [
    "P2PQuakeClient",
    "StreamHandlers",
    "UpstreamConnectionError",
    "SlackClient",
    "SlackResponse",
    "load_config",
    "load_config_from_env",
]
