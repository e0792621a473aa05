"""Functional Core - Pure functions with no side effects.

This module contains all business logic as pure functions:
- Seismic intensity classification
- Feed frame parsing into typed events
- Notification formatting
- Configuration validation

All functions here are deterministic and have no I/O.
"""

from quake_alert.core.intensity import (
    Intensity,
    InvalidConfigValue,
    color_for,
    is_notify_worthy,
    parse_threshold,
    to_label,
)
from quake_alert.core.events import (
    EEWEvent,
    QuakeEvent,
    TsunamiEvent,
    parse_eew,
    parse_quake,
    parse_tsunami,
)
from quake_alert.core.formatter import (
    Notification,
    format_eew_message,
    format_quake_message,
    format_tsunami_message,
)

__all__ = [
    # Intensity
    "Intensity",
    "InvalidConfigValue",
    "color_for",
    "is_notify_worthy",
    "parse_threshold",
    "to_label",
    # Events
    "EEWEvent",
    "QuakeEvent",
    "TsunamiEvent",
    "parse_eew",
    "parse_quake",
    "parse_tsunami",
    # Formatter
    "Notification",
    "format_eew_message",
    "format_quake_message",
    "format_tsunami_message",
]
