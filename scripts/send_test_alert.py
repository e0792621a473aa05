#!/usr/bin/env python3
"""Send a test alert to the configured Slack channel.

WARNING: Without --dry-run this posts a REAL message to the configured channel.

This script builds a synthetic feed frame, parses and formats it with the
same code as the live pipeline, and either prints the Slack payload or
posts it.

Usage:
    # Dry run (print payload only, no send)
    python scripts/send_test_alert.py --dry-run

    # Send an early-warning test message
    python scripts/send_test_alert.py --kind eew

    # Send a cancelled tsunami forecast
    python scripts/send_test_alert.py --kind tsunami --cancelled

Environment:
    SLACK_BOT_TOKEN, SLACK_CHANNEL_ID: Slack credentials (not needed for --dry-run)
    CONFIG_PATH: Optional YAML config file
"""

import argparse
import json
import logging
import os
import sys
from datetime import datetime, timedelta

from quake_alert.core.config import validate_config
from quake_alert.core.events import (
    EEW_CODE,
    JST,
    QUAKE_CODE,
    TSUNAMI_CODE,
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
from quake_alert.shell.config_loader import load_config, load_config_from_env
from quake_alert.shell.slack_client import FAILURE_HINTS, SlackClient

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)


def _feed_time(dt: datetime) -> str:
    return dt.strftime("%Y/%m/%d %H:%M:%S")


def create_test_frame(kind: str, cancelled: bool = False) -> dict:
    """Create a synthetic feed frame of the given kind.

    Args:
        kind: 'quake', 'tsunami' or 'eew'
        cancelled: Mark tsunami/eew frames as cancelled

    Returns:
        Decoded frame as the feed would deliver it
    """
    now = datetime.now(JST)
    frame_id = "test-" + now.strftime("%Y%m%d%H%M%S")

    if kind == "quake":
        return {
            "code": QUAKE_CODE,
            "id": frame_id,
            "time": _feed_time(now),
            "earthquake": {
                "time": _feed_time(now - timedelta(minutes=2)),
                "hypocenter": {
                    "name": "[TEST] Chiba Prefecture Northwest",
                    "magnitude": 5.2,
                    "depth": 60,
                    "latitude": 35.6,
                    "longitude": 140.1,
                },
                "maxScale": 45,
                "domesticTsunami": "None",
            },
            "points": [
                {"pref": "Chiba", "addr": "Chiba Chuo", "isArea": False, "scale": 45},
                {"pref": "Chiba", "addr": "Funabashi", "isArea": False, "scale": 40},
                {"pref": "Tokyo", "addr": "Chiyoda", "isArea": False, "scale": 40},
                {"pref": "Saitama", "addr": "Saitama Urawa", "isArea": False, "scale": 30},
            ],
        }

    if kind == "tsunami":
        return {
            "code": TSUNAMI_CODE,
            "id": frame_id,
            "time": _feed_time(now),
            "cancelled": cancelled,
            "areas": [
                {"name": "[TEST] Ibaraki Coast", "grade": "Watch", "immediate": False},
                {"name": "[TEST] Chiba Kujukuri", "grade": "Warning", "immediate": True},
            ],
        }

    return {
        "code": EEW_CODE,
        "id": frame_id,
        "time": _feed_time(now),
        "test": True,
        "cancelled": cancelled,
        "issue": {"eventId": now.strftime("%Y%m%d%H%M%S"), "serial": "1"},
        "earthquake": {
            "originTime": _feed_time(now - timedelta(seconds=10)),
            "hypocenter": {"name": "[TEST] Chiba Prefecture Northwest", "magnitude": 5.2, "depth": 60},
        },
        "areas": [
            {"pref": "Chiba", "name": "Chiba North", "scaleFrom": 45, "scaleTo": 50,
             "arrivalTime": _feed_time(now + timedelta(seconds=5))},
            {"pref": "Tokyo", "name": "Tokyo 23 Wards", "scaleFrom": 40, "scaleTo": 40,
             "arrivalTime": _feed_time(now + timedelta(seconds=15))},
        ],
    }


def build_notification(kind: str, frame: dict, image_base_url: str) -> Notification:
    """Parse and format a frame with the production formatters."""
    if kind == "quake":
        return format_quake_message(parse_quake(frame), image_base_url)
    if kind == "tsunami":
        return format_tsunami_message(parse_tsunami(frame), image_base_url)
    return format_eew_message(parse_eew(frame), image_base_url)


def main() -> int:
    parser = argparse.ArgumentParser(description="Send a test alert to Slack")
    parser.add_argument(
        "--kind",
        choices=("quake", "tsunami", "eew"),
        default="quake",
        help="Event category to simulate (default: quake)",
    )
    parser.add_argument(
        "--cancelled",
        action="store_true",
        help="Mark tsunami/eew test frames as cancelled",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the payload without sending",
    )
    args = parser.parse_args()

    config_path = os.environ.get("CONFIG_PATH")
    config = load_config(config_path) if config_path else load_config_from_env()

    frame = create_test_frame(args.kind, cancelled=args.cancelled)
    notification = build_notification(args.kind, frame, config.image_base_url)

    client = SlackClient(config.slack_bot_token, config.slack_channel_id)

    if args.dry_run:
        print(json.dumps(client.build_payload(notification), indent=2, ensure_ascii=False))
        return 0

    result = validate_config(config)
    if not result.valid:
        for error in result.critical_errors:
            logger.error("%s: %s", error.field, error.message)
        return 1

    logger.info("Sending %s test alert to %s", args.kind, config.slack_channel_id)
    response = client.send_message(notification)

    if response.success:
        logger.info("  Test alert sent successfully (ts=%s)", response.ts)
        return 0

    logger.error(
        "  Failed to send test alert: %s. %s",
        response.error,
        FAILURE_HINTS.get(response.reason, ""),
    )
    return 1


if __name__ == "__main__":
    sys.exit(main())
