"""Slack Web API Client - Imperative Shell.

This module posts notification documents to a Slack channel with
chat.postMessage. All I/O is contained here; message formatting is in the
core module.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

import requests

from quake_alert.core.formatter import Notification


logger = logging.getLogger(__name__)


SLACK_POST_MESSAGE_URL = "https://slack.com/api/chat.postMessage"

# Default timeout for API requests (seconds)
DEFAULT_TIMEOUT = 10


class DeliveryFailure(str, Enum):
    """Why a message could not be delivered."""
    NOT_IN_CHANNEL = "not_in_channel"
    CHANNEL_NOT_FOUND = "channel_not_found"
    INVALID_AUTH = "invalid_auth"
    RATE_LIMITED = "rate_limited"
    REQUEST_FAILED = "request_failed"
    API_ERROR = "api_error"


_ERROR_REASONS = {
    "not_in_channel": DeliveryFailure.NOT_IN_CHANNEL,
    "channel_not_found": DeliveryFailure.CHANNEL_NOT_FOUND,
    "invalid_auth": DeliveryFailure.INVALID_AUTH,
    "not_authed": DeliveryFailure.INVALID_AUTH,
    "token_revoked": DeliveryFailure.INVALID_AUTH,
    "token_expired": DeliveryFailure.INVALID_AUTH,
    "account_inactive": DeliveryFailure.INVALID_AUTH,
    "ratelimited": DeliveryFailure.RATE_LIMITED,
    "rate_limited": DeliveryFailure.RATE_LIMITED,
}

FAILURE_HINTS = {
    DeliveryFailure.NOT_IN_CHANNEL: "Bot is not in the channel. Invite the bot to the channel first.",
    DeliveryFailure.CHANNEL_NOT_FOUND: "Channel not found. Check SLACK_CHANNEL_ID.",
    DeliveryFailure.INVALID_AUTH: "Invalid authentication. Check SLACK_BOT_TOKEN.",
    DeliveryFailure.RATE_LIMITED: "Rate limited by Slack API.",
    DeliveryFailure.REQUEST_FAILED: "Request to Slack failed.",
    DeliveryFailure.API_ERROR: "Slack API returned an error.",
}


@dataclass
class SlackResponse:
    """Response from chat.postMessage.

    Attributes:
        success: Whether the message was posted
        status_code: HTTP status code (0 if no response)
        error: Slack error code or exception text if failed
        reason: Classified failure reason if failed
        ts: Message timestamp if posted
    """
    success: bool
    status_code: int
    error: str | None = None
    reason: DeliveryFailure | None = None
    ts: str | None = None


def classify_error(error: str | None, status_code: int = 200) -> DeliveryFailure:
    """Map a Slack error code (or HTTP status) to a failure reason.

    Pure function.
    """
    if status_code == 429:
        return DeliveryFailure.RATE_LIMITED
    return _ERROR_REASONS.get(error or "", DeliveryFailure.API_ERROR)


class SlackClient:
    """Client for posting messages with the Slack Web API.

    This is part of the imperative shell - it handles HTTP I/O.
    """

    def __init__(
        self,
        token: str,
        channel_id: str,
        timeout: int = DEFAULT_TIMEOUT,
        base_url: str = SLACK_POST_MESSAGE_URL,
        debug: bool = False,
    ) -> None:
        """Initialize Slack client.

        Args:
            token: Bot token (xoxb-...)
            channel_id: Channel to post to
            timeout: Request timeout in seconds
            base_url: chat.postMessage endpoint
            debug: Log outgoing payload details
        """
        self.token = token
        self.channel_id = channel_id
        self.timeout = timeout
        self.base_url = base_url
        self.debug = debug

    def build_payload(self, notification: Notification) -> dict[str, Any]:
        """Build the chat.postMessage payload for a notification.

        Colored notifications carry their blocks inside a single attachment
        so that Slack draws the severity bar.
        """
        payload: dict[str, Any] = {
            "channel": self.channel_id,
            "text": notification.text,
        }

        if notification.color:
            payload["attachments"] = [
                {
                    "color": notification.color,
                    "blocks": notification.blocks,
                },
            ]
        else:
            payload["blocks"] = notification.blocks

        return payload

    def _failure(
        self,
        status_code: int,
        error: str,
        reason: DeliveryFailure,
    ) -> SlackResponse:
        logger.debug("Slack message not sent (%s, status=%s)", error, status_code)

        return SlackResponse(
            success=False,
            status_code=status_code,
            error=error,
            reason=reason,
        )

    def send_message(self, notification: Notification) -> SlackResponse:
        """Post a notification to the configured channel.

        This method performs HTTP I/O.

        Args:
            notification: Notification document (from formatter)

        Returns:
            SlackResponse indicating success or failure
        """
        payload = self.build_payload(notification)

        if self.debug:
            logger.debug(
                "Sending Slack message to %s (%d blocks)",
                self.channel_id,
                len(notification.blocks),
            )

        try:
            response = requests.post(
                self.base_url,
                json=payload,
                timeout=self.timeout,
                headers={
                    "Authorization": f"Bearer {self.token}",
                    "Content-Type": "application/json; charset=utf-8",
                },
            )
        except requests.Timeout:
            return self._failure(0, "Request timed out", DeliveryFailure.REQUEST_FAILED)
        except requests.RequestException as e:
            return self._failure(0, str(e), DeliveryFailure.REQUEST_FAILED)

        if response.status_code == 429:
            retry_after = response.headers.get("Retry-After", "unknown")
            return self._failure(
                429,
                f"ratelimited (retry after {retry_after}s)",
                DeliveryFailure.RATE_LIMITED,
            )

        try:
            data = response.json()
        except ValueError:
            return self._failure(
                response.status_code,
                f"Unexpected response: {response.text[:200]}",
                DeliveryFailure.API_ERROR,
            )

        if not data.get("ok"):
            error = data.get("error", "unknown_error")
            return self._failure(
                response.status_code,
                error,
                classify_error(error, response.status_code),
            )

        logger.info(
            "Slack message sent to %s (ts=%s)",
            self.channel_id,
            data.get("ts"),
        )

        return SlackResponse(
            success=True,
            status_code=response.status_code,
            ts=data.get("ts"),
        )
