"""Orchestrator - Wires Functional Core and Imperative Shell.

This module coordinates the flow of data between the pure functional
core and the I/O-performing shell components. Each feed category is bound
to its pipeline:

- quake: classify -> filter by threshold -> format -> send
- tsunami, early warning: format -> send

Every event is handled on a best-effort basis: a failure while formatting
or sending one event is logged and dropped, and the stream keeps running.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

from quake_alert.core.config import Config
from quake_alert.core.events import EEWEvent, QuakeEvent, TsunamiEvent
from quake_alert.core.formatter import (
    Notification,
    format_eew_message,
    format_quake_message,
    format_tsunami_message,
)
from quake_alert.core.intensity import is_notify_worthy, to_label
from quake_alert.shell.p2pquake_client import (
    P2PQuakeClient,
    StreamHandlers,
    UpstreamConnectionError,
)
from quake_alert.shell.slack_client import FAILURE_HINTS, DeliveryFailure, SlackClient


logger = logging.getLogger(__name__)


# How long shutdown waits for in-flight notifications (seconds)
DRAIN_TIMEOUT = 5.0

# Display names used in log lines
CATEGORY_NAMES = {
    "quake": "Earthquake",
    "tsunami": "Tsunami",
    "eew": "EEW",
}


@dataclass
class AlertResult:
    """Result of handling a single event.

    Attributes:
        category: 'quake', 'tsunami' or 'eew'
        success: Whether a notification was delivered
        skipped: True if the event was filtered out
        error: Error message if failed
        reason: Delivery failure reason if the send failed
    """
    category: str
    success: bool
    skipped: bool = False
    error: str | None = None
    reason: DeliveryFailure | None = None


class Orchestrator:
    """Coordinates feed ingestion and Slack notification.

    This class wires together:
    - P2P earthquake feed client (receives events)
    - Core functions (classification, filtering, formatting)
    - Slack client (sends notifications)
    """

    def __init__(
        self,
        config: Config,
        slack_client: SlackClient | None = None,
        stream_client: P2PQuakeClient | None = None,
    ) -> None:
        """Initialize orchestrator with configuration.

        Args:
            config: Application configuration
            slack_client: Slack client (created if not provided)
            stream_client: Feed client (created if not provided)
        """
        self.config = config
        self.slack_client = slack_client or SlackClient(
            config.slack_bot_token,
            config.slack_channel_id,
            debug=not config.is_production,
        )
        self.stream_client = stream_client or P2PQuakeClient(
            StreamHandlers(
                on_quake=self.handle_quake,
                on_tsunami=self.handle_tsunami,
                on_eew=self.handle_eew,
            ),
            production=config.is_production,
        )
        self._stop_event: asyncio.Event | None = None
        self._faulted = False

    async def _deliver(
        self,
        category: str,
        notification: Notification,
        event_id: str,
    ) -> AlertResult:
        """Send a notification, containing any failure.

        The blocking HTTP call runs in a worker thread so that a stalled
        send does not hold up the event loop.
        """
        try:
            response = await asyncio.to_thread(self.slack_client.send_message, notification)
        except Exception as e:
            logger.exception(
                "Failed to send %s notification (id=%s)",
                CATEGORY_NAMES[category],
                event_id,
            )
            return AlertResult(category=category, success=False, error=str(e))

        if response.success:
            logger.info("%s notification sent (id=%s)", CATEGORY_NAMES[category], event_id)
            return AlertResult(category=category, success=True)

        hint = FAILURE_HINTS.get(response.reason, "")
        if response.reason is DeliveryFailure.RATE_LIMITED:
            logger.warning(
                "%s notification rate limited (id=%s): %s. %s",
                CATEGORY_NAMES[category],
                event_id,
                response.error,
                hint,
            )
        else:
            logger.error(
                "Failed to send %s notification (id=%s): %s [%s] %s",
                CATEGORY_NAMES[category],
                event_id,
                response.error,
                response.reason.value if response.reason else "unknown",
                hint,
            )

        return AlertResult(
            category=category,
            success=False,
            error=response.error,
            reason=response.reason,
        )

    async def handle_quake(self, quake: QuakeEvent) -> AlertResult:
        """Filter, format and send JMA earthquake information."""
        try:
            logger.info(
                "Earthquake information received (id=%s, max=%s, location=%s)",
                quake.id,
                to_label(quake.max_scale),
                quake.hypocenter.name if quake.hypocenter else None,
            )

            if not is_notify_worthy(quake.max_scale, self.config.min_intensity):
                logger.debug(
                    "Earthquake intensity %s below threshold %s, skipping notification",
                    quake.max_scale,
                    self.config.min_intensity,
                )
                return AlertResult(category="quake", success=False, skipped=True)

            notification = format_quake_message(quake, self.config.image_base_url)
        except Exception as e:
            logger.exception("Failed to process earthquake information (id=%s)", quake.id)
            return AlertResult(category="quake", success=False, error=str(e))

        return await self._deliver("quake", notification, quake.id)

    async def handle_tsunami(self, tsunami: TsunamiEvent) -> AlertResult:
        """Format and send a tsunami forecast. Never filtered."""
        try:
            logger.info(
                "Tsunami information received (id=%s, cancelled=%s, areas=%d)",
                tsunami.id,
                tsunami.cancelled,
                len(tsunami.areas),
            )
            notification = format_tsunami_message(tsunami, self.config.image_base_url)
        except Exception as e:
            logger.exception("Failed to process tsunami information (id=%s)", tsunami.id)
            return AlertResult(category="tsunami", success=False, error=str(e))

        return await self._deliver("tsunami", notification, tsunami.id)

    async def handle_eew(self, eew: EEWEvent) -> AlertResult:
        """Format and send an early warning. Never filtered."""
        try:
            logger.info(
                "EEW received (id=%s, serial=%s, cancelled=%s, test=%s, max=%s)",
                eew.id,
                eew.serial,
                eew.cancelled,
                eew.test,
                to_label(eew.max_predicted_intensity),
            )
            notification = format_eew_message(eew, self.config.image_base_url)
        except Exception as e:
            logger.exception("Failed to process EEW information (id=%s)", eew.id)
            return AlertResult(category="eew", success=False, error=str(e))

        return await self._deliver("eew", notification, eew.id)

    def handle_loop_exception(self, loop: asyncio.AbstractEventLoop, context: dict[str, Any]) -> None:
        """asyncio exception handler: log the fault and shut down."""
        logger.error(
            "Uncaught exception: %s",
            context.get("message"),
            exc_info=context.get("exception"),
        )
        self._faulted = True
        if self._stop_event is not None:
            self._stop_event.set()

    async def _wait_or_stop(self, stop_event: asyncio.Event, delay: float) -> bool:
        """Sleep for delay seconds. Returns True if stop was requested."""
        try:
            await asyncio.wait_for(stop_event.wait(), timeout=delay)
        except asyncio.TimeoutError:
            return False
        return True

    async def _supervise(self, stop_event: asyncio.Event) -> None:
        """Keep the feed connected until stop is requested."""
        delay = self.config.reconnect_delay_seconds

        while not stop_event.is_set():
            if self.stream_client.connected:
                closed = asyncio.ensure_future(self.stream_client.wait_closed())
                stopped = asyncio.ensure_future(stop_event.wait())
                done, pending = await asyncio.wait(
                    {closed, stopped},
                    return_when=asyncio.FIRST_COMPLETED,
                )
                for task in pending:
                    task.cancel()

                if closed in done:
                    closed.result()
                continue

            logger.info("Reconnecting to P2PQuake WebSocket in %.1fs", delay)
            if await self._wait_or_stop(stop_event, delay):
                break

            try:
                await self.stream_client.connect()
                delay = self.config.reconnect_delay_seconds
            except UpstreamConnectionError:
                delay = min(delay * 2, self.config.max_reconnect_delay_seconds)

    async def shutdown(self, drain_timeout: float = DRAIN_TIMEOUT) -> None:
        """Disconnect the feed and give in-flight sends a chance to finish."""
        logger.info("Shutting down...")
        self.stream_client.disconnect()
        await self.stream_client.drain(timeout=drain_timeout)

    async def run(self, stop_event: asyncio.Event) -> int:
        """Run until stop_event is set.

        This is the main entry point that:
        1. Connects to the feed (failure is fatal)
        2. Dispatches events until stop is requested, reconnecting as needed
        3. Disconnects and drains in-flight notifications

        Args:
            stop_event: Set by the host to request shutdown

        Returns:
            Process exit status
        """
        self._stop_event = stop_event

        logger.info(
            "Starting quake alert (environment=%s, min_intensity=%s)",
            self.config.environment,
            to_label(self.config.min_intensity),
        )

        try:
            await self.stream_client.connect()
        except UpstreamConnectionError as e:
            logger.error("Failed to start: %s", e)
            return 1

        logger.info("Started successfully")

        try:
            await self._supervise(stop_event)
        except Exception:
            logger.exception("Uncaught exception")
            self._faulted = True
        finally:
            await self.shutdown()

        return 1 if self._faulted else 0
