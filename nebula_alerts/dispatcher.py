"""Fan an alert instance out to every channel that accepts its severity."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Mapping

from .channels import ChannelRegistry
from .models.alerts import AlertInstance
from .models.channels import DeliveryResult, NotificationChannel
from .senders import ChannelSender

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    def __init__(
        self,
        channels: ChannelRegistry,
        senders: Mapping[str, ChannelSender],
        timeout_s: float = 10.0,
    ) -> None:
        for channel_id, sender in senders.items():
            if not isinstance(sender, ChannelSender):
                raise TypeError(f"sender for channel {channel_id!r} has no send() coroutine")
        self._channels = channels
        self._senders = dict(senders)
        self._timeout_s = timeout_s

    def targets_for(self, severity: str) -> list[NotificationChannel]:
        return [
            channel
            for channel in self._channels.list_channels().values()
            if channel.accepts(severity)
        ]

    async def dispatch(self, instance: AlertInstance) -> list[DeliveryResult]:
        return await self.dispatch_payload(instance.to_payload())

    async def dispatch_payload(self, payload: dict[str, Any]) -> list[DeliveryResult]:
        """Send to all matching channels together; never raises."""
        targets = self.targets_for(str(payload["severity"]))
        if not targets:
            logger.debug("No channels accept severity %s", payload["severity"])
            return []
        return list(
            await asyncio.gather(*(self._deliver(ch, payload) for ch in targets))
        )

    async def _deliver(
        self, channel: NotificationChannel, payload: dict[str, Any]
    ) -> DeliveryResult:
        sender = self._senders.get(channel.id)
        if sender is None:
            logger.warning("No sender registered for channel %s", channel.id)
            return DeliveryResult(channel.id, False, "no sender")
        try:
            await asyncio.wait_for(sender.send(channel, payload), timeout=self._timeout_s)
        except asyncio.TimeoutError:
            logger.warning(
                "Channel %s timed out after %.1fs delivering %s",
                channel.id,
                self._timeout_s,
                payload.get("id"),
            )
            return DeliveryResult(channel.id, False, "timeout")
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.exception(
                "Failed to send %s notification for %s", channel.id, payload.get("type")
            )
            return DeliveryResult(channel.id, False, str(exc) or type(exc).__name__)
        return DeliveryResult(channel.id, True)
