"""Notification channel registry."""

from __future__ import annotations

import logging

from .models.channels import NotificationChannel
from .models.settings import Settings

logger = logging.getLogger(__name__)

ALL_SEVERITIES = frozenset({"info", "warning", "critical"})
ELEVATED = frozenset({"warning", "critical"})
CRITICAL_ONLY = frozenset({"critical"})


def default_channels(settings: Settings) -> list[NotificationChannel]:
    """Channel definitions; each is enabled only when its destination is configured."""
    headers = {"Content-Type": "application/json"}
    if settings.ALERT_WEBHOOK_TOKEN:
        headers["Authorization"] = f"Bearer {settings.ALERT_WEBHOOK_TOKEN}"
    return [
        NotificationChannel(id="console", enabled=True, severities=ALL_SEVERITIES),
        NotificationChannel(
            id="email",
            enabled=bool(settings.ALERT_EMAIL_RECIPIENT),
            severities=ELEVATED,
            options={
                "recipient": settings.ALERT_EMAIL_RECIPIENT,
                "sender": settings.ALERT_EMAIL_SENDER,
                "smtp_host": settings.SMTP_HOST,
                "smtp_port": settings.SMTP_PORT,
                "smtp_user": settings.SMTP_USER,
                "smtp_password": settings.SMTP_PASSWORD,
            },
        ),
        NotificationChannel(
            id="slack",
            enabled=bool(settings.SLACK_WEBHOOK_URL),
            severities=ELEVATED,
            options={
                "url": settings.SLACK_WEBHOOK_URL,
                "channel": settings.SLACK_CHANNEL,
            },
        ),
        NotificationChannel(
            id="webhook",
            enabled=bool(settings.ALERT_WEBHOOK_URL),
            severities=CRITICAL_ONLY,
            options={
                "url": settings.ALERT_WEBHOOK_URL,
                "headers": headers,
                "service": settings.SERVICE_NAME,
                "environment": settings.ENVIRONMENT,
            },
        ),
        NotificationChannel(
            id="telegram",
            enabled=bool(settings.BOT_TOKEN and settings.ALERT_CHAT_IDS),
            severities=ELEVATED,
            options={"chat_ids": sorted(settings.ALERT_CHAT_IDS)},
        ),
    ]


class ChannelRegistry:
    def __init__(self, channels: list[NotificationChannel]) -> None:
        self._channels: dict[str, NotificationChannel] = {c.id: c for c in channels}

    @classmethod
    def from_settings(cls, settings: Settings) -> "ChannelRegistry":
        registry = cls(default_channels(settings))
        enabled = [c.id for c in registry.list_channels().values() if c.enabled]
        logger.info("Notification channels enabled: %s", ", ".join(enabled))
        return registry

    def get_channel(self, channel_id: str) -> NotificationChannel | None:
        return self._channels.get(channel_id)

    def list_channels(self) -> dict[str, NotificationChannel]:
        return dict(self._channels)

    def set_enabled(self, channel_id: str, enabled: bool) -> bool:
        channel = self._channels.get(channel_id)
        if channel is None:
            return False
        channel.enabled = enabled
        logger.info("Channel %s %s", channel_id, "enabled" if enabled else "disabled")
        return True
