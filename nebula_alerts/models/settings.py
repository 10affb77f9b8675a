"""Configuration dataclass."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Set, Tuple


@dataclass
class Settings:
    """Configuration settings for nebula_alerts.

    All settings are loaded from environment variables with sensible defaults.
    """

    BOT_TOKEN: str | None = None
    ALLOWED_CHAT_IDS: Set[int] = field(default_factory=set)
    ALERT_CHAT_IDS: Set[int] = field(default_factory=set)
    ALERT_EMAIL_RECIPIENT: str | None = None
    ALERT_EMAIL_SENDER: str = "alerts@nebula.local"
    SMTP_HOST: str | None = None
    SMTP_PORT: int = 587
    SMTP_USER: str | None = None
    SMTP_PASSWORD: str | None = None
    SLACK_WEBHOOK_URL: str | None = None
    SLACK_CHANNEL: str = "#alerts"
    ALERT_WEBHOOK_URL: str | None = None
    ALERT_WEBHOOK_TOKEN: str | None = None
    ALERT_CHANNEL_TIMEOUT_S: float = 10.0
    ALERT_DEFAULT_COOLDOWN_MS: int = 5 * 60 * 1000
    ALERT_METRIC_THRESHOLDS: Dict[str, Tuple[float, float]] = field(
        default_factory=dict
    )
    ALERT_SAMPLE_INTERVAL_S: float = 60.0
    SERVICE_NAME: str = "nebula-portfolio-platform"
    ENVIRONMENT: str = "development"
