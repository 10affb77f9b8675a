"""Central configuration for nebula_alerts."""

from __future__ import annotations

import logging
import os
from typing import Dict, Set, Tuple

from .models.settings import Settings

logger = logging.getLogger(__name__)


def _split_ints(s: str) -> Set[int]:
    """Parse comma-separated string into a set of integers.

    Args:
        s: Comma-separated string of integers (e.g., "123,456,789")

    Returns:
        Set of parsed integers. Invalid entries are silently skipped.

    Example:
        >>> _split_ints("123,456,invalid,-789")
        {123, 456, -789}
    """
    out = set()
    for part in (s or "").split(","):
        try:
            out.add(int(part.strip()))
        except ValueError:
            continue
    return out


def _split_thresholds(s: str) -> Dict[str, Tuple[float, float]]:
    """Parse "metric:warning:critical" entries separated by commas.

    Example:
        >>> _split_thresholds("response_time:1500:4000, bad, cpu:x:1")
        {'response_time': (1500.0, 4000.0)}
    """
    out: Dict[str, Tuple[float, float]] = {}
    for part in (s or "").split(","):
        pieces = [p.strip() for p in part.split(":")]
        if len(pieces) != 3 or not pieces[0]:
            continue
        try:
            out[pieces[0]] = (float(pieces[1]), float(pieces[2]))
        except ValueError:
            continue
    return out


def _env(name: str) -> str | None:
    return (os.environ.get(name) or "").strip() or None


def _float_env(name: str, default: float) -> float:
    try:
        return float(os.environ.get(name, "") or default)
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.environ.get(name, "") or default)
    except ValueError:
        return default


def _read_settings() -> Settings:
    """Read all configuration from environment variables.

    Note:
        Invalid numeric values fall back to the defaults.
    """
    return Settings(
        BOT_TOKEN=_env("BOT_TOKEN"),
        ALLOWED_CHAT_IDS=_split_ints(os.environ.get("ALLOWED_CHAT_IDS", "")),
        ALERT_CHAT_IDS=_split_ints(os.environ.get("ALERT_CHAT_IDS", "")),
        ALERT_EMAIL_RECIPIENT=_env("ALERT_EMAIL_RECIPIENT"),
        ALERT_EMAIL_SENDER=_env("ALERT_EMAIL_SENDER") or "alerts@nebula.local",
        SMTP_HOST=_env("SMTP_HOST"),
        SMTP_PORT=_int_env("SMTP_PORT", 587),
        SMTP_USER=_env("SMTP_USER"),
        SMTP_PASSWORD=_env("SMTP_PASSWORD"),
        SLACK_WEBHOOK_URL=_env("SLACK_WEBHOOK_URL"),
        SLACK_CHANNEL=_env("SLACK_CHANNEL") or "#alerts",
        ALERT_WEBHOOK_URL=_env("ALERT_WEBHOOK_URL"),
        ALERT_WEBHOOK_TOKEN=_env("ALERT_WEBHOOK_TOKEN"),
        ALERT_CHANNEL_TIMEOUT_S=_float_env("ALERT_CHANNEL_TIMEOUT_S", 10.0),
        ALERT_DEFAULT_COOLDOWN_MS=_int_env("ALERT_DEFAULT_COOLDOWN_MS", 300000),
        ALERT_METRIC_THRESHOLDS=_split_thresholds(
            os.environ.get("ALERT_METRIC_THRESHOLDS", "")
        ),
        ALERT_SAMPLE_INTERVAL_S=_float_env("ALERT_SAMPLE_INTERVAL_S", 60.0),
        SERVICE_NAME=_env("SERVICE_NAME") or "nebula-portfolio-platform",
        ENVIRONMENT=_env("ENVIRONMENT") or "development",
    )


settings = _read_settings()


def validate_settings(current: Settings | None = None) -> None:
    """Log warnings for channels that are only partially configured."""
    s = current or settings
    if s.ALERT_EMAIL_RECIPIENT and not s.SMTP_HOST:
        logger.warning(
            "ALERT_EMAIL_RECIPIENT is set but SMTP_HOST is not; email delivery will fail."
        )
    if s.ALERT_CHAT_IDS and s.BOT_TOKEN is None:
        logger.warning("ALERT_CHAT_IDS is set but BOT_TOKEN is not; telegram alerts are off.")
    if s.BOT_TOKEN and not s.ALLOWED_CHAT_IDS:
        logger.warning("ALLOWED_CHAT_IDS is empty; /alerts will be unauthorized.")
    if s.ALERT_CHANNEL_TIMEOUT_S <= 0:
        logger.warning("ALERT_CHANNEL_TIMEOUT_S must be positive; using 10s.")
        s.ALERT_CHANNEL_TIMEOUT_S = 10.0


# Exported constants
TOKEN: str | None = settings.BOT_TOKEN
ALLOWED: set[int] = settings.ALLOWED_CHAT_IDS
