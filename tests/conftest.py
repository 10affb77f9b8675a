"""Shared test fixtures and dummy classes."""

from __future__ import annotations

import asyncio
from typing import Any

from nebula_alerts.channels import ALL_SEVERITIES, CRITICAL_ONLY, ChannelRegistry
from nebula_alerts.dispatcher import NotificationDispatcher
from nebula_alerts.engine import AlertEngine
from nebula_alerts.models.alerts import AlertRule
from nebula_alerts.models.channels import NotificationChannel
from nebula_alerts.rules import RuleRegistry


class FakeClock:
    """Monotonic clock the tests can move by hand (seconds)."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSender:
    def __init__(self) -> None:
        self.sent: list[dict[str, Any]] = []

    async def send(self, channel: NotificationChannel, payload: dict[str, Any]) -> None:
        self.sent.append(payload)


class FailingSender:
    def __init__(self) -> None:
        self.calls = 0

    async def send(self, channel: NotificationChannel, payload: dict[str, Any]) -> None:
        self.calls += 1
        raise RuntimeError("channel down")


class SlowSender:
    async def send(self, channel: NotificationChannel, payload: dict[str, Any]) -> None:
        await asyncio.sleep(10)


def rate_limit_rule(**overrides: Any) -> AlertRule:
    fields: dict[str, Any] = {
        "id": "rate_limit_critical",
        "threshold": 10,
        "comparison": "less_than",
        "severity": "critical",
        "description": "Rate limit critically low",
        "cooldown_ms": 60000,
    }
    fields.update(overrides)
    return AlertRule(**fields)


def make_engine(
    rules: list[AlertRule] | None = None,
    senders: dict[str, Any] | None = None,
    clock: FakeClock | None = None,
    timeout_s: float = 1.0,
) -> AlertEngine:
    channels = ChannelRegistry(
        [
            NotificationChannel(id="console", enabled=True, severities=ALL_SEVERITIES),
            NotificationChannel(id="webhook", enabled=True, severities=CRITICAL_ONLY),
        ]
    )
    if senders is None:
        senders = {"console": RecordingSender(), "webhook": RecordingSender()}
    dispatcher = NotificationDispatcher(channels, senders, timeout_s=timeout_s)
    return AlertEngine(
        RuleRegistry(rules if rules is not None else [rate_limit_rule()]),
        channels,
        dispatcher,
        clock=clock or FakeClock(),
    )


class DummyChat:
    """Dummy Telegram chat for testing."""

    def __init__(self, chat_id: int) -> None:
        self.id = chat_id
        self.sent: list[str] = []

    async def send_message(self, text: str) -> None:
        self.sent.append(text)


class DummyMessage:
    """Dummy Telegram message for testing."""

    def __init__(self) -> None:
        self.replies: list[str] = []

    async def reply_text(self, text: str, **_: Any) -> None:
        self.replies.append(text)


class DummyUpdate:
    """Dummy Telegram update for testing."""

    def __init__(self, chat_id: int) -> None:
        self.effective_chat = DummyChat(chat_id)
        self.message = DummyMessage()


class DummyApplication:
    """Dummy Telegram application for testing."""

    def __init__(self) -> None:
        self.bot_data: dict[str, object] = {}


class DummyContext:
    """Dummy Telegram context for testing."""

    def __init__(self, args: list[str] | None = None) -> None:
        self.args = args or []
        self.application = DummyApplication()


class DummyBot:
    def __init__(self, fail_for: set[int] | None = None) -> None:
        self.fail_for = fail_for or set()
        self.messages: list[tuple[int, str]] = []

    async def send_message(self, chat_id: int, text: str, **_: Any) -> None:
        if chat_id in self.fail_for:
            raise RuntimeError("blocked")
        self.messages.append((chat_id, text))


class DummyResponse:
    """Dummy HTTP response for testing."""

    def __init__(self, status: int = 200) -> None:
        self.status_code = status

    def raise_for_status(self) -> None:
        if not 200 <= self.status_code < 300:
            raise RuntimeError(f"HTTP {self.status_code}")
