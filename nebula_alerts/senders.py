"""Channel senders: one transport per notification channel.

Every sender raises on failure; isolation and logging of failures is the
dispatcher's job.
"""

from __future__ import annotations

import asyncio
import logging
import smtplib
from email.message import EmailMessage
from typing import Any, Protocol, runtime_checkable

import httpx
from telegram import Bot
from telegram.constants import ParseMode

from . import view
from .logger import CONSOLE_SINK
from .models.channels import NotificationChannel
from .models.settings import Settings

logger = logging.getLogger(__name__)

_console_logger = logging.getLogger(CONSOLE_SINK)


@runtime_checkable
class ChannelSender(Protocol):
    """Deliver one normalized alert payload to a channel's destination."""

    async def send(self, channel: NotificationChannel, payload: dict[str, Any]) -> None: ...


class ConsoleSender:
    async def send(self, channel: NotificationChannel, payload: dict[str, Any]) -> None:
        level = logging.ERROR if payload["severity"] == "critical" else logging.WARNING
        for line in view.render_console_lines(payload):
            _console_logger.log(level, line)


class EmailSender:
    def __init__(self, service: str = "Nebula") -> None:
        self._service = service

    async def send(self, channel: NotificationChannel, payload: dict[str, Any]) -> None:
        message = self.build_message(channel, payload)
        await asyncio.to_thread(self._send_sync, channel, message)

    def build_message(
        self, channel: NotificationChannel, payload: dict[str, Any]
    ) -> EmailMessage:
        opts = channel.options
        message = EmailMessage()
        message["Subject"] = view.render_email_subject(payload, self._service)
        message["From"] = str(opts.get("sender") or "alerts@nebula.local")
        message["To"] = str(opts["recipient"])
        message.set_content(view.render_email_body(payload))
        return message

    def _send_sync(self, channel: NotificationChannel, message: EmailMessage) -> None:
        opts = channel.options
        host = opts.get("smtp_host")
        if not host:
            raise RuntimeError("SMTP_HOST is not configured")
        port = int(opts.get("smtp_port") or 587)
        with smtplib.SMTP(str(host), port, timeout=10) as server:
            if port == 587:
                server.starttls()
            user = opts.get("smtp_user")
            password = opts.get("smtp_password")
            if user and password:
                server.login(str(user), str(password))
            server.send_message(message)


class _HttpSender:
    def __init__(self, timeout: float = 10.0) -> None:
        self._timeout = timeout

    async def _post(
        self, url: str, body: dict[str, Any], headers: dict[str, str] | None = None
    ) -> None:
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            resp = await client.post(url, json=body, headers=headers)
            resp.raise_for_status()


class SlackSender(_HttpSender):
    async def send(self, channel: NotificationChannel, payload: dict[str, Any]) -> None:
        url = str(channel.options["url"])
        body = view.build_slack_payload(payload, channel.options.get("channel"))
        await self._post(url, body)


class WebhookSender(_HttpSender):
    async def send(self, channel: NotificationChannel, payload: dict[str, Any]) -> None:
        opts = channel.options
        body = {
            "alert": payload,
            "service": opts.get("service"),
            "environment": opts.get("environment"),
        }
        headers = {k: str(v) for k, v in (opts.get("headers") or {}).items() if v}
        await self._post(str(opts["url"]), body, headers)


class TelegramSender:
    """Direct-message channel: one HTML message per configured chat."""

    def __init__(self, bot: Bot) -> None:
        self._bot = bot

    async def send(self, channel: NotificationChannel, payload: dict[str, Any]) -> None:
        chat_ids = list(channel.options.get("chat_ids") or [])
        if not chat_ids:
            raise RuntimeError("No ALERT_CHAT_IDS configured")
        text = view.render_alert_html(payload)
        failed: list[int] = []
        for chat_id in chat_ids:
            try:
                await self._bot.send_message(
                    chat_id=chat_id, text=text, parse_mode=ParseMode.HTML
                )
            except Exception:
                logger.exception("Failed sending alert to chat_id=%s", chat_id)
                failed.append(chat_id)
        if failed and len(failed) == len(chat_ids):
            raise RuntimeError(f"Telegram delivery failed for all chats: {failed}")


def default_senders(settings: Settings, bot: Bot | None = None) -> dict[str, ChannelSender]:
    timeout = settings.ALERT_CHANNEL_TIMEOUT_S
    senders: dict[str, ChannelSender] = {
        "console": ConsoleSender(),
        "email": EmailSender(),
        "slack": SlackSender(timeout=timeout),
        "webhook": WebhookSender(timeout=timeout),
    }
    if bot is None and settings.BOT_TOKEN:
        bot = Bot(settings.BOT_TOKEN)
    if bot is not None:
        senders["telegram"] = TelegramSender(bot)
    return senders
