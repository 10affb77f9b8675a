"""Entrypoint for running the alert engine with its Telegram admin bot.

This module builds the engine from configuration, registers handlers and runs
polling.
"""

from __future__ import annotations

import logging

from telegram import BotCommand
from telegram.ext import Application, CommandHandler

from . import config
from .background import ensure_started
from .commands import COMMANDS
from .engine import AlertEngine
from .handlers import alerts
from .logger import setup_logging
from .models.bot_state import BOT_STATE_KEY, BotState

logger = logging.getLogger(__name__)


def build_application() -> Application:
    if config.TOKEN is None:
        raise RuntimeError("BOT_TOKEN environment variable is not set")

    app = (
        Application.builder()
        .token(config.TOKEN)
        .post_init(on_startup)
        .post_shutdown(on_shutdown)
        .build()
    )

    engine = AlertEngine.from_settings(config.settings, bot=app.bot)
    app.bot_data[BOT_STATE_KEY] = BotState.for_engine(
        engine, sample_interval_s=config.settings.ALERT_SAMPLE_INTERVAL_S
    )

    for spec in COMMANDS:
        fn = getattr(alerts, spec.handler)
        triggers = [spec.name, *spec.aliases]
        app.add_handler(CommandHandler(triggers, fn))

    return app


async def register_bot_commands(app: Application) -> None:
    """Register bot commands for Telegram autocomplete."""
    try:
        bot_commands = [BotCommand(spec.name, spec.description) for spec in COMMANDS]
        await app.bot.set_my_commands(bot_commands)
        logger.info("Registered %d commands for autocomplete", len(bot_commands))
    except Exception as e:
        logger.warning("Failed to register bot commands: %s", e)


async def on_startup(app: Application) -> None:
    try:
        ensure_started(app)
    except Exception as e:
        logger.warning("Failed to start background tasks: %s", e)
    await register_bot_commands(app)


async def on_shutdown(app: Application) -> None:
    state: BotState = app.bot_data[BOT_STATE_KEY]
    for task in state.tasks.values():
        task.cancel()
    await state.engine.drain()


def run() -> None:
    setup_logging()
    config.validate_settings()
    logger.info("Starting nebula_alerts")
    app = build_application()

    # keep the stop_signals None so container shutdown behaves normally
    app.run_polling(stop_signals=None)


if __name__ == "__main__":
    run()
