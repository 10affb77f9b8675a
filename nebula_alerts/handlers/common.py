"""Shared handler helpers: state lookup and auth guard."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .. import config
from ..models.bot_state import BOT_STATE_KEY, BotState

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from telegram import Update
    from telegram.ext import ContextTypes


def get_state(app) -> BotState:
    """Retrieve the state wired up by ``main.build_application``."""
    return app.bot_data[BOT_STATE_KEY]


def allowed(update: "Update") -> bool:
    """Check if the update comes from an allowed chat.

    Note:
        Returns False if ALLOWED_CHAT_IDS is empty or update has no chat.
    """
    if not config.ALLOWED:
        return False
    if not update.effective_chat:
        return False
    return update.effective_chat.id in config.ALLOWED


async def guard(update: "Update", context: "ContextTypes.DEFAULT_TYPE") -> bool:
    if allowed(update):
        return True
    if update and update.effective_chat:
        logger.warning("Unauthorized /alerts from chat_id=%s", update.effective_chat.id)
        await update.effective_chat.send_message("⛔ Not authorized")
    return False
