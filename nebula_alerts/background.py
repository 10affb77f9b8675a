"""Background jobs (started once per Application)."""
from __future__ import annotations

import asyncio
import logging
import time

import psutil
from telegram.ext import Application

from .models.bot_state import BOT_STATE_KEY, BotState

logger = logging.getLogger(__name__)

_TASK_PROCESS_METRICS = "process_metrics"


def ensure_started(app: Application) -> None:
    state: BotState = app.bot_data[BOT_STATE_KEY]
    task = state.tasks.get(_TASK_PROCESS_METRICS)
    if isinstance(task, asyncio.Task) and not task.done():
        return
    state.tasks[_TASK_PROCESS_METRICS] = asyncio.create_task(_process_metrics_loop(state))


def sample_memory_percent() -> float | None:
    try:
        return float(psutil.virtual_memory().percent)
    except Exception:
        logger.exception("Failed reading memory usage")
        return None


async def sample_once(state: BotState) -> list[str]:
    """Feed one round of process metrics into the engine."""
    mem_pct = await asyncio.to_thread(sample_memory_percent)
    if mem_pct is None:
        return []
    return await state.monitoring.track_performance(
        "memory_usage", mem_pct, {"source": "process"}
    )


async def _process_metrics_loop(state: BotState) -> None:
    interval_s = state.sample_interval_s
    logger.info("Starting process metrics loop (interval=%ss)", interval_s)
    while True:
        try:
            start = time.monotonic()
            triggered = await sample_once(state)
            if triggered:
                logger.info("Process metrics triggered: %s", ", ".join(triggered))
            elapsed = time.monotonic() - start
            await asyncio.sleep(max(0.0, interval_s - elapsed))
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Process metrics loop error")
            await asyncio.sleep(interval_s)
