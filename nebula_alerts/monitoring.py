"""Metric producers that feed observations into the alert engine.

Each observation raises at most one alert per rule family: families are
listed most severe first and the first rule whose condition holds is the
only one evaluated. A critical alert sitting in cooldown therefore does not
fall back to its warning sibling.
"""

from __future__ import annotations

import logging
from typing import Mapping

from .engine import AlertEngine

logger = logging.getLogger(__name__)

RATE_LIMIT_FAMILY = ("github_rate_limit_critical", "github_rate_limit_warning")
LATENCY_FAMILY = ("very_slow_response_time", "slow_response_time")
ERROR_RATE_FAMILY = ("critical_error_rate", "high_error_rate")


class MonitoringService:
    def __init__(self, engine: AlertEngine) -> None:
        self._engine = engine

    async def _evaluate_family(
        self, family: tuple[str, ...], value: float, context: dict[str, str]
    ) -> list[str]:
        for alert_type in family:
            if not self._engine.condition_met(alert_type, value):
                continue
            if await self._engine.evaluate(alert_type, value, context):
                return [alert_type]
            return []
        return []

    async def track_performance(
        self, metric: str, value: float, context: Mapping[str, str] | None = None
    ) -> list[str]:
        """Classify a metric observation and evaluate the resulting alert type.

        The classification is the trigger condition for ``{metric}_warning`` and
        ``{metric}_critical``, so a value sitting exactly on a threshold fires.
        """
        ctx = dict(context or {})
        triggered: list[str] = []
        for c in self._engine.classify(metric, value, ctx):
            if await self._engine.evaluate(c.alert_type, value, ctx, classified=True):
                triggered.append(c.alert_type)
        return triggered

    async def track_api_usage(
        self,
        endpoint: str,
        method: str,
        status_code: int,
        response_time_ms: float,
        rate_limit_remaining: int | None = None,
        resource: str = "core",
    ) -> list[str]:
        logger.debug(
            "API usage %s %s -> %s in %.0fms (remaining=%s)",
            method,
            endpoint,
            status_code,
            response_time_ms,
            rate_limit_remaining,
        )
        triggered: list[str] = []
        if rate_limit_remaining is not None:
            triggered += await self._evaluate_family(
                RATE_LIMIT_FAMILY, rate_limit_remaining, {"resource": resource}
            )
        triggered += await self._evaluate_family(
            LATENCY_FAMILY, response_time_ms, {"endpoint": endpoint}
        )
        return triggered

    async def track_error_rate(
        self, percent: float, context: Mapping[str, str] | None = None
    ) -> list[str]:
        return await self._evaluate_family(ERROR_RATE_FAMILY, percent, dict(context or {}))

    async def track_auth_failures(
        self, count: float, context: Mapping[str, str] | None = None
    ) -> list[str]:
        return await self._evaluate_family(
            ("auth_failure_rate",), count, dict(context or {})
        )

    async def track_repo_access_failures(
        self, percent: float, context: Mapping[str, str] | None = None
    ) -> list[str]:
        return await self._evaluate_family(
            ("repo_access_failure_rate",), percent, dict(context or {})
        )
