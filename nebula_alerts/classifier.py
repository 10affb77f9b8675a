"""Metric threshold table and classification helpers."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping

from .models.alerts import Classification

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MetricThresholds:
    warning: float
    critical: float


DEFAULT_METRIC_THRESHOLDS: dict[str, MetricThresholds] = {
    "response_time": MetricThresholds(warning=2000, critical=5000),  # ms
    "memory_usage": MetricThresholds(warning=80, critical=95),  # percent
    "error_rate": MetricThresholds(warning=5, critical=10),  # percent
    "github_api_response_time": MetricThresholds(warning=3000, critical=10000),  # ms
}


class ThresholdClassifier:
    """Map a metric observation to at most one warning/critical alert type."""

    def __init__(self, thresholds: Mapping[str, MetricThresholds] | None = None) -> None:
        table = DEFAULT_METRIC_THRESHOLDS if thresholds is None else thresholds
        self._thresholds: dict[str, MetricThresholds] = dict(table)

    @classmethod
    def from_overrides(
        cls, overrides: Mapping[str, tuple[float, float]] | None
    ) -> "ThresholdClassifier":
        table = dict(DEFAULT_METRIC_THRESHOLDS)
        for metric, (warning, critical) in (overrides or {}).items():
            if warning > critical:
                logger.warning(
                    "Ignoring thresholds for %s: warning %s above critical %s",
                    metric,
                    warning,
                    critical,
                )
                continue
            table[metric] = MetricThresholds(warning=warning, critical=critical)
        return cls(table)

    @property
    def thresholds(self) -> dict[str, MetricThresholds]:
        return dict(self._thresholds)

    def classify(
        self,
        metric: str,
        value: float,
        context: Mapping[str, str] | None = None,
    ) -> list[Classification]:
        limits = self._thresholds.get(metric)
        if limits is None:
            return []
        if value >= limits.critical:
            return [Classification(f"{metric}_critical", "critical", limits.critical)]
        if value >= limits.warning:
            return [Classification(f"{metric}_warning", "warning", limits.warning)]
        return []
