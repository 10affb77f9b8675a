"""Application runtime state (alert engine, producers, background tasks)."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..engine import AlertEngine
from ..monitoring import MonitoringService


@dataclass
class BotState:
    """Long-lived objects owned by the running application."""

    engine: AlertEngine
    monitoring: MonitoringService
    sample_interval_s: float = 60.0
    tasks: dict[str, object] = field(default_factory=dict)

    @classmethod
    def for_engine(cls, engine: AlertEngine, sample_interval_s: float = 60.0) -> "BotState":
        return cls(
            engine=engine,
            monitoring=MonitoringService(engine),
            sample_interval_s=sample_interval_s,
        )


BOT_STATE_KEY = "state"
