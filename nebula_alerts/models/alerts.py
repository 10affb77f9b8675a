"""Alert rule/instance dataclasses."""

from __future__ import annotations

import dataclasses
import secrets
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone


SEVERITIES: tuple[str, ...] = ("info", "warning", "critical")
COMPARISONS: tuple[str, ...] = ("greater_than", "less_than", "equals", "not_equals")


@dataclass
class AlertRule:
    id: str
    threshold: float
    comparison: str
    severity: str
    description: str
    cooldown_ms: int
    enabled: bool = True

    def snapshot(self) -> "AlertRule":
        return dataclasses.replace(self)

    def to_dict(self) -> dict[str, object]:
        return dataclasses.asdict(self)


@dataclass(frozen=True)
class Classification:
    alert_type: str
    severity: str
    threshold: float


def new_alert_id() -> str:
    return f"alert_{int(time.time() * 1000)}_{secrets.token_hex(5)}"


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class AlertInstance:
    """One successful trigger of a rule for a specific context."""

    type: str
    value: float
    context: dict[str, str]
    rule: AlertRule
    last_triggered: float
    id: str = field(default_factory=new_alert_id)
    timestamp: str = field(default_factory=utc_timestamp)

    @property
    def severity(self) -> str:
        return self.rule.severity

    def to_payload(self) -> dict[str, object]:
        return {
            "id": self.id,
            "type": self.type,
            "severity": self.rule.severity,
            "description": self.rule.description,
            "value": self.value,
            "threshold": self.rule.threshold,
            "context": dict(self.context),
            "timestamp": self.timestamp,
        }
