"""In-memory store of the latest triggered instance per alert key."""

from __future__ import annotations

import json
from typing import Mapping

from .models.alerts import AlertInstance


def alert_key(alert_type: str, context: Mapping[str, object] | None) -> str:
    """Deterministic identity for (type, context); tag order does not matter."""
    encoded = json.dumps(
        dict(context or {}), sort_keys=True, separators=(",", ":"), default=str
    )
    return f"{alert_type}:{encoded}"


class ActiveAlertStore:
    def __init__(self) -> None:
        self._alerts: dict[str, AlertInstance] = {}

    def __len__(self) -> int:
        return len(self._alerts)

    def get(self, key: str) -> AlertInstance | None:
        return self._alerts.get(key)

    def put(self, instance: AlertInstance) -> str:
        key = alert_key(instance.type, instance.context)
        self._alerts[key] = instance
        return key

    def remove(
        self, alert_type: str, context: Mapping[str, object] | None
    ) -> AlertInstance | None:
        return self._alerts.pop(alert_key(alert_type, context), None)

    def list_active(self) -> list[AlertInstance]:
        return list(self._alerts.values())
