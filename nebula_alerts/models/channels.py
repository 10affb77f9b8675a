"""Notification channel dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class NotificationChannel:
    id: str
    enabled: bool
    severities: frozenset[str]
    options: dict[str, object] = field(default_factory=dict)

    def accepts(self, severity: str) -> bool:
        return self.enabled and severity in self.severities

    def describe(self) -> dict[str, object]:
        """Introspection view. Secrets are never included."""
        return {
            "enabled": self.enabled,
            "severities": sorted(self.severities),
            "options": {
                key: value
                for key, value in self.options.items()
                if key not in _SECRET_OPTIONS
            },
        }


_SECRET_OPTIONS = frozenset({"smtp_password", "headers", "token", "url"})


@dataclass(frozen=True)
class DeliveryResult:
    channel: str
    ok: bool
    error: str | None = None
