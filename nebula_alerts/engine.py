"""Alert evaluation: rule lookup, cooldown deduplication and triggering.

``AlertEngine`` is the object the application constructs once and keeps for
the life of the process. Notification delivery runs in background tasks so
``evaluate`` never waits on channel I/O.
"""

from __future__ import annotations

import asyncio
import logging
import operator
import threading
import time
from typing import Any, Callable, Mapping

from .channels import ChannelRegistry
from .classifier import ThresholdClassifier
from .dispatcher import NotificationDispatcher
from .models.alerts import AlertInstance, AlertRule, Classification, new_alert_id, utc_timestamp
from .models.channels import DeliveryResult
from .models.settings import Settings
from .rules import DEFAULT_RULES, RuleRegistry, threshold_rules
from .senders import default_senders
from .store import ActiveAlertStore, alert_key

logger = logging.getLogger(__name__)

_COMPARATORS: dict[str, Callable[[Any, Any], Any]] = {
    "greater_than": operator.gt,
    "less_than": operator.lt,
    "equals": operator.eq,
    "not_equals": operator.ne,
}


def compare(comparison: str, value: Any, threshold: Any) -> bool | None:
    """Apply a rule comparison. Returns None for an unsupported operator."""
    fn = _COMPARATORS.get(comparison)
    if fn is None:
        return None
    try:
        return bool(fn(value, threshold))
    except TypeError:
        return False


class AlertEngine:
    def __init__(
        self,
        rules: RuleRegistry,
        channels: ChannelRegistry,
        dispatcher: NotificationDispatcher,
        classifier: ThresholdClassifier | None = None,
        store: ActiveAlertStore | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.rules = rules
        self.channels = channels
        self.dispatcher = dispatcher
        self.classifier = classifier or ThresholdClassifier()
        self.store = store or ActiveAlertStore()
        self._clock = clock
        self._lock = threading.Lock()
        self._pending: set[asyncio.Task] = set()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        bot=None,
        clock: Callable[[], float] = time.monotonic,
    ) -> "AlertEngine":
        classifier = ThresholdClassifier.from_overrides(settings.ALERT_METRIC_THRESHOLDS)
        rules = RuleRegistry(
            [
                *DEFAULT_RULES,
                *threshold_rules(
                    classifier.thresholds, settings.ALERT_DEFAULT_COOLDOWN_MS
                ),
            ]
        )
        channels = ChannelRegistry.from_settings(settings)
        dispatcher = NotificationDispatcher(
            channels,
            default_senders(settings, bot),
            timeout_s=settings.ALERT_CHANNEL_TIMEOUT_S,
        )
        return cls(rules, channels, dispatcher, classifier=classifier, clock=clock)

    # Rules

    def get_rule(self, alert_type: str) -> AlertRule | None:
        return self.rules.get_rule(alert_type)

    def update_rule(self, alert_type: str, fields: Mapping[str, object]) -> bool:
        return self.rules.update_rule(alert_type, fields)

    def list_rules(self) -> dict[str, AlertRule]:
        return self.rules.list_rules()

    # Evaluation

    def classify(
        self, metric: str, value: float, context: Mapping[str, str] | None = None
    ) -> list[Classification]:
        return self.classifier.classify(metric, value, context)

    async def evaluate(
        self,
        alert_type: str,
        value: float,
        context: Mapping[str, str] | None = None,
        *,
        classified: bool = False,
    ) -> bool:
        """Trigger ``alert_type`` for ``context`` if its rule holds and cooldown allows.

        ``classified=True`` means the threshold classifier already decided the
        condition, so the rule comparison is skipped. Enablement and cooldown
        still apply.
        """
        instance = self._check_and_trigger(
            alert_type, value, dict(context or {}), classified
        )
        if instance is None:
            return False
        logger.info(
            "Alert triggered: %s value=%s context=%s id=%s",
            alert_type,
            value,
            instance.context,
            instance.id,
        )
        self._schedule_dispatch(instance)
        return True

    def condition_met(self, alert_type: str, value: float) -> bool:
        """Whether an enabled rule for ``alert_type`` accepts ``value``, ignoring cooldown."""
        rule = self.rules.get_rule(alert_type)
        if rule is None or not rule.enabled:
            return False
        return self._matches(rule, value)

    @staticmethod
    def _matches(rule: AlertRule, value: float) -> bool:
        matched = compare(rule.comparison, value, rule.threshold)
        if matched is None:
            logger.warning(
                "Unknown comparison operator %r on rule %s", rule.comparison, rule.id
            )
            return False
        return matched

    def _check_and_trigger(
        self,
        alert_type: str,
        value: float,
        context: dict[str, str],
        classified: bool = False,
    ) -> AlertInstance | None:
        rule = self.rules.get_rule(alert_type)
        if rule is None:
            logger.debug("No alert rule for %s", alert_type)
            return None
        if not rule.enabled:
            return None

        key = alert_key(alert_type, context)
        with self._lock:
            now = self._clock()
            existing = self.store.get(key)
            if existing is not None:
                elapsed_ms = (now - existing.last_triggered) * 1000
                if elapsed_ms < rule.cooldown_ms:
                    return None

            if not classified and not self._matches(rule, value):
                return None

            instance = AlertInstance(
                type=alert_type,
                value=value,
                context=context,
                rule=rule.snapshot(),
                last_triggered=now,
            )
            self.store.put(instance)
        return instance

    def _schedule_dispatch(self, instance: AlertInstance) -> None:
        task = asyncio.get_running_loop().create_task(self.dispatcher.dispatch(instance))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def drain(self) -> None:
        """Wait for every notification dispatch scheduled on this loop."""
        loop = asyncio.get_running_loop()
        while True:
            tasks = [t for t in list(self._pending) if t.get_loop() is loop]
            if not tasks:
                return
            await asyncio.gather(*tasks, return_exceptions=True)

    # Active alerts

    def resolve(self, alert_type: str, context: Mapping[str, str] | None = None) -> bool:
        with self._lock:
            removed = self.store.remove(alert_type, context)
        if removed is None:
            return False
        logger.info(
            "Alert resolved: %s id=%s resolved_at=%s", alert_type, removed.id, utc_timestamp()
        )
        return True

    def list_active(self) -> list[AlertInstance]:
        return self.store.list_active()

    def configuration_snapshot(self) -> dict[str, Any]:
        return {
            "rules": {rid: rule.to_dict() for rid, rule in self.list_rules().items()},
            "channels": {
                cid: channel.describe()
                for cid, channel in self.channels.list_channels().items()
            },
            "active_count": len(self.store),
        }

    async def test_notifications(self) -> tuple[dict[str, Any], list[DeliveryResult]]:
        """Push an info-level test payload through the dispatcher.

        The test payload bypasses rules and is never stored as active.
        """
        payload = {
            "id": f"test_{new_alert_id()}",
            "type": "test_alert",
            "severity": "info",
            "description": "Test notification from Nebula monitoring system",
            "value": "test",
            "threshold": "N/A",
            "context": {"test": "true"},
            "timestamp": utc_timestamp(),
        }
        results = await self.dispatcher.dispatch_payload(payload)
        return payload, results
