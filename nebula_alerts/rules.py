"""Alert rule catalog and registry."""

from __future__ import annotations

import dataclasses
import logging
from typing import Mapping

from .classifier import MetricThresholds
from .models.alerts import AlertRule

logger = logging.getLogger(__name__)

_MINUTE_MS = 60 * 1000

DEFAULT_RULES: tuple[AlertRule, ...] = (
    AlertRule(
        id="github_rate_limit_warning",
        threshold=100,
        comparison="less_than",
        severity="warning",
        description="GitHub API rate limit is running low",
        cooldown_ms=5 * _MINUTE_MS,
    ),
    AlertRule(
        id="github_rate_limit_critical",
        threshold=10,
        comparison="less_than",
        severity="critical",
        description="GitHub API rate limit critically low",
        cooldown_ms=1 * _MINUTE_MS,
    ),
    AlertRule(
        id="high_error_rate",
        threshold=5,
        comparison="greater_than",
        severity="warning",
        description="High error rate detected",
        cooldown_ms=10 * _MINUTE_MS,
    ),
    AlertRule(
        id="critical_error_rate",
        threshold=10,
        comparison="greater_than",
        severity="critical",
        description="Critical error rate detected",
        cooldown_ms=5 * _MINUTE_MS,
    ),
    AlertRule(
        id="slow_response_time",
        threshold=3000,
        comparison="greater_than",
        severity="warning",
        description="Slow response times detected",
        cooldown_ms=10 * _MINUTE_MS,
    ),
    AlertRule(
        id="very_slow_response_time",
        threshold=10000,
        comparison="greater_than",
        severity="critical",
        description="Very slow response times detected",
        cooldown_ms=5 * _MINUTE_MS,
    ),
    AlertRule(
        id="auth_failure_rate",
        threshold=10,
        comparison="greater_than",
        severity="warning",
        description="High authentication failure rate",
        cooldown_ms=15 * _MINUTE_MS,
    ),
    AlertRule(
        id="repo_access_failure_rate",
        threshold=20,
        comparison="greater_than",
        severity="warning",
        description="High repository access failure rate",
        cooldown_ms=10 * _MINUTE_MS,
    ),
)

_RULE_FIELDS = frozenset(f.name for f in dataclasses.fields(AlertRule)) - {"id"}


def threshold_rules(
    thresholds: Mapping[str, MetricThresholds], cooldown_ms: int
) -> list[AlertRule]:
    """Build one rule per classifier output type."""
    rules: list[AlertRule] = []
    for metric, limits in thresholds.items():
        label = metric.replace("_", " ")
        rules.append(
            AlertRule(
                id=f"{metric}_warning",
                threshold=limits.warning,
                comparison="greater_than",
                severity="warning",
                description=f"{label.capitalize()} above warning threshold",
                cooldown_ms=cooldown_ms,
            )
        )
        rules.append(
            AlertRule(
                id=f"{metric}_critical",
                threshold=limits.critical,
                comparison="greater_than",
                severity="critical",
                description=f"{label.capitalize()} above critical threshold",
                cooldown_ms=cooldown_ms,
            )
        )
    return rules


class RuleRegistry:
    def __init__(self, rules: list[AlertRule] | tuple[AlertRule, ...] | None = None) -> None:
        source = DEFAULT_RULES if rules is None else rules
        self._rules: dict[str, AlertRule] = {
            rule.id: dataclasses.replace(rule) for rule in source
        }

    def get_rule(self, alert_type: str) -> AlertRule | None:
        return self._rules.get(alert_type)

    def update_rule(self, alert_type: str, fields: Mapping[str, object]) -> bool:
        """Merge ``fields`` into an existing rule. Returns False for unknown rules."""
        rule = self._rules.get(alert_type)
        if rule is None:
            return False
        known = {k: v for k, v in fields.items() if k in _RULE_FIELDS}
        ignored = sorted(set(fields) - set(known))
        if ignored:
            logger.debug("Ignoring unknown rule fields for %s: %s", alert_type, ignored)
        self._rules[alert_type] = dataclasses.replace(rule, **known)
        logger.info("Updated alert rule %s: %s", alert_type, known)
        return True

    def list_rules(self) -> dict[str, AlertRule]:
        return dict(self._rules)
