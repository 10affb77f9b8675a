"""Tests for alert evaluation, cooldown and the active alert store."""

import asyncio
import threading

import pytest

from nebula_alerts.models.settings import Settings
from nebula_alerts.engine import AlertEngine, compare
from nebula_alerts.store import alert_key

from conftest import FakeClock, RecordingSender, make_engine, rate_limit_rule


@pytest.mark.asyncio
async def test_rate_limit_scenario() -> None:
    engine = make_engine()

    assert await engine.evaluate("rate_limit_critical", 5, {"resource": "core"}) is True
    assert len(engine.list_active()) == 1

    assert await engine.evaluate("rate_limit_critical", 3, {"resource": "core"}) is False
    assert await engine.evaluate("rate_limit_critical", 5, {"resource": "search"}) is True
    assert len(engine.list_active()) == 2
    await engine.drain()


@pytest.mark.asyncio
async def test_cooldown_keeps_last_triggered() -> None:
    clock = FakeClock()
    engine = make_engine(clock=clock)
    await engine.evaluate("rate_limit_critical", 5, {"resource": "core"})
    first = engine.list_active()[0]

    clock.advance(59.9)
    assert await engine.evaluate("rate_limit_critical", 1, {"resource": "core"}) is False
    assert engine.list_active()[0].last_triggered == first.last_triggered
    assert engine.list_active()[0].value == 5
    await engine.drain()


@pytest.mark.asyncio
async def test_retrigger_after_cooldown_overwrites() -> None:
    clock = FakeClock()
    engine = make_engine(clock=clock)
    await engine.evaluate("rate_limit_critical", 5, {"resource": "core"})
    first = engine.list_active()[0]

    clock.advance(60)
    assert await engine.evaluate("rate_limit_critical", 2, {"resource": "core"}) is True

    active = engine.list_active()
    assert len(active) == 1
    assert active[0].value == 2
    assert active[0].id != first.id
    assert active[0].last_triggered == clock.now
    await engine.drain()


@pytest.mark.asyncio
async def test_non_matching_value_creates_no_entry() -> None:
    engine = make_engine()
    assert await engine.evaluate("rate_limit_critical", 50, {"resource": "core"}) is False
    assert engine.list_active() == []


@pytest.mark.asyncio
async def test_non_matching_value_keeps_prior_alert_active() -> None:
    clock = FakeClock()
    engine = make_engine(clock=clock)
    await engine.evaluate("rate_limit_critical", 5, {"resource": "core"})
    clock.advance(120)

    assert await engine.evaluate("rate_limit_critical", 500, {"resource": "core"}) is False
    assert len(engine.list_active()) == 1
    await engine.drain()


@pytest.mark.asyncio
async def test_unknown_and_disabled_rules_do_not_trigger() -> None:
    engine = make_engine(rules=[rate_limit_rule(enabled=False)])
    assert await engine.evaluate("rate_limit_critical", 1) is False
    assert await engine.evaluate("no_such_rule", 1) is False
    assert engine.list_active() == []


@pytest.mark.asyncio
async def test_unknown_comparison_logs_and_returns_false(caplog) -> None:
    engine = make_engine(rules=[rate_limit_rule(comparison="between")])
    assert await engine.evaluate("rate_limit_critical", 1) is False
    assert engine.list_active() == []
    assert "Unknown comparison operator" in caplog.text


def test_compare_operators() -> None:
    assert compare("greater_than", 11, 10) is True
    assert compare("less_than", 11, 10) is False
    assert compare("equals", 10, 10.0) is True
    assert compare("not_equals", 10, 11) is True
    assert compare("greater_than", "x", 10) is False
    assert compare("bogus", 1, 1) is None


@pytest.mark.asyncio
async def test_rule_snapshot_is_not_changed_by_later_updates() -> None:
    engine = make_engine()
    await engine.evaluate("rate_limit_critical", 5)
    assert engine.update_rule("rate_limit_critical", {"severity": "warning", "threshold": 3})

    instance = engine.list_active()[0]
    assert instance.rule.severity == "critical"
    assert instance.rule.threshold == 10
    assert engine.get_rule("rate_limit_critical").threshold == 3
    await engine.drain()


@pytest.mark.asyncio
async def test_trigger_dispatches_to_matching_channels() -> None:
    console = RecordingSender()
    webhook = RecordingSender()
    engine = make_engine(senders={"console": console, "webhook": webhook})

    await engine.evaluate("rate_limit_critical", 5, {"resource": "core"})
    await engine.drain()

    assert len(console.sent) == 1
    assert len(webhook.sent) == 1
    payload = webhook.sent[0]
    assert set(payload) == {
        "id",
        "type",
        "severity",
        "description",
        "value",
        "threshold",
        "context",
        "timestamp",
    }
    assert payload["type"] == "rate_limit_critical"
    assert payload["context"] == {"resource": "core"}


@pytest.mark.asyncio
async def test_resolve_removes_only_matching_key() -> None:
    engine = make_engine()
    await engine.evaluate("rate_limit_critical", 5, {"resource": "core"})
    await engine.evaluate("rate_limit_critical", 5, {"resource": "search"})

    assert engine.resolve("rate_limit_critical", {"resource": "core"}) is True
    assert engine.resolve("rate_limit_critical", {"resource": "core"}) is False
    assert [a.context for a in engine.list_active()] == [{"resource": "search"}]

    # resolving clears the cooldown for that key
    assert await engine.evaluate("rate_limit_critical", 5, {"resource": "core"}) is True
    await engine.drain()


def test_alert_key_ignores_tag_order() -> None:
    assert alert_key("t", {"a": "1", "b": "2"}) == alert_key("t", {"b": "2", "a": "1"})
    assert alert_key("t", None) == alert_key("t", {})
    assert alert_key("t", {"a": "1"}) != alert_key("u", {"a": "1"})


def test_configuration_snapshot() -> None:
    engine = make_engine()
    snapshot = engine.configuration_snapshot()
    assert snapshot["active_count"] == 0
    assert snapshot["rules"]["rate_limit_critical"]["cooldown_ms"] == 60000
    assert snapshot["channels"]["webhook"]["severities"] == ["critical"]


def test_concurrent_evaluations_trigger_once() -> None:
    engine = make_engine()
    results: list[bool] = []
    barrier = threading.Barrier(8)

    def worker() -> None:
        async def run() -> bool:
            barrier.wait()
            triggered = await engine.evaluate("rate_limit_critical", 1, {"resource": "core"})
            await engine.drain()
            return triggered

        results.append(asyncio.run(run()))

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count(True) == 1
    assert len(engine.list_active()) == 1


@pytest.mark.asyncio
async def test_test_notifications_reach_info_channels_only() -> None:
    console = RecordingSender()
    webhook = RecordingSender()
    engine = make_engine(senders={"console": console, "webhook": webhook})

    payload, results = await engine.test_notifications()

    assert payload["severity"] == "info"
    assert [r.channel for r in results] == ["console"]
    assert console.sent == [payload]
    assert webhook.sent == []
    assert engine.list_active() == []


def test_from_settings_builds_classifier_rules() -> None:
    settings = Settings(ALERT_METRIC_THRESHOLDS={"queue_depth": (100.0, 500.0)})
    engine = AlertEngine.from_settings(settings)

    assert engine.get_rule("github_rate_limit_warning") is not None
    rule = engine.get_rule("queue_depth_critical")
    assert rule is not None
    assert rule.threshold == 500.0
    assert rule.cooldown_ms == settings.ALERT_DEFAULT_COOLDOWN_MS
    assert engine.channels.get_channel("console").enabled is True
    assert engine.channels.get_channel("webhook").enabled is False


@pytest.mark.asyncio
async def test_classified_evaluation_skips_comparison_but_keeps_cooldown() -> None:
    clock = FakeClock()
    engine = make_engine(clock=clock)

    assert await engine.evaluate("rate_limit_critical", 10, {"resource": "core"}) is False
    assert (
        await engine.evaluate("rate_limit_critical", 10, {"resource": "core"}, classified=True)
        is True
    )
    clock.advance(1)
    assert (
        await engine.evaluate("rate_limit_critical", 10, {"resource": "core"}, classified=True)
        is False
    )
    await engine.drain()


def test_condition_met_ignores_cooldown_and_checks_enabled() -> None:
    engine = make_engine()
    assert engine.condition_met("rate_limit_critical", 5) is True
    assert engine.condition_met("rate_limit_critical", 10) is False
    assert engine.condition_met("missing", 5) is False
    engine.update_rule("rate_limit_critical", {"enabled": False})
    assert engine.condition_met("rate_limit_critical", 5) is False
