from nebula_alerts.classifier import MetricThresholds, ThresholdClassifier


def test_critical_wins_over_warning() -> None:
    classifier = ThresholdClassifier()
    result = classifier.classify("response_time", 6000, {"endpoint": "/api/x"})
    assert [c.alert_type for c in result] == ["response_time_critical"]
    assert result[0].severity == "critical"
    assert result[0].threshold == 5000


def test_warning_band() -> None:
    classifier = ThresholdClassifier()
    result = classifier.classify("response_time", 3000)
    assert [(c.alert_type, c.severity) for c in result] == [
        ("response_time_warning", "warning")
    ]


def test_below_thresholds_and_unknown_metric() -> None:
    classifier = ThresholdClassifier()
    assert classifier.classify("response_time", 1999) == []
    assert classifier.classify("not_a_metric", 1e9) == []


def test_overrides_replace_and_extend_table() -> None:
    classifier = ThresholdClassifier.from_overrides(
        {"response_time": (100.0, 200.0), "queue_depth": (10.0, 20.0), "bad": (5.0, 1.0)}
    )
    table = classifier.thresholds
    assert table["response_time"] == MetricThresholds(100.0, 200.0)
    assert "queue_depth" in table
    assert "bad" not in table
    assert classifier.classify("queue_depth", 15)[0].alert_type == "queue_depth_warning"


def test_values_on_a_threshold_reach_that_level() -> None:
    classifier = ThresholdClassifier()
    assert [c.alert_type for c in classifier.classify("response_time", 5000)] == [
        "response_time_critical"
    ]
    assert [c.alert_type for c in classifier.classify("response_time", 2000)] == [
        "response_time_warning"
    ]
    assert [c.alert_type for c in classifier.classify("memory_usage", 95)] == [
        "memory_usage_critical"
    ]
