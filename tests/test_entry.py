import pytest

from opskit.entry import (
    Format,
    Metric,
    MetricEntry,
    NullMetric,
    Value,
    ValueKind,
    default_formatter,
)
from opskit.metadata import Metadata


class _Fixed(Metric):
    def __init__(self, amount):
        self.amount = amount

    def as_any(self):
        return self

    def value(self):
        return Value(ValueKind.COUNTER, self.amount)


def custom_formatter(entry, format):
    if format is Format.SIMPLE:
        return f"{entry.name}_instance_{entry.metadata.get('instance', 'unknown')}"
    return default_formatter(entry, format)


@pytest.fixture
def entries():
    metric = _Fixed(0)
    metric_a = _Fixed(0)
    metric_b = _Fixed(0)
    return {
        "plain": (metric, MetricEntry(metric, "metric", formatter=custom_formatter)),
        "a": (
            metric_a,
            MetricEntry(metric_a, "metric", metadata={"instance": "a"}, formatter=custom_formatter),
        ),
        "b": (
            metric_b,
            MetricEntry(metric_b, "metric", metadata={"instance": "b"}, formatter=custom_formatter),
        ),
    }


def _find(all_entries, metric):
    return next(e for _, e in all_entries.values() if e.refers_to(metric))


def test_no_metadata(entries):
    metric, _ = entries["plain"]
    entry = _find(entries, metric)
    assert entry.name == "metric"
    assert entry.formatted(Format.SIMPLE) == "metric_instance_unknown"
    assert entry.formatted(Format.PROMETHEUS) == "metric"


def test_instance_a(entries):
    metric, _ = entries["a"]
    entry = _find(entries, metric)
    assert entry.name == "metric"
    assert entry.formatted(Format.SIMPLE) == "metric_instance_a"
    assert entry.formatted(Format.PROMETHEUS) == 'metric{instance="a"}'


def test_instance_b(entries):
    metric, _ = entries["b"]
    entry = _find(entries, metric)
    assert entry.name == "metric"
    assert entry.formatted(Format.SIMPLE) == "metric_instance_b"
    assert entry.formatted(Format.PROMETHEUS) == 'metric{instance="b"}'


def test_default_formatter_multiple_labels():
    entry = MetricEntry(_Fixed(1), "cpu_usage", metadata=[("mode", "user"), ("cpu", "0")])
    assert entry.formatted(Format.PROMETHEUS) == 'cpu_usage{mode="user", cpu="0"}'
    assert entry.formatted(Format.SIMPLE) == "cpu_usage"


def test_default_formatter_without_labels():
    entry = MetricEntry(_Fixed(1), "cpu/usage/user")
    assert default_formatter(entry, Format.PROMETHEUS) == "cpu/usage/user"
    assert default_formatter(entry, Format.SIMPLE) == "cpu/usage/user"


def test_entry_defaults():
    entry = MetricEntry(_Fixed(1), "name")
    assert entry.description is None
    assert entry.metadata.is_empty()
    assert isinstance(entry.metadata, Metadata)


def test_entry_description():
    entry = MetricEntry(_Fixed(1), "name", description="some metric with a description")
    assert entry.description == "some metric with a description"


def test_refers_to_distinguishes_instances():
    first, second = _Fixed(1), _Fixed(1)
    entry = MetricEntry(first, "x")
    assert entry.refers_to(first)
    assert not entry.refers_to(second)


def test_missing_metric_becomes_null():
    entry = MetricEntry(None, "x")
    assert isinstance(entry.metric, NullMetric)
    assert entry.metric.is_enabled() is False
    assert entry.metric.value() is None


def test_null_metric_disabled():
    null = NullMetric()
    assert null.is_enabled() is False
    assert null.as_any() is None


def test_enabled_metric_reports_value():
    metric = _Fixed(7)
    assert metric.is_enabled() is True
    assert metric.value() == Value(ValueKind.COUNTER, 7)


def test_metric_is_abstract():
    with pytest.raises(TypeError):
        Metric()  # type: ignore[abstract]


def test_repr_hides_metric():
    entry = MetricEntry(_Fixed(1), "shown-name")
    assert "shown-name" in repr(entry)
    assert repr(entry).startswith("MetricEntry(")