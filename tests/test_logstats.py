from opskit import logstats
from opskit.entry import ValueKind
from opskit.logstats import LOG_CREATE, LOG_CURR, LOG_FLUSH_EX, log_metric_entries
from opskit.registry import Registry, default_registry

EXPECTED_NAMES = [
    "log_create",
    "log_create_ex",
    "log_destroy",
    "log_curr",
    "log_open",
    "log_open_ex",
    "log_write",
    "log_write_byte",
    "log_write_ex",
    "log_skip",
    "log_drop",
    "log_drop_byte",
    "log_flush",
    "log_flush_ex",
]


def test_default_registry_holds_log_metrics():
    names = [e.name for e in default_registry().static_metrics()]
    for name in EXPECTED_NAMES:
        assert names.count(name) == 1


def test_entries_in_declaration_order():
    entries = log_metric_entries(Registry())
    assert [e.name for e in entries] == EXPECTED_NAMES


def test_descriptions_match_source():
    entries = {e.name: e for e in log_metric_entries(Registry())}
    assert entries["log_create"].description == "logging targets initialized"
    assert entries["log_curr"].description == "current number of logging targets"
    assert (
        entries["log_flush_ex"].description
        == "number of times logging destinations have been flushed"
    )


def test_registration_is_idempotent():
    registry = Registry()
    first = log_metric_entries(registry)
    second = log_metric_entries(registry)
    assert len(registry.static_metrics()) == len(EXPECTED_NAMES)
    assert all(a is b for a, b in zip(first, second))


def test_entries_refer_to_module_metrics():
    entries = {e.name: e for e in log_metric_entries(Registry())}
    assert entries["log_create"].refers_to(LOG_CREATE)
    assert entries["log_flush_ex"].refers_to(LOG_FLUSH_EX)
    assert entries["log_curr"].refers_to(logstats.LOG_CURR)


def test_curr_is_gauge_and_tracks_updates():
    entry = next(e for e in log_metric_entries(Registry()) if e.name == "log_curr")
    before = LOG_CURR.get()
    LOG_CURR.increment()
    try:
        value = entry.metric.value()
        assert value.kind is ValueKind.GAUGE
        assert value.data == before + 1
    finally:
        LOG_CURR.decrement()
    assert LOG_CURR.get() == before


def test_counter_value_kind():
    entry = next(e for e in log_metric_entries(Registry()) if e.name == "log_create")
    assert entry.metric.value().kind is ValueKind.COUNTER
    assert entry.metric.value().data == LOG_CREATE.get()