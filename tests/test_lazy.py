import threading

import pytest

from opskit.counter import Counter
from opskit.entry import ValueKind
from opskit.gauge import Gauge
from opskit.lazy import Lazy, lazy_counter, lazy_gauge


def test_uninitialised_reports_nothing():
    lazy = lazy_counter()
    assert lazy.get() is None
    assert lazy.is_enabled() is False
    assert lazy.as_any() is None
    assert lazy.value() is None


def test_force_initialises_once():
    calls = []

    def make():
        calls.append(1)
        return Counter(7)

    lazy = Lazy(make)
    first = lazy.force()
    second = lazy.force()
    assert first is second
    assert len(calls) == 1
    assert lazy.get() is first
    assert first.get() == 7


def test_attribute_access_forces_and_forwards():
    lazy = lazy_counter()
    lazy.increment()
    lazy.add(2)
    assert lazy.is_enabled() is True
    assert isinstance(lazy.as_any(), Counter)
    assert lazy.value().kind is ValueKind.COUNTER
    assert lazy.value().data == 3


def test_lazy_gauge_value_after_use():
    lazy = lazy_gauge()
    assert lazy.value() is None
    lazy.decrement()
    assert isinstance(lazy.get(), Gauge)
    assert lazy.value().kind is ValueKind.GAUGE
    assert lazy.value().data == -1


def test_poisoned_after_failed_init():
    def boom():
        raise ValueError("bad init")

    lazy = Lazy(boom)
    with pytest.raises(ValueError):
        lazy.force()
    with pytest.raises(RuntimeError, match="poisoned"):
        lazy.force()
    assert lazy.get() is None


def test_concurrent_force_yields_single_value():
    calls = []

    def make():
        calls.append(1)
        return Counter()

    lazy = Lazy(make)
    results = []
    threads = [threading.Thread(target=lambda: results.append(lazy.force())) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(calls) == 1
    assert len(results) == 8
    assert all(r is results[0] for r in results)
    assert lazy.get() is results[0]
    assert results[0].get() == 0


def test_missing_attribute_raises():
    lazy = lazy_counter()
    with pytest.raises(AttributeError):
        lazy.no_such_method()