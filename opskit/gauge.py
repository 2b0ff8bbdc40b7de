"""A thread-safe signed 64-bit gauge."""

from __future__ import annotations

import threading

from .entry import Metric, Value, ValueKind

_I64_MIN = -(1 << 63)
_I64_MAX = (1 << 63) - 1
_SPAN = 1 << 64


def _check_i64(value: int) -> int:
    if not _I64_MIN <= value <= _I64_MAX:
        raise ValueError(f"gauge value out of range for i64: {value}")
    return value


def _wrap(value: int) -> int:
    return (value - _I64_MIN) % _SPAN + _I64_MIN


class Gauge(Metric):
    """A gauge indicating the current value of some parameter.

    The gauge holds a signed 64-bit value and wraps around on overflow and
    underflow. Mutating operations return the value held before the change.
    """

    __slots__ = ("_value", "_lock")

    def __init__(self, value: int = 0) -> None:
        self._value = _check_i64(value)
        self._lock = threading.Lock()

    def increment(self) -> int:
        """Add one; return the previous value."""
        return self.add(1)

    def decrement(self) -> int:
        """Subtract one; return the previous value."""
        return self.sub(1)

    def add(self, value: int) -> int:
        """Add `value`, wrapping on overflow; return the previous value."""
        _check_i64(value)
        with self._lock:
            old = self._value
            self._value = _wrap(old + value)
        return old

    def sub(self, value: int) -> int:
        """Subtract `value`, wrapping on underflow; return the previous value."""
        _check_i64(value)
        with self._lock:
            old = self._value
            self._value = _wrap(old - value)
        return old

    def get(self) -> int:
        """Return the current value."""
        return self._value

    def set(self, value: int) -> int:
        """Replace the value; return the previous value."""
        _check_i64(value)
        with self._lock:
            old, self._value = self._value, value
        return old

    def reset(self) -> int:
        """Set the value to zero; return the previous value."""
        return self.set(0)

    def as_any(self) -> Gauge:
        return self

    def value(self) -> Value:
        return Value(ValueKind.GAUGE, self.get())

    def __repr__(self) -> str:
        return f"Gauge({self._value})"