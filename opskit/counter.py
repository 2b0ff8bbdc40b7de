"""A thread-safe unsigned 64-bit counter."""

from __future__ import annotations

import threading

from .entry import Metric, Value, ValueKind

_U64_LIMIT = 1 << 64


def _check_u64(value: int) -> int:
    if not 0 <= value < _U64_LIMIT:
        raise ValueError(f"counter value out of range for u64: {value}")
    return value


class Counter(Metric):
    """A counter that can be incremented or added to.

    The counter holds an unsigned 64-bit value and wraps around on overflow.
    Mutating operations return the value held before the change.
    """

    __slots__ = ("_value", "_lock")

    def __init__(self, value: int = 0) -> None:
        self._value = _check_u64(value)
        self._lock = threading.Lock()

    def increment(self) -> int:
        """Add one; return the previous value."""
        return self.add(1)

    def add(self, value: int) -> int:
        """Add `value`, wrapping on overflow; return the previous value."""
        _check_u64(value)
        with self._lock:
            old = self._value
            self._value = (old + value) % _U64_LIMIT
        return old

    def get(self) -> int:
        """Return the current value."""
        return self._value

    def set(self, value: int) -> int:
        """Replace the value; return the previous value."""
        _check_u64(value)
        with self._lock:
            old, self._value = self._value, value
        return old

    def reset(self) -> int:
        """Set the value to zero; return the previous value."""
        return self.set(0)

    def as_any(self) -> Counter:
        return self

    def value(self) -> Value:
        return Value(ValueKind.COUNTER, self.get())

    def __repr__(self) -> str:
        return f"Counter({self._value})"