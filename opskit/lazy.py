"""A metric wrapper whose value is created on first use."""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Any, Generic, TypeVar

from .counter import Counter
from .entry import Metric, Value
from .gauge import Gauge

T = TypeVar("T")

_UNSET = object()


class Lazy(Metric, Generic[T]):
    """A value initialised on first access and thread-safe to share.

    Until it has been forced, a lazy metric reports itself as disabled and
    has no value. Attribute access forces it and is forwarded to the value.
    """

    def __init__(self, func: Callable[[], T]) -> None:
        self._func: Callable[[], T] | None = func
        self._value: Any = _UNSET
        self._lock = threading.Lock()

    def get(self) -> T | None:
        """Return the value if it has been initialised, otherwise None."""
        value = self._value
        return None if value is _UNSET else value

    def force(self) -> T:
        """Initialise the value if needed and return it."""
        value = self._value
        if value is not _UNSET:
            return value
        with self._lock:
            if self._value is _UNSET:
                func, self._func = self._func, None
                if func is None:
                    raise RuntimeError("Lazy instance has previously been poisoned")
                self._value = func()
            return self._value

    def is_enabled(self) -> bool:
        return self._value is not _UNSET

    def as_any(self) -> Any:
        return self.get()

    def value(self) -> Value | None:
        inner = self.get()
        if inner is None:
            return None
        return inner.value()

    def __getattr__(self, name: str) -> Any:
        if name.startswith("__") or name in ("_func", "_value", "_lock"):
            raise AttributeError(name)
        return getattr(self.force(), name)

    def __repr__(self) -> str:
        inner = self.get()
        return f"Lazy({inner!r})" if inner is not None else "Lazy(<uninit>)"


def lazy_counter() -> Lazy[Counter]:
    """A counter that reports nothing until it is first used."""
    return Lazy(Counter)


def lazy_gauge() -> Lazy[Gauge]:
    """A gauge that reports nothing until it is first used."""
    return Lazy(Gauge)