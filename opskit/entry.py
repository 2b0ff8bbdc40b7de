"""Metric interface, metric values, entries and formatting."""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from .metadata import Metadata


class Format(enum.Enum):
    """Output formats a metric name can be rendered in."""

    SIMPLE = "simple"
    PROMETHEUS = "prometheus"


class ValueKind(enum.Enum):
    """The kind of value a metric reports."""

    COUNTER = "counter"
    GAUGE = "gauge"
    OTHER = "other"


@dataclass(frozen=True)
class Value:
    """The value of a metric at some point in time."""

    kind: ValueKind
    data: Any = None


class Metric(ABC):
    """Interface implemented by every metric type."""

    def is_enabled(self) -> bool:
        """Whether this metric has been set up and reports a value."""
        return self.as_any() is not None

    @abstractmethod
    def as_any(self) -> Any:
        """Return the underlying metric object, or None if disabled."""

    @abstractmethod
    def value(self) -> Value | None:
        """Return the current value, or None if disabled."""


class NullMetric(Metric):
    """A metric that always reports itself as disabled."""

    def as_any(self) -> None:
        return None

    def value(self) -> None:
        return None


Formatter = Callable[["MetricEntry", Format], str]


def default_formatter(entry: MetricEntry, format: Format) -> str:
    """Render Prometheus-style labels when asked to, otherwise the bare name."""
    if format is Format.PROMETHEUS:
        labels = ", ".join(f'{key}="{value}"' for key, value in entry.metadata.items())
        return f"{entry.name}{{{labels}}}" if labels else entry.name
    return entry.name


class MetricEntry:
    """A named, described and labelled reference to a metric."""

    __slots__ = ("metric", "name", "description", "metadata", "formatter")

    def __init__(
        self,
        metric: Metric | None,
        name: str,
        description: str | None = None,
        metadata: Metadata | Mapping[str, str] | None = None,
        formatter: Formatter | None = None,
    ) -> None:
        self.metric: Metric = metric if metric is not None else NullMetric()
        self.name = name
        self.description = description
        if isinstance(metadata, Metadata):
            self.metadata = metadata
        else:
            self.metadata = Metadata(metadata)
        self.formatter: Formatter = formatter or default_formatter

    def formatted(self, format: Format) -> str:
        """Format the metric name with this entry's formatter."""
        return self.formatter(self, format)

    def refers_to(self, metric: Metric) -> bool:
        """Return True if `metric` is the very metric this entry points at."""
        return type(self.metric) is type(metric) and self.metric is metric

    def __repr__(self) -> str:
        return f"MetricEntry(name={self.name!r}, metric=<{type(self.metric).__name__}>)"