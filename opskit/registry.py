"""Registries of static and dynamically created metrics."""

from __future__ import annotations

import threading
from collections.abc import Iterator
from typing import Any

from .entry import Formatter, Metric, MetricEntry, default_formatter
from .metadata import Metadata


class Registry:
    """Holds every registered metric entry, static and dynamic.

    Static entries are kept in registration order. Dynamic entries are keyed
    by the identity of the metric they point at, so registering the same
    metric again replaces its previous entry and unregistering a metric
    removes it whatever name it was registered under.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._static: list[MetricEntry] = []
        self._dynamic: dict[int, MetricEntry] = {}

    def register_static(self, entry: MetricEntry) -> None:
        """Add an entry that lives for as long as the registry does."""
        with self._lock:
            self._static.append(entry)

    def register(self, entry: MetricEntry) -> None:
        """Add a dynamic entry, replacing any entry for the same metric."""
        with self._lock:
            self._dynamic[id(entry.metric)] = entry

    def unregister(self, metric: Metric) -> None:
        """Remove the dynamic entry for `metric`; unknown metrics are ignored."""
        with self._lock:
            entry = self._dynamic.get(id(metric))
            if entry is not None and entry.metric is metric:
                del self._dynamic[id(metric)]

    def static_metrics(self) -> tuple[MetricEntry, ...]:
        """Return all statically registered entries."""
        with self._lock:
            return tuple(self._static)

    def dynamic_metrics(self) -> list[MetricEntry]:
        """Return all dynamically registered entries, ordered by metric key."""
        with self._lock:
            return [self._dynamic[key] for key in sorted(self._dynamic)]

    def __iter__(self) -> Iterator[MetricEntry]:
        with self._lock:
            entries = list(self._static) + self.dynamic_metrics()
        return iter(entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._static) + len(self._dynamic)


_DEFAULT_REGISTRY = Registry()


def default_registry() -> Registry:
    """Return the process-wide registry."""
    return _DEFAULT_REGISTRY


def metrics(registry: Registry | None = None) -> Registry:
    """Return the registry holding all metrics, the process-wide one by default.

    Names are not guaranteed to be unique and no aggregation is done.
    """
    return registry if registry is not None else _DEFAULT_REGISTRY


class MetricBuilder:
    """Builder for a dynamically registered metric entry."""

    def __init__(self, name: str) -> None:
        self._name = name
        self._description: str | None = None
        self._metadata: dict[str, str] = {}
        self._formatter: Formatter = default_formatter

    def description(self, desc: str) -> MetricBuilder:
        """Set the description of the metric."""
        self._description = desc
        return self

    def metadata(self, key: str, value: str) -> MetricBuilder:
        """Add a key/value metadata entry."""
        self._metadata[key] = value
        return self

    def formatter(self, formatter: Formatter) -> MetricBuilder:
        """Set the function used to format the metric name."""
        self._formatter = formatter
        return self

    def into_entry(self) -> MetricEntry:
        """Create an entry that does not yet point at a metric."""
        return MetricEntry(
            None,
            self._name,
            self._description,
            Metadata(self._metadata),
            self._formatter,
        )

    def build(self, metric: Metric, registry: Registry | None = None) -> DynBoxedMetric:
        """Register `metric` under this entry and return its handle."""
        return DynBoxedMetric(metric, self.into_entry(), registry)


class DynPinnedMetric:
    """A metric that may be registered dynamically under any number of names.

    Closing the handle, leaving its ``with`` block, or dropping the last
    reference to it removes every entry registered through it. Attribute
    access is forwarded to the wrapped metric.
    """

    def __init__(self, metric: Metric, registry: Registry | None = None) -> None:
        self._metric = metric
        self._registry = metrics(registry)
        self._closed = False

    @property
    def metric(self) -> Metric:
        """The wrapped metric."""
        return self._metric

    def register(self, entry: MetricEntry) -> None:
        """Register the wrapped metric under `entry`'s name and metadata."""
        if self._closed:
            raise RuntimeError("cannot register a closed dynamic metric")
        self._registry.register(
            MetricEntry(
                self._metric,
                entry.name,
                entry.description,
                entry.metadata,
                entry.formatter,
            )
        )

    def close(self) -> None:
        """Unregister every entry pointing at the wrapped metric."""
        if not self._closed:
            self._closed = True
            self._registry.unregister(self._metric)

    def __enter__(self) -> DynPinnedMetric:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def __del__(self) -> None:
        try:
            self.close()
        except AttributeError:
            pass

    def __getattr__(self, name: str) -> Any:
        if name.startswith("__") or name in ("_metric", "_registry", "_closed"):
            raise AttributeError(name)
        return getattr(self._metric, name)


class DynBoxedMetric(DynPinnedMetric):
    """A dynamic metric registered under one entry as soon as it is created."""

    def __init__(
        self,
        metric: Metric,
        entry: MetricEntry,
        registry: Registry | None = None,
    ) -> None:
        super().__init__(metric, registry)
        self.register(entry)