"""Metrics describing the activity of the logging backend."""

from __future__ import annotations

from .counter import Counter
from .declare import metric
from .entry import Metric, MetricEntry
from .gauge import Gauge
from .registry import Registry, metrics

LOG_CREATE = Counter()
LOG_CREATE_EX = Counter()
LOG_DESTROY = Counter()
LOG_CURR = Gauge()
LOG_OPEN = Counter()
LOG_OPEN_EX = Counter()
LOG_WRITE = Counter()
LOG_WRITE_BYTE = Counter()
LOG_WRITE_EX = Counter()
LOG_SKIP = Counter()
LOG_DROP = Counter()
LOG_DROP_BYTE = Counter()
LOG_FLUSH = Counter()
LOG_FLUSH_EX = Counter()

_LOG_METRICS: tuple[tuple[Metric, str, str], ...] = (
    (LOG_CREATE, "log_create", "logging targets initialized"),
    (
        LOG_CREATE_EX,
        "log_create_ex",
        "number of exceptions while initializing logging targets",
    ),
    (LOG_DESTROY, "log_destroy", "logging targets destroyed"),
    (LOG_CURR, "log_curr", "current number of logging targets"),
    (LOG_OPEN, "log_open", "number of logging destinations which have been opened"),
    (
        LOG_OPEN_EX,
        "log_open_ex",
        "number of exceptions while opening logging destinations",
    ),
    (LOG_WRITE, "log_write", "number of writes to all logging destinations"),
    (
        LOG_WRITE_BYTE,
        "log_write_byte",
        "number of bytes written to all logging destinations",
    ),
    (
        LOG_WRITE_EX,
        "log_write_ex",
        "number of exceptions while writing to logging destinations",
    ),
    (LOG_SKIP, "log_skip", "number of log messages skipped due to sampling policy"),
    (LOG_DROP, "log_drop", "number of log messages dropped due to full queues"),
    (LOG_DROP_BYTE, "log_drop_byte", "number of bytes dropped due to full queues"),
    (
        LOG_FLUSH,
        "log_flush",
        "number of times logging destinations have been flushed",
    ),
    (
        LOG_FLUSH_EX,
        "log_flush_ex",
        "number of times logging destinations have been flushed",
    ),
)


def log_metric_entries(registry: Registry | None = None) -> list[MetricEntry]:
    """Return the entries of the logging metrics in `registry`.

    Any logging metric not yet declared in the registry is declared first,
    so repeated calls never register a metric twice.
    """
    target = metrics(registry)
    entries: list[MetricEntry] = []
    for instance, name, description in _LOG_METRICS:
        existing = next(
            (e for e in target.static_metrics() if e.refers_to(instance)), None
        )
        if existing is None:
            metric(instance, name=name, description=description, registry=target)
            existing = next(
                e for e in target.static_metrics() if e.refers_to(instance)
            )
        entries.append(existing)
    return entries


log_metric_entries()