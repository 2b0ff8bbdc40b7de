# opskit

Small building blocks for long-running services, with no dependencies
outside the standard library:

- **Metrics** – counters, gauges and lazily created metrics, collected in a
  registry that can be listed and formatted for export (plain names or
  Prometheus-style names with labels).
- **Rate limiting** – a thread-safe token bucket with configurable refill
  amount, refill interval and burst size.
- **Switchboard queues** – bounded queues linking two groups of workers,
  with targeted, random ("any") and broadcast sends, and every item tagged
  with the id of its sender.
- **Ring logging** – a backend for the standard `logging` module that
  formats records into a bounded queue and writes them to an output only
  when you flush the drain, plus routing by logger name, sampling and
  rotating file output.

## Installation

```
pip install opskit
```

For running the test suite:

```
pip install "opskit[test]"
pytest
```

## Metrics

```python
from opskit.counter import Counter
from opskit.gauge import Gauge

requests = Counter()
requests.increment()
requests.add(10)
print(requests.get())      # 11

in_flight = Gauge()
in_flight.increment()
in_flight.decrement()
```

`Counter` holds an unsigned 64-bit value and wraps on overflow; `Gauge`
holds a signed 64-bit value and wraps on overflow and underflow. Their
mutating methods (`increment`, `add`, `set`, `reset`, and for gauges
`decrement` and `sub`) return the value held before the change. Values
outside the 64-bit range raise `ValueError`.

### Declaring and listing metrics

```python
from opskit.counter import Counter
from opskit.declare import metric
from opskit.entry import Format
from opskit.registry import metrics

@metric(description="requests served", metadata={"instance": "a"})
def REQUESTS():
    return Counter()

for entry in metrics():
    print(entry.formatted(Format.PROMETHEUS))   # REQUESTS{instance="a"}
```

`opskit.declare.metric` registers a metric statically, either as a decorator
on a function returning a metric (whose name is the default metric name) or
called with a metric and an explicit `name`. Duplicate metadata keys raise
`ValueError`.

`opskit.registry.MetricBuilder(name)` creates entries at run time:
`.description(...)`, `.metadata(key, value)` and `.formatter(...)` configure
it, and `.build(metric)` registers the metric and returns a `DynBoxedMetric`.
`DynPinnedMetric` wraps a metric that can be registered under several
entries; closing it (or leaving its `with` block) removes it from the
registry again. Attribute access on both is forwarded to the wrapped metric.

`opskit.registry.metrics()` returns the process-wide `Registry` (or the one
passed in); iterating it yields static entries followed by dynamic ones, and
`static_metrics()` / `dynamic_metrics()` list each kind. Each `MetricEntry`
has a `name`, `description`, `metadata` (an `opskit.metadata.Metadata`
mapping) and a formatter. `entry.formatted(format)` renders it with
`opskit.entry.Format`:

- `Format.SIMPLE` – the plain metric name;
- `Format.PROMETHEUS` – the name followed by its metadata as labels,
  e.g. `metric{instance="a"}`.

`opskit.lazy.lazy_counter()` and `lazy_gauge()` return `Lazy` metrics that
report nothing until they are first used.

`opskit.logstats` declares the counters and gauge that the logging backend
updates (`log_create`, `log_write`, `log_drop`, `log_flush` and so on);
`log_metric_entries()` returns their entries.

## Rate limiting

```python
from opskit.ratelimit import Ratelimiter, TokenUnavailable

limiter = Ratelimiter.builder(1000, 3600).max_tokens(1000).initial_available(1000).build()
try:
    limiter.try_wait()
except TokenUnavailable as exc:
    print(f"retry in {exc.wait:.3f}s")
```

`Ratelimiter.builder(amount, interval)` returns a `Builder` that adds
`amount` tokens after each `interval` (a `timedelta` or a number of
seconds). The burst size (`max_tokens`) defaults to 1 and the starting
budget (`initial_available`) to 0. `try_wait` takes a single token or
raises `TokenUnavailable`. `rate`, `refill_interval`, `refill_amount`,
`max_tokens` and `available` report the settings, each with a `set_`
counterpart. Invalid settings raise subclasses of `RatelimitError`:
`AvailableTokensTooHigh`, `MaxTokensTooLow`, `RefillAmountTooHigh` and
`RefillIntervalTooLong`.

## Switchboard queues

`opskit.switchboard.Queues.pair(a_wakers, b_wakers, capacity)` builds one
`Queues` per waker on each side; a waker is any object with a `wake()`
method. Each endpoint sends with `try_send_to(id, item)`,
`try_send_any(item)` or `try_send_all(item)`, receives `TrackedItem`s
(carrying `sender` and `inner`) with `try_recv` or `try_recv_all`, and calls
`wake` to notify the receivers it has sent to since the last wake. A full
queue raises `QueueFull`, whose `item` hands the item back.

## Ring logging

```python
import logging
from opskit.log_outputs import Stdout
from opskit.ringlog import LogBuilder

drain = LogBuilder().output(Stdout()).build().start()
logging.getLogger("app").warning("disk almost full")
drain.flush()
```

`opskit.ringlog.LogBuilder` builds a `RingLog` writing to one output, such
as `opskit.log_outputs.Stdout`, `Stderr` or `FileOutput` (which rotates the
active file to a backup path once it reaches a size limit). `RingLog.start`
attaches it to a `logging` logger (the root logger by default) and returns
the drain; call the drain's `flush` periodically, away from any
latency-sensitive path. When the queue (`log_queue_depth`, default 4096) is
full, new records are dropped.

`opskit.ringlog_multi.MultiLogBuilder` routes records by logger name to
separate logs, with a default for everything else; `SamplingLogBuilder`
keeps one in every N records (100 by default); `opskit.ringlog.NopLogBuilder`
discards everything. Lines are formatted by `opskit.logformat.default_format`
(`<time> <LEVEL> [<logger>] <message>`) or the more compact `klog_format`
(`<time> <message>`).

## Demo

```
opskit-logdemo single
opskit-logdemo multi --directory /tmp
```

`single` writes a message at each level to standard output through a drain
flushed from a background thread. `multi` also routes records from the
`command` logger to `command.log` in the given directory and drops those
from the `noplog` logger. Both accept `--duration` in seconds.

## What it does not do

opskit keeps metrics in memory only: it has no histogram metric type and no
exporter or HTTP endpoint. Publishing the registry's values to a monitoring
system is left to the application.