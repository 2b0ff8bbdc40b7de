"""Ring logs that route records by target or sample them."""

from __future__ import annotations

import itertools
import logging
import threading

from .log_outputs import Drain, Output
from .logformat import FormatFunction
from .logstats import LOG_SKIP
from .ringlog import LevelFilter, LogBuilder, QueueLogger, RingLog


class _MultiLogger:
    """Routes each record to the log registered for its logger name."""

    def __init__(self, default, targets: dict, level_filter: LevelFilter) -> None:
        self.default = default
        self.targets = targets
        self.level_filter = level_filter

    def _target(self, name: str):
        return self.targets.get(name, self.default)

    def enabled(self, level: int, target: str = "") -> bool:
        if not self.level_filter.allows(level):
            return False
        log = self._target(target)
        return log is not None and log.enabled(level)

    def emit(self, record: logging.LogRecord) -> None:
        if not self.level_filter.allows(record.levelno):
            return
        log = self._target(record.name)
        if log is not None and log.enabled(record.levelno):
            log.emit(record)


class _MultiLogDrain(Drain):
    """Flushes the default drain and then every target's drain."""

    def __init__(self, default: Drain | None, targets: dict[str, Drain]) -> None:
        self.default = default
        self.targets = targets

    def flush(self) -> None:
        if self.default is not None:
            self.default.flush()
        for drain in self.targets.values():
            drain.flush()


class MultiLogBuilder:
    """Builds a `RingLog` routing records by their logger name.

    Records whose logger name matches a target go to that target's log;
    all others go to the default log, or are dropped when there is none.
    """

    def __init__(self) -> None:
        self._default: RingLog | None = None
        self._targets: dict[str, RingLog] = {}
        self._level_filter = LevelFilter.TRACE

    def default(self, log: RingLog) -> MultiLogBuilder:
        """Set the log receiving records that match no target."""
        self._default = log
        return self

    def add_target(self, target: str, log: RingLog) -> MultiLogBuilder:
        """Route records from the logger named `target` to `log`."""
        self._targets[target] = log
        return self

    def level_filter(self, level: LevelFilter) -> MultiLogBuilder:
        """Set the most verbose level passed on to any target."""
        self._level_filter = level
        return self

    def build(self) -> RingLog:
        default = self._default
        logger = _MultiLogger(
            default.logger if default is not None else None,
            {name: log.logger for name, log in self._targets.items()},
            self._level_filter,
        )
        drain = _MultiLogDrain(
            default.drain if default is not None else None,
            {name: log.drain for name, log in self._targets.items()},
        )
        return RingLog(logger, drain, self._level_filter)


class _SamplingLogger:
    """Passes on one record in every `sample`, counting from the first."""

    def __init__(self, logger: QueueLogger, sample: int) -> None:
        self.logger = logger
        self.sample = sample
        self._counter = itertools.count(1)
        self._lock = threading.Lock()

    @property
    def level_filter(self) -> LevelFilter:
        return self.logger.level_filter

    def enabled(self, level: int) -> bool:
        return self.level_filter.allows(level)

    def emit(self, record: logging.LogRecord) -> None:
        if not self.enabled(record.levelno):
            return
        with self._lock:
            count = next(self._counter)
        if count % self.sample == 0:
            self.logger.emit(record)
        else:
            LOG_SKIP.increment()


class SamplingLogBuilder:
    """Builds a `RingLog` sending one in N records to a single output."""

    def __init__(self) -> None:
        self._log_builder = LogBuilder()
        self._sample = 100

    def log_queue_depth(self, messages: int) -> SamplingLogBuilder:
        """Set how many messages may wait in the queue before being dropped."""
        self._log_builder.log_queue_depth(messages)
        return self

    def single_message_size(self, size: int) -> SamplingLogBuilder:
        """Record the expected size in bytes of a single message."""
        self._log_builder.single_message_size(size)
        return self

    def output(self, output: Output) -> SamplingLogBuilder:
        """Set the output the drain writes to."""
        self._log_builder.output(output)
        return self

    def format(self, format: FormatFunction) -> SamplingLogBuilder:
        """Set the function that turns a record into a line."""
        self._log_builder.format(format)
        return self

    def sample(self, sample: int) -> SamplingLogBuilder:
        """Log one record in every `sample`."""
        if sample < 1:
            raise ValueError("sample must be at least 1")
        self._sample = sample
        return self

    def build(self) -> RingLog:
        log = self._log_builder.build()
        logger = _SamplingLogger(log.logger, self._sample)
        return RingLog(logger, log.drain, logger.level_filter)