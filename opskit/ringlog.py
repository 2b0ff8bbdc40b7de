"""An asynchronous logging backend: loggers queue lines, drains write them."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from queue import Empty, Full, Queue
from typing import Protocol, Union

from .log_outputs import Drain, Output
from .logformat import FormatFunction, default_format
from .logstats import (
    LOG_CREATE,
    LOG_CREATE_EX,
    LOG_CURR,
    LOG_DESTROY,
    LOG_DROP,
    LOG_DROP_BYTE,
    LOG_FLUSH,
    LOG_FLUSH_EX,
    LOG_WRITE,
    LOG_WRITE_BYTE,
    LOG_WRITE_EX,
)

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

_log = logging.getLogger(__name__)


class LevelFilter(enum.IntEnum):
    """The most verbose level a log passes on; OFF passes nothing."""

    OFF = 0
    ERROR = 1
    WARN = 2
    INFO = 3
    DEBUG = 4
    TRACE = 5

    @property
    def python_level(self) -> int:
        """The standard logging level matching this filter."""
        return _PYTHON_LEVELS[self]

    def allows(self, levelno: int) -> bool:
        """Return True if a record at `levelno` passes this filter."""
        return _severity(levelno) <= self


_PYTHON_LEVELS = {
    LevelFilter.OFF: logging.CRITICAL + 1,
    LevelFilter.ERROR: logging.ERROR,
    LevelFilter.WARN: logging.WARNING,
    LevelFilter.INFO: logging.INFO,
    LevelFilter.DEBUG: logging.DEBUG,
    LevelFilter.TRACE: TRACE,
}


def _severity(levelno: int) -> LevelFilter:
    if levelno >= logging.ERROR:
        return LevelFilter.ERROR
    if levelno >= logging.WARNING:
        return LevelFilter.WARN
    if levelno >= logging.INFO:
        return LevelFilter.INFO
    if levelno >= logging.DEBUG:
        return LevelFilter.DEBUG
    return LevelFilter.TRACE


class _Log(Protocol):
    def enabled(self, level: int) -> bool: ...

    def emit(self, record: logging.LogRecord) -> None: ...


@dataclass(eq=False)
class QueueLogger:
    """Formats records and queues them without blocking.

    A record is dropped when the queue is full, preserving the history
    that led up to the point where messages began to be dropped.
    """

    pending: Queue
    message_size: int
    format: FormatFunction
    level_filter: LevelFilter

    def enabled(self, level: int) -> bool:
        """Return True if records at `level` are logged."""
        return self.level_filter.allows(level)

    def emit(self, record: logging.LogRecord) -> None:
        """Format `record` and queue it for the drain."""
        if not self.enabled(record.levelno):
            return
        data = self.format(datetime.now(timezone.utc), record).encode("utf-8")
        try:
            self.pending.put_nowait(data)
        except Full:
            LOG_DROP.increment()
            LOG_DROP_BYTE.add(len(data))
            return
        LOG_WRITE.increment()
        LOG_WRITE_BYTE.add(len(data))

    def __del__(self) -> None:
        LOG_DESTROY.increment()
        LOG_CURR.decrement()


def _write_all(output: Output, data: bytes) -> None:
    view = memoryview(data)
    while view:
        written = output.write(bytes(view))
        if written is None:
            return
        if written <= 0:
            raise OSError("failed to write whole buffer")
        view = view[written:]


@dataclass(eq=False)
class LogDrain(Drain):
    """Moves queued lines to a single output."""

    pending: Queue
    output: Output

    def flush(self) -> None:
        """Write every queued line, then flush the output."""
        LOG_FLUSH.increment()
        while True:
            try:
                data = self.pending.get_nowait()
            except Empty:
                break
            try:
                _write_all(self.output, data)
            except OSError as exc:
                LOG_WRITE_EX.increment()
                _log.warning("failed write to log buffer: %s", exc)
                raise
        try:
            self.output.flush()
        except OSError as exc:
            LOG_FLUSH_EX.increment()
            _log.warning("failed to flush log: %s", exc)
            raise


class NopLogger:
    """A logger that drops every record."""

    level_filter = LevelFilter.OFF

    def enabled(self, level: int) -> bool:
        return False

    def emit(self, record: logging.LogRecord) -> None:
        return None


class NopLogDrain(Drain):
    """A drain with nothing to do."""

    def flush(self) -> None:
        return None


class _RingLogHandler(logging.Handler):
    def __init__(self, log: _Log) -> None:
        super().__init__()
        self.log = log

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.log.emit(record)
        except Exception:
            self.handleError(record)


@dataclass(eq=False)
class RingLog:
    """A logger paired with the drain that empties its queue."""

    logger: _Log
    drain: Drain
    level_filter: LevelFilter = field(default=LevelFilter.TRACE)

    def start(self, logger: Union[logging.Logger, str, None] = None) -> Drain:
        """Attach to `logger` (the root logger by default) and return the drain.

        The drain must be flushed periodically, away from any critical path.
        """
        target = logger if isinstance(logger, logging.Logger) else logging.getLogger(logger)
        if any(isinstance(h, _RingLogHandler) for h in target.handlers):
            raise RuntimeError("failed to start logger: a ring log is already attached")
        target.addHandler(_RingLogHandler(self.logger))
        target.setLevel(self.level_filter.python_level)
        return self.drain


class LogBuilder:
    """Builds a `RingLog` that sends every record to a single output."""

    def __init__(self) -> None:
        self._log_queue_depth = 4096
        self._single_message_size = 1024
        self._format: FormatFunction = default_format
        self._level_filter = LevelFilter.TRACE
        self._output: Output | None = None

    def log_queue_depth(self, messages: int) -> LogBuilder:
        """Set how many messages may wait in the queue before being dropped."""
        if messages < 1:
            raise ValueError("log queue depth must be at least 1")
        self._log_queue_depth = messages
        return self

    def single_message_size(self, size: int) -> LogBuilder:
        """Record the expected size in bytes of a single message."""
        if size < 0:
            raise ValueError("message size cannot be negative")
        self._single_message_size = size
        return self

    def output(self, output: Output) -> LogBuilder:
        """Set the output the drain writes to."""
        self._output = output
        return self

    def format(self, format: FormatFunction) -> LogBuilder:
        """Set the function that turns a record into a line."""
        self._format = format
        return self

    def build(self) -> RingLog:
        """Construct the log; an output must have been set."""
        LOG_CREATE.increment()
        LOG_CURR.increment()
        if self._output is None:
            LOG_CREATE_EX.increment()
            raise ValueError("no output configured")
        pending: Queue = Queue(maxsize=self._log_queue_depth)
        logger = QueueLogger(
            pending, self._single_message_size, self._format, self._level_filter
        )
        drain = LogDrain(pending, self._output)
        return RingLog(logger, drain, logger.level_filter)


class NopLogBuilder:
    """Builds a `RingLog` that drops every record."""

    def build(self) -> RingLog:
        logger = NopLogger()
        return RingLog(logger, NopLogDrain(), logger.level_filter)