"""Functions turning a log record into a line of text."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone

FormatFunction = Callable[[datetime, logging.LogRecord], str]

_LEVEL_NAMES = {"WARNING": "WARN"}


def _timestamp(now: datetime) -> str:
    """RFC 3339 in UTC with millisecond precision and a numeric offset."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds")


def _level(record: logging.LogRecord) -> str:
    return _LEVEL_NAMES.get(record.levelname, record.levelname)


def default_format(now: datetime, record: logging.LogRecord) -> str:
    """Format as `<time> <LEVEL> [<logger>] <message>` plus a newline."""
    module = record.name or "<unnamed>"
    return f"{_timestamp(now)} {_level(record)} [{module}] {record.getMessage()}\n"


def klog_format(now: datetime, record: logging.LogRecord) -> str:
    """Format as `<time> <message>` plus a newline."""
    return f"{_timestamp(now)} {record.getMessage()}\n"