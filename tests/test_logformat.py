import logging
from datetime import datetime, timedelta, timezone

from opskit.logformat import default_format, klog_format

NOW = datetime(2021, 6, 1, 12, 34, 56, 789000, tzinfo=timezone.utc)


def _record(levelno=logging.INFO, name="app.module", msg="hello %s", args=("world",)):
    return logging.makeLogRecord(
        {
            "name": name,
            "levelno": levelno,
            "levelname": logging.getLevelName(levelno),
            "msg": msg,
            "args": args,
        }
    )


def test_default_format_line():
    line = default_format(NOW, _record())
    assert line == "2021-06-01T12:34:56.789+00:00 INFO [app.module] hello world\n"


def test_klog_format_line():
    line = klog_format(NOW, _record())
    assert line == "2021-06-01T12:34:56.789+00:00 hello world\n"


def test_warning_is_written_as_warn():
    line = default_format(NOW, _record(levelno=logging.WARNING))
    assert line.split(" ")[1] == "WARN"


def test_empty_logger_name_is_unnamed():
    line = default_format(NOW, _record(name=""))
    assert "[<unnamed>]" in line


def test_naive_time_is_treated_as_utc():
    naive = NOW.replace(tzinfo=None)
    assert default_format(naive, _record()) == default_format(NOW, _record())


def test_other_offsets_are_converted_to_utc():
    shifted = NOW.astimezone(timezone(timedelta(hours=2)))
    assert klog_format(shifted, _record()) == klog_format(NOW, _record())


def test_lines_end_with_single_newline():
    for fmt in (default_format, klog_format):
        line = fmt(NOW, _record(msg="plain", args=()))
        assert line.endswith("plain\n")
        assert line.count("\n") == 1