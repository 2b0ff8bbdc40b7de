"""Small demonstrations of the ring logging backend."""

from __future__ import annotations

import argparse
import logging
import os
import threading
import time
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Union

from .log_outputs import FileOutput, Stdout
from .logformat import klog_format
from .ringlog import TRACE, LogBuilder, NopLogBuilder, RingLog
from .ringlog_multi import MultiLogBuilder

_log = logging.getLogger(__name__)

_FLUSH_INTERVAL = 0.1


@contextmanager
def _running(log: RingLog) -> Iterator[None]:
    """Attach `log` to the root logger and flush it from a background thread."""
    root = logging.getLogger()
    saved_level = root.level
    saved_handlers = list(root.handlers)
    drain = log.start(root)
    stop = threading.Event()

    def pump() -> None:
        while True:
            try:
                drain.flush()
            except OSError:
                pass
            if stop.wait(_FLUSH_INTERVAL):
                return

    thread = threading.Thread(target=pump, name="log-drain", daemon=True)
    thread.start()
    try:
        yield
    finally:
        stop.set()
        thread.join()
        try:
            drain.flush()
        finally:
            for handler in list(root.handlers):
                if handler not in saved_handlers:
                    root.removeHandler(handler)
            root.setLevel(saved_level)


def _emit_levels() -> None:
    _log.error("error")
    _log.warning("warning")
    _log.info("info")
    _log.debug("debug")
    _log.log(TRACE, "trace")


def run_single(duration: float = 1.0) -> None:
    """Log one message at each level to standard output."""
    log = LogBuilder().output(Stdout()).build()
    with _running(log):
        _emit_levels()
        time.sleep(duration)


def run_multi(directory: Union[str, os.PathLike] = ".", duration: float = 1.0) -> None:
    """Route `command` records to a file, drop `noplog`, print the rest."""
    directory = Path(directory)
    default = LogBuilder().output(Stdout()).build()
    command_output = FileOutput(directory / "command.log", directory / "command.old", 100)
    try:
        command = LogBuilder().output(command_output).format(klog_format).build()
        log = (
            MultiLogBuilder()
            .default(default)
            .add_target("command", command)
            .add_target("noplog", NopLogBuilder().build())
            .build()
        )
        with _running(log):
            _emit_levels()
            logging.getLogger("command").error('"get 0" 0 0')
            logging.getLogger("noplog").error("this won't get displayed")
            time.sleep(duration)
    finally:
        command_output.close()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="opskit-logdemo", description="Demonstrate the ring logging backend."
    )
    modes = parser.add_subparsers(dest="mode", required=True)
    single = modes.add_parser("single", help="log to standard output")
    single.add_argument("--duration", type=float, default=1.0)
    multi = modes.add_parser("multi", help="route logs by target")
    multi.add_argument("--duration", type=float, default=1.0)
    multi.add_argument("--directory", default=".")
    args = parser.parse_args(argv)
    if args.mode == "single":
        run_single(args.duration)
    else:
        run_multi(args.directory, args.duration)
    return 0