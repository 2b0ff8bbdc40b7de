"""Logging destinations and the drain interface that feeds them."""

from __future__ import annotations

import os
import sys
from abc import ABC, abstractmethod
from typing import IO, Any, Union

from .logstats import LOG_OPEN, LOG_OPEN_EX

PathLike = Union[str, "os.PathLike[str]"]


class Output(ABC):
    """A logging destination such as standard output or a file."""

    @abstractmethod
    def write(self, data: bytes) -> int:
        """Write `data`, returning the number of bytes accepted."""

    @abstractmethod
    def flush(self) -> None:
        """Push buffered data to the destination."""


class Drain(ABC):
    """Moves queued log messages to an `Output`.

    `flush` must be called periodically, away from any critical path, so
    the queue has room for new messages.
    """

    @abstractmethod
    def flush(self) -> None:
        """Write all queued messages and flush the output."""


class _StreamOutput(Output):
    """Buffers bytes and writes them to a text stream on flush."""

    def __init__(self, stream: IO[Any]) -> None:
        self._stream = stream
        self._buffer = bytearray()

    def write(self, data: bytes) -> int:
        self._buffer += data
        return len(data)

    def flush(self) -> None:
        if self._buffer:
            data = bytes(self._buffer)
            self._buffer.clear()
            binary = getattr(self._stream, "buffer", None)
            if binary is not None:
                self._stream.flush()
                binary.write(data)
                binary.flush()
            else:
                self._stream.write(data.decode("utf-8", errors="replace"))
        self._stream.flush()


class Stdout(_StreamOutput):
    """An output that writes to standard output."""

    def __init__(self) -> None:
        super().__init__(sys.stdout)


class Stderr(_StreamOutput):
    """An output that writes to standard error."""

    def __init__(self) -> None:
        super().__init__(sys.stderr)


def _open(path: PathLike) -> IO[bytes]:
    LOG_OPEN.increment()
    try:
        return open(path, "wb")
    except OSError:
        LOG_OPEN_EX.increment()
        raise


class FileOutput(Output):
    """A file output rotated to a backup path once it grows too large.

    The active file is created (or truncated) when the output is made.
    After each flush, if the active file has reached `max_size` bytes it is
    renamed to `backup` and a fresh active file is started.
    """

    def __init__(self, active: PathLike, backup: PathLike, max_size: int) -> None:
        self._file = _open(active)
        self._active = os.fspath(active)
        self._backup = os.fspath(backup)
        self._max_size = max_size

    def _size(self) -> int:
        return os.fstat(self._file.fileno()).st_size

    def _rotate(self) -> None:
        if self._size() >= self._max_size:
            self._file.close()
            os.replace(self._active, self._backup)
            self._file = _open(self._active)

    def write(self, data: bytes) -> int:
        return self._file.write(data)

    def flush(self) -> None:
        self._file.flush()
        self._rotate()

    def close(self) -> None:
        """Flush and close the active file."""
        if not self._file.closed:
            self._file.flush()
            self._file.close()

    def __enter__(self) -> FileOutput:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()