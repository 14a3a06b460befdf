"""Stream plumbing shared by every codec.

- reads are chunked and mapped to StreamReadError on OSError
- writes go through Sink (StreamWriteError on OSError)
- CancelToken is checked once per unit; when set, the loop stops between
  units and raises Interrupted
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import IO, AnyStr, BinaryIO, Generic, TextIO

from tcodec.errors import Interrupted, StreamReadError, StreamWriteError

READ_CHUNK = 64 * 1024


class CancelToken:
    """Cooperative cancellation flag (set from a signal handler by the CLI)."""

    __slots__ = ("_cancelled",)

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def check(self) -> None:
        if self._cancelled:
            raise Interrupted("interrupted: output is incomplete")


def _check(cancel: CancelToken | None) -> None:
    if cancel is not None:
        cancel.check()


def _read(src: IO[AnyStr], n: int) -> AnyStr:
    try:
        return src.read(n)
    except OSError as e:
        raise StreamReadError(f"read error: {e}") from e


def iter_groups(
    src: BinaryIO, size: int, cancel: CancelToken | None = None
) -> Iterator[bytes]:
    """
    Yield non-overlapping groups of exactly ``size`` bytes; only the last one
    may be shorter. Short reads from pipes are topped up before yielding.
    """
    if size <= 0:
        raise ValueError("group size deve essere > 0")
    pending = b""
    while True:
        _check(cancel)
        chunk = _read(src, READ_CHUNK)
        if not chunk:
            break
        if pending:
            chunk = pending + chunk
        n_full = len(chunk) - (len(chunk) % size)
        for i in range(0, n_full, size):
            _check(cancel)
            yield chunk[i : i + size]
        pending = chunk[n_full:]
    if pending:
        yield pending


def iter_bytes(src: BinaryIO, cancel: CancelToken | None = None) -> Iterator[int]:
    """Yield the input one byte value at a time."""
    while True:
        _check(cancel)
        chunk = _read(src, READ_CHUNK)
        if not chunk:
            return
        for b in chunk:
            _check(cancel)
            yield b


def iter_chars(src: TextIO, cancel: CancelToken | None = None) -> Iterator[str]:
    while True:
        _check(cancel)
        chunk = _read(src, READ_CHUNK)
        if not chunk:
            return
        for c in chunk:
            _check(cancel)
            yield c


def iter_lines(src: TextIO, cancel: CancelToken | None = None) -> Iterator[str]:
    """Yield lines with their line ending (if any)."""
    while True:
        _check(cancel)
        try:
            line = src.readline()
        except OSError as e:
            raise StreamReadError(f"read error: {e}") from e
        if not line:
            return
        yield line


class Sink(Generic[AnyStr]):
    """
    Write side of a codec.

    Tracks whether the output currently ends with a newline, which the
    line-preserving text codecs need for their final-newline rule.
    """

    NEWLINE: AnyStr

    def __init__(self, dst: IO[AnyStr]) -> None:
        self.dst = dst
        self.written = 0
        self.at_line_start = True

    def write(self, data: AnyStr) -> None:
        if not data:
            return
        try:
            self.dst.write(data)
        except OSError as e:
            raise StreamWriteError(f"write error: {e}") from e
        self.written += len(data)
        self.at_line_start = data[-1:] == self.NEWLINE

    def end_line(self) -> None:
        """Terminate the output with exactly one newline, unless it already has one."""
        if self.written == 0 or not self.at_line_start:
            self.write(self.NEWLINE)

    def flush(self) -> None:
        try:
            self.dst.flush()
        except OSError as e:
            raise StreamWriteError(f"write error: {e}") from e


class BinarySink(Sink[bytes]):
    NEWLINE = b"\n"


class TextSink(Sink[str]):
    NEWLINE = "\n"
