from __future__ import annotations

from tcodec.core.stream import Sink

MAX_WRAP = 1_000_000


class LineWrapper:
    """
    Column counter for encoders that wrap their output.

    - wrap_cols == 0: no line breaks, a single newline at the end
    - wrap_cols  > 0: a newline after every wrap_cols symbols, plus a final
      newline only if the last line is not empty
    """

    def __init__(self, sink: Sink, wrap_cols: int) -> None:
        if wrap_cols < 0 or wrap_cols > MAX_WRAP:
            raise ValueError(f"wrap fuori range: {wrap_cols} (0..{MAX_WRAP})")
        self.sink = sink
        self.wrap_cols = int(wrap_cols)
        self.column = 0

    def write(self, symbols: bytes) -> None:
        if not symbols:
            return
        if self.wrap_cols == 0:
            self.sink.write(symbols)
            self.column += len(symbols)
            return

        pos = 0
        n = len(symbols)
        while pos < n:
            room = self.wrap_cols - self.column
            piece = symbols[pos : pos + room]
            self.sink.write(piece)
            self.column += len(piece)
            pos += len(piece)
            if self.column >= self.wrap_cols:
                self.sink.write(b"\n")
                self.column = 0

    def finish(self) -> None:
        if self.wrap_cols == 0 or self.column > 0:
            self.sink.write(b"\n")
        self.column = 0
