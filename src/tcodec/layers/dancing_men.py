"""Dancing men: one stick figure per letter.

Two renderings:
  - figures: three text lines per letter, separated by a blank line;
    a space is a "[SPACE]" block, a newline a "[NEWLINE]" block
  - compact: one token per letter on a single line, separated by a space;
    a space is "[SP]", a newline "[NL]"

NOTA: the compact tokens are not injective (A/V, B/U, C/E/L, F/P, M/W,
O/Q share a token). Decoding picks the first letter in alphabet order.
"""

from __future__ import annotations

import io
from typing import TextIO

from tcodec.core.diag import Warn, describe_char, stderr_warn
from tcodec.core.stream import CancelToken, TextSink, iter_chars, iter_lines
from tcodec.layers.substitution import first_wins

FIGURES: dict[str, str] = {
    "A": " O \n/|\\\n/ \\",
    "B": " O \n/||\n/ \\",
    "C": " O \n/| \n/ \\",
    "D": " O \n |||\n/ \\",
    "E": " O \n/|_\n/ \\",
    "F": " O \n/|_\n/  ",
    "G": " O \n/|+\n/ \\",
    "H": " O \n||||\n/ \\",
    "I": " O \n | \n/ \\",
    "J": " O \n  |\n/ \\",
    "K": " O \n/|<\n/ \\",
    "L": " O \n/| \n/_\\",
    "M": " O \n/|\\\\\n/ \\",
    "N": " O \n/|/\n/ \\",
    "O": " O \n/O\\\n/ \\",
    "P": " O \n/|^\n/ \\",
    "Q": " O \n/O\\\n/_\\",
    "R": " O \n/|>\n/ \\",
    "S": " O \n/|~\n/ \\",
    "T": " O \n-|-\n/ \\",
    "U": " O \n/||\n\\_/",
    "V": " O \n/|\\\n \\ ",
    "W": " O \n/|\\\\\n\\ /",
    "X": " O \n<|>\n/ \\",
    "Y": " O \n\\|/\n | ",
    "Z": " O \n/|/\n/_\\",
}

COMPACT: dict[str, str] = {
    "A": "O/|\\", "B": "O/||", "C": "O/|_", "D": "O|||", "E": "O/|_",
    "F": "O/|^", "G": "O/|+", "H": "O||||", "I": "O_|_", "J": "O__|",
    "K": "O/|<", "L": "O/|_", "M": "O/|\\\\", "N": "O/|/", "O": "O/O\\",
    "P": "O/|^", "Q": "O/O\\", "R": "O/|>", "S": "O/|~", "T": "O-|-",
    "U": "O/||", "V": "O/|\\", "W": "O/|\\\\", "X": "O<|>", "Y": "O\\|/",
    "Z": "O/|/",
}  # fmt: skip

SPACE_BLOCK = "[SPACE]"
NEWLINE_BLOCK = "[NEWLINE]"
SPACE_TOKEN = "[SP]"
NEWLINE_TOKEN = "[NL]"


def _figure_key(figure: str | list[str]) -> tuple[str, ...]:
    # trailing blanks are not significant (editors strip them)
    lines = figure.split("\n") if isinstance(figure, str) else figure
    return tuple(ln.rstrip() for ln in lines)


FIGURE_LETTERS: dict[tuple[str, ...], str] = first_wins(
    (letter, _figure_key(fig)) for letter, fig in FIGURES.items()
)
COMPACT_LETTERS: dict[str, str] = first_wins(COMPACT.items())


def encode_stream(
    src: TextIO,
    dst: TextIO,
    *,
    compact: bool = False,
    warn: Warn | None = None,
    cancel: CancelToken | None = None,
) -> None:
    warn = warn or stderr_warn
    sink = TextSink(dst)
    table = COMPACT if compact else FIGURES
    first = True

    for c in iter_chars(src, cancel):
        if c == "\r":
            continue
        up = c.upper()
        if c == " ":
            item = SPACE_TOKEN if compact else SPACE_BLOCK
        elif c == "\n":
            item = NEWLINE_TOKEN if compact else NEWLINE_BLOCK
        elif up in table:
            item = table[up]
        else:
            warn(f"dancing-men: skipping unsupported character {describe_char(c)}")
            continue

        if not first:
            sink.write(" " if compact else "\n\n")
        sink.write(item)
        first = False

    sink.write("\n")
    sink.flush()


def _decode_figures(src: TextIO, sink: TextSink, warn: Warn, cancel: CancelToken | None) -> None:
    fig: list[str] = []

    def flush() -> None:
        if not fig:
            return
        letter = FIGURE_LETTERS.get(_figure_key(fig))
        if letter is None:
            shown = "\n".join(fig)
            warn(f"dancing-men: unknown figure {shown!r}")
            letter = "?"
        sink.write(letter)
        fig.clear()

    for raw in iter_lines(src, cancel):
        line = raw.rstrip("\r\n")
        tag = line.strip()
        if not tag:
            flush()
        elif tag == SPACE_BLOCK:
            flush()
            sink.write(" ")
        elif tag == NEWLINE_BLOCK:
            flush()
            sink.write("\n")
        else:
            fig.append(line)
    flush()


def _decode_compact(src: TextIO, sink: TextSink, warn: Warn, cancel: CancelToken | None) -> None:
    tok: list[str] = []

    def flush() -> None:
        if not tok:
            return
        t = "".join(tok)
        tok.clear()
        if t == SPACE_TOKEN:
            sink.write(" ")
        elif t == NEWLINE_TOKEN:
            sink.write("\n")
        else:
            letter = COMPACT_LETTERS.get(t)
            if letter is None:
                warn(f"dancing-men: unknown token {t!r}")
                letter = "?"
            sink.write(letter)

    for c in iter_chars(src, cancel):
        if c.isspace():
            flush()
        else:
            tok.append(c)
    flush()


def decode_stream(
    src: TextIO,
    dst: TextIO,
    *,
    compact: bool = False,
    warn: Warn | None = None,
    cancel: CancelToken | None = None,
) -> None:
    warn = warn or stderr_warn
    sink = TextSink(dst)
    if compact:
        _decode_compact(src, sink, warn, cancel)
    else:
        _decode_figures(src, sink, warn, cancel)
    sink.flush()


def encode_text(text: str, *, compact: bool = False, warn: Warn | None = None) -> str:
    out = io.StringIO()
    encode_stream(io.StringIO(text), out, compact=compact, warn=warn)
    return out.getvalue()


def decode_text(text: str, *, compact: bool = False, warn: Warn | None = None) -> str:
    out = io.StringIO()
    decode_stream(io.StringIO(text), out, compact=compact, warn=warn)
    return out.getvalue()
