"""Grade-1 six-dot Braille.

Cells are 6-bit dot patterns (bit 0 = dot 1 ... bit 5 = dot 6):

    1 4
    2 5
    3 6

Output is either a Unicode cell (U+2800 + pattern) or, in text mode, six
characters 'o'/'.' for dots 1,4,2,5,3,6.

Stateful signs, tracked by both encoder and decoder:
  - NUMBER_SIGN before a digit run: A..J read as 1..0 until a character
    other than a digit or a blank
  - CAPITAL_SIGN before one uppercase letter (also ends number mode)
  - LETTER_SIGN before a lowercase a..j that follows a digit run
"""

from __future__ import annotations

import io
from typing import TextIO

from tcodec.core.diag import Warn, describe_char, stderr_warn
from tcodec.core.stream import CancelToken, TextSink, iter_chars
from tcodec.layers.substitution import first_wins

BRAILLE_BASE = 0x2800
BRAILLE_LAST = BRAILLE_BASE + 0x3F

CAPITAL_SIGN = 0x20  # dot 6
NUMBER_SIGN = 0x3C  # dots 3,4,5,6
LETTER_SIGN = 0x30  # dots 5,6

LETTER_CELLS: dict[str, int] = {
    "A": 0x01, "B": 0x03, "C": 0x09, "D": 0x19, "E": 0x11, "F": 0x0B,
    "G": 0x1B, "H": 0x13, "I": 0x0A, "J": 0x1A, "K": 0x05, "L": 0x07,
    "M": 0x0D, "N": 0x1D, "O": 0x15, "P": 0x0F, "Q": 0x1F, "R": 0x17,
    "S": 0x0E, "T": 0x1E, "U": 0x25, "V": 0x27, "W": 0x3A, "X": 0x2D,
    "Y": 0x3D, "Z": 0x35,
}  # fmt: skip

# '(' and ')' share a cell; '(' comes first and is the decoded form
PUNCT_CELLS: dict[str, int] = {
    ".": 0x2C, ",": 0x02, "?": 0x26, "!": 0x16, ";": 0x06, ":": 0x12,
    "-": 0x24, "'": 0x04, '"': 0x10, "(": 0x2E, ")": 0x2E, "/": 0x0C,
    " ": 0x00,
}  # fmt: skip

DIGITS = "0123456789"
DIGIT_LETTERS = "JABCDEFGHI"  # 0..9 -> letter sharing the cell
LETTER_DIGITS = {letter: str(d) for d, letter in enumerate(DIGIT_LETTERS)}

CHAR_CELLS: dict[str, int] = {**LETTER_CELLS, **PUNCT_CELLS}
CELL_CHARS: dict[int, str] = first_wins(CHAR_CELLS.items())

# dot order of the text form: 1 4 2 5 3 6
TEXT_DOT_BITS = (0x01, 0x08, 0x02, 0x10, 0x04, 0x20)
TEXT_DOT_ON = "o"
TEXT_DOT_OFF = "."


def cell_to_text(cell: int) -> str:
    return "".join(TEXT_DOT_ON if cell & bit else TEXT_DOT_OFF for bit in TEXT_DOT_BITS)


def text_to_cell(text: str) -> int:
    if len(text) != 6:
        raise ValueError(f"cella testuale di {len(text)} caratteri (attesi 6)")
    cell = 0
    for ch, bit in zip(text, TEXT_DOT_BITS):
        if ch == TEXT_DOT_ON:
            cell |= bit
    return cell


def render_cell(cell: int, text_mode: bool) -> str:
    return cell_to_text(cell) if text_mode else chr(BRAILLE_BASE + cell)


def encode_stream(
    src: TextIO,
    dst: TextIO,
    *,
    text_mode: bool = False,
    warn: Warn | None = None,
    cancel: CancelToken | None = None,
) -> None:
    warn = warn or stderr_warn
    sink = TextSink(dst)
    number_mode = False

    def put(cell: int) -> None:
        sink.write(render_cell(cell, text_mode))

    for c in iter_chars(src, cancel):
        if c == "\n":
            sink.write("\n")
            number_mode = False
            continue
        if c == "\r":
            continue

        if c in DIGITS:
            if not number_mode:
                put(NUMBER_SIGN)
                number_mode = True
            put(LETTER_CELLS[DIGIT_LETTERS[int(c)]])
            continue

        up = c.upper()
        cell = CHAR_CELLS.get(up) if len(up) == 1 else None
        if cell is None:
            warn(f"braille: skipping unsupported character {describe_char(c)}")
            continue

        if up in LETTER_CELLS:
            if c.isupper():
                put(CAPITAL_SIGN)
            elif number_mode and up in LETTER_DIGITS:
                put(LETTER_SIGN)
            number_mode = False
        elif c != " ":
            number_mode = False
        put(cell)

    sink.end_line()
    sink.flush()


class _CellDecoder:
    """Number/capital state machine shared by the Unicode and text readers."""

    def __init__(self, sink: TextSink, warn: Warn) -> None:
        self.sink = sink
        self.warn = warn
        self.number_mode = False
        self.capital_next = False

    def reset(self) -> None:
        self.number_mode = False
        self.capital_next = False

    def cell(self, cell: int) -> None:
        if cell == NUMBER_SIGN:
            self.number_mode = True
            return
        if cell == CAPITAL_SIGN:
            self.capital_next = True
            self.number_mode = False
            return
        if cell == LETTER_SIGN:
            self.number_mode = False
            return

        ch = CELL_CHARS.get(cell)
        if ch is None:
            self.warn(f"braille: unknown cell {cell_to_text(cell)} (0x{cell:02X})")
            ch = "?"
        elif self.number_mode and ch in LETTER_DIGITS:
            ch = LETTER_DIGITS[ch]
        elif ch in LETTER_CELLS and not self.capital_next:
            ch = ch.lower()

        self.sink.write(ch)
        if not (ch.isdigit() or ch == " "):
            self.number_mode = False
        self.capital_next = False


def decode_stream(
    src: TextIO,
    dst: TextIO,
    *,
    text_mode: bool = False,
    warn: Warn | None = None,
    cancel: CancelToken | None = None,
) -> None:
    warn = warn or stderr_warn
    sink = TextSink(dst)
    dec = _CellDecoder(sink, warn)
    dots: list[str] = []

    def drop_partial() -> None:
        if dots:
            warn(f"braille: dropping incomplete cell {''.join(dots)!r}")
            dots.clear()

    for c in iter_chars(src, cancel):
        if c == "\n":
            drop_partial()
            sink.write("\n")
            dec.reset()
            continue

        if text_mode and c in (TEXT_DOT_ON, TEXT_DOT_OFF):
            dots.append(c)
            if len(dots) == 6:
                dec.cell(text_to_cell("".join(dots)))
                dots.clear()
        elif not text_mode and BRAILLE_BASE <= ord(c) <= BRAILLE_LAST:
            dec.cell(ord(c) - BRAILLE_BASE)
        elif c.isspace():
            continue
        else:
            warn(f"braille: ignoring invalid character {describe_char(c)}")

    drop_partial()
    sink.end_line()
    sink.flush()


def encode_text(text: str, *, text_mode: bool = False, warn: Warn | None = None) -> str:
    out = io.StringIO()
    encode_stream(io.StringIO(text), out, text_mode=text_mode, warn=warn)
    return out.getvalue()


def decode_text(text: str, *, text_mode: bool = False, warn: Warn | None = None) -> str:
    out = io.StringIO()
    decode_stream(io.StringIO(text), out, text_mode=text_mode, warn=warn)
    return out.getvalue()
