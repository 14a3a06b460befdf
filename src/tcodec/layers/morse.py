"""International Morse code.

Encode: symbols separated by ``char_sep`` (default " "), words by
``word_sep`` (default " / "). Runs of blanks collapse into one word
separator; newlines are kept.

Decode: blanks end a symbol, the word marks ('/' by default) end a symbol
and become a space, newlines are kept. Unknown symbols decode to '?'.
"""

from __future__ import annotations

import io
from typing import TextIO

from tcodec.core.diag import Warn, describe_char, stderr_warn
from tcodec.core.stream import CancelToken, TextSink, iter_chars
from tcodec.errors import UsageError
from tcodec.layers.substitution import first_wins

MORSE_TABLE: dict[str, str] = {
    # letters
    "A": ".-", "B": "-...", "C": "-.-.", "D": "-..", "E": ".", "F": "..-.",
    "G": "--.", "H": "....", "I": "..", "J": ".---", "K": "-.-", "L": ".-..",
    "M": "--", "N": "-.", "O": "---", "P": ".--.", "Q": "--.-", "R": ".-.",
    "S": "...", "T": "-", "U": "..-", "V": "...-", "W": ".--", "X": "-..-",
    "Y": "-.--", "Z": "--..",
    # digits
    "0": "-----", "1": ".----", "2": "..---", "3": "...--", "4": "....-",
    "5": ".....", "6": "-....", "7": "--...", "8": "---..", "9": "----.",
    # punctuation
    ".": ".-.-.-", ",": "--..--", "?": "..--..", "'": ".----.", "!": "-.-.--",
    "/": "-..-.", "(": "-.--.", ")": "-.--.-", "&": ".-...", ":": "---...",
    ";": "-.-.-.", "=": "-...-", "+": ".-.-.", "-": "-....-", "_": "..--.-",
    '"': ".-..-.", "$": "...-..-", "@": ".--.-.",
}  # fmt: skip

REVERSE_TABLE: dict[str, str] = first_wins(MORSE_TABLE.items())

DEFAULT_CHAR_SEP = " "
DEFAULT_WORD_SEP = " / "
MORSE_MARKS = frozenset(".-")


def validate_separators(char_sep: str, word_sep: str) -> None:
    for name, sep in (("separator", char_sep), ("word separator", word_sep)):
        if not sep:
            raise UsageError(f"morse: {name} must not be empty")
        if MORSE_MARKS & set(sep):
            raise UsageError(f"morse: {name} {sep!r} must not contain '.' or '-'")
        if "\n" in sep:
            raise UsageError(f"morse: {name} must not contain a newline")
    marks = word_sep.strip()
    if not marks:
        raise UsageError("morse: word separator needs a visible mark such as '/'")
    if set(char_sep) & set(marks):
        raise UsageError(
            f"morse: separator {char_sep!r} shares characters with word separator {word_sep!r}"
        )


def encode_stream(
    src: TextIO,
    dst: TextIO,
    *,
    char_sep: str = DEFAULT_CHAR_SEP,
    word_sep: str = DEFAULT_WORD_SEP,
    warn: Warn | None = None,
    cancel: CancelToken | None = None,
) -> None:
    validate_separators(char_sep, word_sep)
    warn = warn or stderr_warn
    sink = TextSink(dst)
    in_word = False  # a symbol was written on this line
    pending_gap = False  # blank seen after a word, separator not written yet

    for c in iter_chars(src, cancel):
        if c == "\n":
            sink.write("\n")
            in_word = False
            pending_gap = False
            continue
        if c == "\r":
            continue
        if c.isspace():
            pending_gap = in_word
            continue

        code = MORSE_TABLE.get(c.upper())
        if code is None:
            warn(f"morse: skipping unsupported character {describe_char(c)}")
            continue
        if pending_gap:
            sink.write(word_sep)
        elif in_word:
            sink.write(char_sep)
        sink.write(code)
        in_word = True
        pending_gap = False

    sink.end_line()
    sink.flush()


def decode_stream(
    src: TextIO,
    dst: TextIO,
    *,
    char_sep: str = DEFAULT_CHAR_SEP,
    word_sep: str = DEFAULT_WORD_SEP,
    warn: Warn | None = None,
    cancel: CancelToken | None = None,
) -> None:
    validate_separators(char_sep, word_sep)
    warn = warn or stderr_warn
    sink = TextSink(dst)
    word_marks = set(word_sep.strip())
    symbol_breaks = (set(" \t") | set(char_sep)) - word_marks
    buf: list[str] = []
    gap = False  # a word space was just written

    def flush() -> None:
        nonlocal gap
        if not buf:
            return
        sym = "".join(buf)
        buf.clear()
        ch = REVERSE_TABLE.get(sym)
        if ch is None:
            warn(f"morse: unknown symbol {sym!r}")
            ch = "?"
        sink.write(ch)
        gap = False

    for c in iter_chars(src, cancel):
        if c in MORSE_MARKS:
            buf.append(c)
        elif c in word_marks:
            flush()
            # "//" or a multi-mark separator is still one word gap
            if not gap:
                sink.write(" ")
                gap = True
        elif c == "\n":
            flush()
            sink.write("\n")
            gap = False
        elif c in symbol_breaks or c == "\r":
            flush()
        else:
            flush()
            warn(f"morse: ignoring invalid character {describe_char(c)}")

    flush()
    sink.end_line()
    sink.flush()


def encode_text(text: str, **kw: object) -> str:
    out = io.StringIO()
    encode_stream(io.StringIO(text), out, **kw)  # type: ignore[arg-type]
    return out.getvalue()


def decode_text(text: str, **kw: object) -> str:
    out = io.StringIO()
    decode_stream(io.StringIO(text), out, **kw)  # type: ignore[arg-type]
    return out.getvalue()
