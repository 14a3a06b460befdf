from __future__ import annotations

import io
from dataclasses import dataclass
from functools import lru_cache
from typing import TextIO

from tcodec.core.stream import CancelToken, TextSink, iter_lines
from tcodec.errors import UsageError
from tcodec.layers.substitution import LongestMatchTable

# (source, leet), in table order. Order matters for decoding, see _reverse().
BASIC: tuple[tuple[str, str], ...] = (
    ("a", "4"), ("A", "4"),
    ("e", "3"), ("E", "3"),
    ("i", "1"), ("I", "1"),
    ("l", "1"), ("L", "1"),
    ("o", "0"), ("O", "0"),
    ("s", "5"), ("S", "5"),
    ("t", "7"), ("T", "7"),
)  # fmt: skip

ADVANCED: tuple[tuple[str, str], ...] = (
    ("a", "4"), ("A", "4"),
    ("b", "6"), ("B", "6"),
    ("e", "3"), ("E", "3"),
    ("g", "9"), ("G", "9"),
    ("i", "1"), ("I", "1"),
    ("l", "1"), ("L", "1"),
    ("o", "0"), ("O", "0"),
    ("s", "5"), ("S", "5"),
    ("t", "7"), ("T", "7"),
    ("z", "2"), ("Z", "2"),
)  # fmt: skip

EXTREME: tuple[tuple[str, str], ...] = (
    ("a", "4"), ("A", "@"),
    ("b", "6"), ("B", "|3"),
    ("c", "<"), ("C", "("),
    ("d", "|)"), ("D", "|)"),
    ("e", "3"), ("E", "3"),
    ("f", "|="), ("F", "|="),
    ("g", "9"), ("G", "6"),
    ("h", "#"), ("H", "|-|"),
    ("i", "1"), ("I", "!"),
    ("j", "_|"), ("J", "_|"),
    ("k", "|<"), ("K", "|<"),
    ("l", "1"), ("L", "|_"),
    ("m", "|\\/|"), ("M", "|\\/|"),
    ("n", "|\\|"), ("N", "|\\|"),
    ("o", "0"), ("O", "0"),
    ("p", "|>"), ("P", "|>"),
    ("q", "9"), ("Q", "0_"),
    ("r", "|2"), ("R", "|2"),
    ("s", "5"), ("S", "$"),
    ("t", "7"), ("T", "7"),
    ("u", "|_|"), ("U", "|_|"),
    ("v", "\\/"), ("V", "\\/"),
    ("w", "VV"), ("W", "VV"),
    ("x", "><"), ("X", "><"),
    ("y", "`/"), ("Y", "`/"),
    ("z", "2"), ("Z", "2"),
)  # fmt: skip

LEVELS: dict[int, tuple[tuple[str, str], ...]] = {1: BASIC, 2: ADVANCED, 3: EXTREME}
LEVEL_NAMES: dict[int, str] = {1: "basic", 2: "advanced", 3: "extreme"}


def _reverse(pairs: tuple[tuple[str, str], ...]) -> dict[str, str]:
    """
    Canonical decode for shared symbols:
      - a lowercase source beats an uppercase one
      - among lowercase sources the later entry wins ('1' -> 'l', '9' -> 'q')
    """
    rev: dict[str, str] = {}
    for src, sym in pairs:
        if src.islower():
            rev[sym] = src
    for src, sym in pairs:
        rev.setdefault(sym, src)
    return rev


@dataclass(frozen=True)
class LeetTable:
    level: int
    encode: dict[str, str]
    decode: LongestMatchTable


@lru_cache(maxsize=None)
def leet_table(level: int) -> LeetTable:
    pairs = LEVELS.get(level)
    if pairs is None:
        raise UsageError(f"leetspeak: invalid level {level!r} (1=basic, 2=advanced, 3=extreme)")
    return LeetTable(
        level=level,
        encode=dict(pairs),
        decode=LongestMatchTable.build(_reverse(pairs)),
    )


def encode_line(line: str, table: LeetTable, *, ignore_case: bool = False) -> str:
    enc = table.encode
    if ignore_case:
        return "".join(enc.get(c.lower(), c) for c in line)
    return "".join(enc.get(c, c) for c in line)


def decode_line(line: str, table: LeetTable, *, ignore_case: bool = False) -> str:
    out = table.decode.decode(line)
    return out.lower() if ignore_case else out


def encode_stream(
    src: TextIO,
    dst: TextIO,
    *,
    level: int = 1,
    ignore_case: bool = False,
    cancel: CancelToken | None = None,
) -> None:
    table = leet_table(level)
    sink = TextSink(dst)
    for line in iter_lines(src, cancel):
        sink.write(encode_line(line, table, ignore_case=ignore_case))
    sink.flush()


def decode_stream(
    src: TextIO,
    dst: TextIO,
    *,
    level: int = 1,
    ignore_case: bool = False,
    cancel: CancelToken | None = None,
) -> None:
    # symbols never span a newline, so lines can be decoded one by one
    table = leet_table(level)
    sink = TextSink(dst)
    for line in iter_lines(src, cancel):
        sink.write(decode_line(line, table, ignore_case=ignore_case))
    sink.flush()


def encode_text(text: str, *, level: int = 1, ignore_case: bool = False) -> str:
    out = io.StringIO()
    encode_stream(io.StringIO(text), out, level=level, ignore_case=ignore_case)
    return out.getvalue()


def decode_text(text: str, *, level: int = 1, ignore_case: bool = False) -> str:
    out = io.StringIO()
    decode_stream(io.StringIO(text), out, level=level, ignore_case=ignore_case)
    return out.getvalue()
