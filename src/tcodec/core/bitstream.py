"""Bitstream codec: fixed-width symbols, several per byte.

Degenerate case of the group codec with a power-of-two base:
  - binary: 2 symbols ('0','1'), 1 bit each, 8 symbols per byte
  - DNA:    4 nucleotides, 2 bits each, 4 symbols per byte
"""

from __future__ import annotations

import io
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import BinaryIO

from tcodec.core.diag import Warn, describe_char, stderr_warn
from tcodec.core.stream import BinarySink, CancelToken, iter_bytes
from tcodec.core.wrap import LineWrapper
from tcodec.errors import UsageError

WHITESPACE = frozenset(b" \t\r\n\v\f")

NUCLEOTIDES = "ATGC"
DEFAULT_DNA_MAPPING = "ATGC"  # A=00 T=01 G=10 C=11
DNA_COMPLEMENT: Mapping[str, str] = {"A": "T", "T": "A", "G": "C", "C": "G"}


@dataclass(frozen=True)
class BitAlphabet:
    """
    symbols[i] encodes the bit pattern i (len(symbols) must be 2, 4, 16 or 256
    so that a whole number of symbols fits in one byte).
    """

    symbols: str
    complement: Mapping[str, str] | None = None
    case_insensitive: bool = False
    width: int = field(init=False)
    _lookup: Mapping[int, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        n = len(self.symbols)
        width = n.bit_length() - 1
        if n < 2 or (1 << width) != n or 8 % width != 0:
            raise ValueError(f"alfabeto di {n} simboli non supportato")
        if len(set(self._norm(s) for s in self.symbols)) != n:
            raise ValueError("simboli duplicati nell'alfabeto")
        lookup = {ord(self._norm(s)): i for i, s in enumerate(self.symbols)}
        object.__setattr__(self, "width", width)
        object.__setattr__(self, "_lookup", lookup)

    def _norm(self, s: str) -> str:
        return s.upper() if self.case_insensitive else s

    @property
    def per_byte(self) -> int:
        return 8 // self.width

    def symbol(self, bits: int) -> str:
        s = self._norm(self.symbols[bits])
        if self.complement is not None:
            s = self.complement.get(s, s)
        return s

    def value(self, c: int) -> int | None:
        """Bit pattern for the input byte ``c`` (None if not a symbol)."""
        s = self._norm(chr(c))
        if self.complement is not None:
            s = self.complement.get(s, s)
        return self._lookup.get(ord(s))


def binary_alphabet() -> BitAlphabet:
    return BitAlphabet("01")


def validate_dna_mapping(mapping: str) -> str:
    m = mapping.strip().upper()
    if len(m) != 4 or set(m) != set(NUCLEOTIDES):
        raise UsageError(
            f"invalid mapping {mapping!r}: must be 4 unique nucleotides (A,T,G,C)"
        )
    return m


def dna_alphabet(mapping: str = DEFAULT_DNA_MAPPING, complement: bool = False) -> BitAlphabet:
    return BitAlphabet(
        validate_dna_mapping(mapping),
        complement=DNA_COMPLEMENT if complement else None,
        case_insensitive=True,
    )


def encode_stream(
    src: BinaryIO,
    dst: BinaryIO,
    alphabet: BitAlphabet,
    *,
    wrap_cols: int = 64,
    cancel: CancelToken | None = None,
) -> int:
    sink = BinarySink(dst)
    wrapper = LineWrapper(sink, wrap_cols)
    # byte -> its symbols, precomputed once
    table = [
        "".join(
            alphabet.symbol((b >> shift) & ((1 << alphabet.width) - 1))
            for shift in range(8 - alphabet.width, -1, -alphabet.width)
        ).encode("ascii")
        for b in range(256)
    ]
    consumed = 0
    for b in iter_bytes(src, cancel):
        wrapper.write(table[b])
        consumed += 1
    wrapper.finish()
    sink.flush()
    return consumed


def decode_stream(
    src: BinaryIO,
    dst: BinaryIO,
    alphabet: BitAlphabet,
    *,
    warn: Warn | None = None,
    cancel: CancelToken | None = None,
) -> int:
    warn = warn or stderr_warn
    sink = BinarySink(dst)
    width = alphabet.width
    per_byte = alphabet.per_byte
    acc = 0
    count = 0

    for c in iter_bytes(src, cancel):
        if c in WHITESPACE:
            continue
        v = alphabet.value(c)
        if v is None:
            warn(f"ignoring invalid symbol {describe_char(c)}")
            continue
        acc = (acc << width) | v
        count += 1
        if count == per_byte:
            sink.write(bytes((acc,)))
            acc = 0
            count = 0

    if count:
        acc <<= width * (per_byte - count)
        sink.write(bytes((acc,)))
        warn(f"incomplete final byte ({count * width} of 8 bits), padded with zeros")

    sink.flush()
    return sink.written


@dataclass
class NucleotideCounter:
    """Running nucleotide / GC count over DNA text."""

    total: int = 0
    gc: int = 0

    def feed(self, data: bytes | str) -> None:
        text = data.decode("ascii", "replace") if isinstance(data, bytes) else data
        for c in text.upper():
            if c in NUCLEOTIDES:
                self.total += 1
                if c in "GC":
                    self.gc += 1

    @property
    def gc_percent(self) -> float:
        return self.gc / self.total * 100.0 if self.total else 0.0


def sequence_stats(text: str) -> tuple[int, float]:
    """(nucleotide count, GC content in percent) of a DNA text."""
    counter = NucleotideCounter()
    counter.feed(text)
    return counter.total, counter.gc_percent


def mapping_lines(alphabet: BitAlphabet) -> list[str]:
    """'bits -> symbol' table, one line per pattern."""
    width = alphabet.width
    return [f"  {i:0{width}b} -> {alphabet.symbol(i)}" for i in range(1 << width)]


def encode_bytes(data: bytes, alphabet: BitAlphabet, *, wrap_cols: int = 0) -> bytes:
    out = io.BytesIO()
    encode_stream(io.BytesIO(data), out, alphabet, wrap_cols=wrap_cols)
    return out.getvalue()


def decode_bytes(text: bytes | str, alphabet: BitAlphabet, *, warn: Warn | None = None) -> bytes:
    if isinstance(text, str):
        text = text.encode("utf-8")
    out = io.BytesIO()
    decode_stream(io.BytesIO(text), out, alphabet, warn=warn)
    return out.getvalue()
