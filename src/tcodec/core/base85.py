"""Base-85 group codec (ASCII85 and Z85).

One algorithm, two alphabets:

  - 4 input bytes are packed big-endian into an unsigned 32-bit value
  - the value is written as 5 base-85 digits, most significant first
  - a short trailing group of n bytes (1..3) is zero-padded for the
    arithmetic and only n+1 digits are written
  - on decode, a short group of k digits (2..4) is padded with the highest
    digit (84) and k-1 bytes are kept

ASCII85 also knows two single-character markers for whole groups
('z' = four 0x00, 'y' = four 0x20). They sit outside its alphabet, so they
are always understood when decoding; encoding uses them only on request.
"""

from __future__ import annotations

import io
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import BinaryIO

from tcodec.core.diag import Warn, describe_char, stderr_warn
from tcodec.core.stream import BinarySink, CancelToken, iter_bytes, iter_groups
from tcodec.core.wrap import LineWrapper
from tcodec.errors import (
    Base85Overflow,
    InvalidSymbol,
    MisplacedMarker,
    TruncatedGroup,
    UsageError,
)

BASE = 85
GROUP_BYTES = 4
GROUP_DIGITS = 5
MAX_U32 = 0xFFFFFFFF
PAD_DIGIT = BASE - 1

# space, tab, CR, LF
WHITESPACE = frozenset(b" \t\r\n")

ZERO_GROUP = b"\x00\x00\x00\x00"
SPACE_GROUP = b"    "


@dataclass(frozen=True)
class Base85Variant:
    """An alphabet of 85 symbols plus optional whole-group markers."""

    name: str
    alphabet: bytes
    markers: Mapping[int, bytes] = field(default_factory=dict)
    decode_table: Mapping[int, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if len(self.alphabet) != BASE or len(set(self.alphabet)) != BASE:
            raise ValueError(f"{self.name}: l'alfabeto deve avere 85 simboli distinti")
        clash = set(self.markers) & set(self.alphabet)
        if clash:
            raise ValueError(f"{self.name}: marker dentro l'alfabeto: {sorted(clash)}")
        for group in self.markers.values():
            if len(group) != GROUP_BYTES:
                raise ValueError(f"{self.name}: un marker deve valere 4 byte")
        object.__setattr__(
            self, "decode_table", {sym: digit for digit, sym in enumerate(self.alphabet)}
        )

    def marker_for(self, group: bytes) -> int | None:
        for sym, value in self.markers.items():
            if value == group:
                return sym
        return None


ASCII85 = Base85Variant(
    name="ascii85",
    alphabet=bytes(range(ord("!"), ord("u") + 1)),
    markers={ord("z"): ZERO_GROUP, ord("y"): SPACE_GROUP},
)

Z85 = Base85Variant(
    name="z85",
    alphabet=(
        b"0123456789abcdefghijklmnopqrstuvwxyzABCDEFG"
        b"HIJKLMNOPQRSTUVWXYZ.-:+=^!/*?&<>()[]{}@%$#"
    ),
)

# keyed by CLI tool name
VARIANTS: dict[str, Base85Variant] = {"ascii85": ASCII85, "base85": Z85}


# -----------------
# Group arithmetic
# -----------------


def encode_group(group: bytes, variant: Base85Variant) -> bytes:
    """Encode 1..4 bytes into len+1 symbols (5 for a full group)."""
    n = len(group)
    if not 1 <= n <= GROUP_BYTES:
        raise ValueError(f"group di {n} byte (attesi 1..4)")
    value = int.from_bytes(group + b"\x00" * (GROUP_BYTES - n), "big")

    digits = bytearray(GROUP_DIGITS)
    for i in range(GROUP_DIGITS - 1, -1, -1):
        value, d = divmod(value, BASE)
        digits[i] = variant.alphabet[d]
    return bytes(digits[: n + 1])


def fold_digits(digits: list[int]) -> int:
    """
    value = value*85 + digit, MSB first, rejecting anything above 2**32-1.

    The check runs before every step, so the accumulator never leaves the
    unsigned 32-bit range.
    """
    value = 0
    for d in digits:
        if value > (MAX_U32 - d) // BASE:
            raise Base85Overflow("base-85 group exceeds 0xFFFFFFFF")
        value = value * BASE + d
    return value


def decode_group(digits: list[int]) -> bytes:
    """Decode 2..5 digit values into len-1 bytes (4 for a full group)."""
    k = len(digits)
    if k == 1:
        raise TruncatedGroup("incomplete base-85 group at end of input (1 symbol)")
    if not 2 <= k <= GROUP_DIGITS:
        raise ValueError(f"group di {k} cifre (attese 2..5)")
    value = fold_digits(digits + [PAD_DIGIT] * (GROUP_DIGITS - k))
    return value.to_bytes(GROUP_BYTES, "big")[: k - 1]


# -----------------
# Streams
# -----------------


def encode_stream(
    src: BinaryIO,
    dst: BinaryIO,
    variant: Base85Variant = ASCII85,
    *,
    wrap_cols: int = 76,
    zero_compress: bool = False,
    space_compress: bool = False,
    cancel: CancelToken | None = None,
) -> int:
    """Encode ``src`` into ``dst``. Returns the number of input bytes consumed."""
    use_markers: dict[bytes, int] = {}
    for wanted, group, flag in (
        (zero_compress, ZERO_GROUP, "zero-compress"),
        (space_compress, SPACE_GROUP, "space-compress"),
    ):
        if not wanted:
            continue
        sym = variant.marker_for(group)
        if sym is None:
            raise UsageError(f"{variant.name}: --{flag} is not supported by this alphabet")
        use_markers[group] = sym

    sink = BinarySink(dst)
    wrapper = LineWrapper(sink, wrap_cols)
    consumed = 0

    for group in iter_groups(src, GROUP_BYTES, cancel):
        consumed += len(group)
        sym = use_markers.get(group) if len(group) == GROUP_BYTES else None
        if sym is not None:
            wrapper.write(bytes((sym,)))
        else:
            wrapper.write(encode_group(group, variant))

    wrapper.finish()
    sink.flush()
    return consumed


def decode_stream(
    src: BinaryIO,
    dst: BinaryIO,
    variant: Base85Variant = ASCII85,
    *,
    ignore_garbage: bool = False,
    warn: Warn | None = None,
    cancel: CancelToken | None = None,
) -> int:
    """Decode ``src`` into ``dst``. Returns the number of bytes written."""
    warn = warn or stderr_warn
    sink = BinarySink(dst)
    table = variant.decode_table
    markers = variant.markers
    buf: list[int] = []
    offset = -1

    for c in iter_bytes(src, cancel):
        offset += 1
        if c in WHITESPACE:
            continue

        marker = markers.get(c)
        if marker is not None:
            if buf:
                raise MisplacedMarker(
                    f"{variant.name}: marker {describe_char(c)} inside a group at offset {offset}"
                )
            sink.write(marker)
            continue

        d = table.get(c)
        if d is None:
            if ignore_garbage:
                warn(f"{variant.name}: ignoring invalid character {describe_char(c)} at offset {offset}")
                continue
            raise InvalidSymbol(
                f"{variant.name}: invalid character {describe_char(c)} at offset {offset}"
            )

        buf.append(d)
        if len(buf) == GROUP_DIGITS:
            sink.write(decode_group(buf))
            buf = []

    if buf:
        sink.write(decode_group(buf))

    sink.flush()
    return sink.written


# -----------------
# In-memory helpers
# -----------------


def encode_bytes(
    data: bytes,
    variant: Base85Variant = ASCII85,
    *,
    wrap_cols: int = 0,
    zero_compress: bool = False,
    space_compress: bool = False,
) -> bytes:
    out = io.BytesIO()
    encode_stream(
        io.BytesIO(data),
        out,
        variant,
        wrap_cols=wrap_cols,
        zero_compress=zero_compress,
        space_compress=space_compress,
    )
    return out.getvalue()


def decode_bytes(
    text: bytes | str,
    variant: Base85Variant = ASCII85,
    *,
    ignore_garbage: bool = False,
    warn: Warn | None = None,
) -> bytes:
    if isinstance(text, str):
        text = text.encode("ascii")
    out = io.BytesIO()
    decode_stream(io.BytesIO(text), out, variant, ignore_garbage=ignore_garbage, warn=warn)
    return out.getvalue()
