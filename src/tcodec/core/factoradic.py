"""Factorial-base (factoradic) numerals, bounded to unsigned 64-bit.

Position k (1-based, counted from the right) has place value k! and legal
digits 0..k. Digits above 9 are written with letters (A=10 ... K=20).
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TextIO

from tcodec.core.diag import Warn, stderr_warn
from tcodec.core.stream import CancelToken, TextSink, iter_lines
from tcodec.errors import (
    FactoradicError,
    FactoradicOverflow,
    FactorialOverflow,
    InvalidFactoradicDigit,
)

MAX_U64 = (1 << 64) - 1
MAX_POSITION = 20  # 21! > 2**64-1
MAX_DECIMAL_DIGITS = len(str(MAX_U64))
DIGITS = "0123456789ABCDEFGHIJK"


def factorial(n: int) -> int:
    """n!, refusing results that do not fit in 64 bits."""
    if n < 0:
        raise ValueError("factorial of a negative number")
    result = 1
    for i in range(2, n + 1):
        if result > MAX_U64 // i:
            raise FactorialOverflow(f"{n}! does not fit in 64 bits")
        result *= i
    return result


def digit_value(c: str) -> int:
    v = DIGITS.find(c.upper()) if len(c) == 1 else -1
    if v < 0:
        raise InvalidFactoradicDigit(f"invalid character {c!r} in factoradic number")
    return v


@dataclass(frozen=True)
class Step:
    position: int
    fact: int
    digit: int
    before: int  # remaining (to factoradic) or running sum (to decimal)
    after: int


def decimal_to_factoradic_steps(n: int) -> tuple[str, list[Step]]:
    if n < 0:
        raise FactoradicError("negative numbers have no factoradic form")
    if n > MAX_U64:
        raise FactoradicOverflow(f"{n} does not fit in 64 bits")
    if n == 0:
        return "0", [Step(1, 1, 0, 0, 0)]

    max_pos = 1
    while max_pos < MAX_POSITION and factorial(max_pos + 1) <= n:
        max_pos += 1

    out: list[str] = []
    steps: list[Step] = []
    remaining = n
    for pos in range(max_pos, 0, -1):
        fact = factorial(pos)
        digit, rest = divmod(remaining, fact)
        if digit > pos:
            raise InvalidFactoradicDigit(
                f"digit {digit} for position {pos} (max allowed: {pos})"
            )
        out.append(DIGITS[digit])
        steps.append(Step(pos, fact, digit, remaining, rest))
        remaining = rest
    return "".join(out), steps


def decimal_to_factoradic(n: int) -> str:
    return decimal_to_factoradic_steps(n)[0]


def factoradic_to_decimal_steps(s: str) -> tuple[int, list[Step]]:
    s = s.strip()
    if not s:
        raise InvalidFactoradicDigit("empty factoradic number")
    if len(s) > MAX_POSITION:
        # leading zeros are harmless, anything else at position > 20 overflows
        head = s[: len(s) - MAX_POSITION]
        if any(digit_value(c) for c in head):
            raise FactoradicOverflow("factoradic number too large for 64 bits")

    total = 0
    steps: list[Step] = []
    length = len(s)
    for i, c in enumerate(s):
        digit = digit_value(c)
        position = length - i
        if digit > position:
            raise InvalidFactoradicDigit(
                f"digit {digit} at position {position} exceeds maximum allowed ({position})"
            )
        if digit == 0 and position > MAX_POSITION:
            continue
        fact = factorial(position)
        contribution = digit * fact
        if total > MAX_U64 - contribution:
            raise FactoradicOverflow("factoradic number too large for 64 bits")
        steps.append(Step(position, fact, digit, total, total + contribution))
        total += contribution
    return total, steps


def factoradic_to_decimal(s: str) -> int:
    return factoradic_to_decimal_steps(s)[0]


# -----------------
# Line-oriented driver
# -----------------


def clean_line(line: str, *, decode: bool) -> tuple[str, bool]:
    """
    Keep the digit characters before the first '.' or ','.

    Returns (digits, had_fraction). In decode mode letter digits (A..K) are
    kept as well.
    """
    kept: list[str] = []
    had_fraction = False
    for c in line:
        if c in ".,":
            had_fraction = True
            break
        if c.isascii() and (c.isdigit() or (decode and c.isalpha())):
            kept.append(c)
    return "".join(kept), had_fraction


def _verbose_encode(n: int, result: str, steps: list[Step]) -> list[str]:
    if n == 0:
        return [f"{result} (0 = 0 × 1!)"]
    lines = [f"Converting {n} to factoradic:"]
    for st in steps:
        lines.append(
            f"{st.before} ÷ {st.position}! ({st.fact}) = {st.digit} remainder {st.after}"
        )
    lines.append(f"Result: {result} (factoradic)")
    return lines


def _verbose_decode(s: str, result: int, steps: list[Step]) -> list[str]:
    lines = [f"Converting {s} from factoradic:"]
    for st in steps:
        lines.append(f"{st.digit} × {st.position}! ({st.fact}) = {st.digit * st.fact}")
    lines.append(f"Result: {result} (decimal)")
    return lines


def convert_line(line: str, *, decode: bool, verbose: bool = False) -> tuple[list[str], bool]:
    """Convert one input line. Returns (output lines, had_fraction)."""
    digits, had_fraction = clean_line(line, decode=decode)
    if not digits:
        raise FactoradicError(f"no valid digits found in input: {line.rstrip()!r}")

    if decode:
        value, steps = factoradic_to_decimal_steps(digits)
        out = _verbose_decode(digits, value, steps) if verbose else [str(value)]
    else:
        significant = digits.lstrip("0")
        if len(significant) > MAX_DECIMAL_DIGITS:
            raise FactoradicOverflow(f"{significant[:20]}... does not fit in 64 bits")
        n = int(significant or "0")
        text, steps = decimal_to_factoradic_steps(n)
        out = _verbose_encode(n, text, steps) if verbose else [text]
    return out, had_fraction


def process_stream(
    src: TextIO,
    dst: TextIO,
    *,
    decode: bool = False,
    verbose: bool = False,
    warn: Warn | None = None,
    on_error: Callable[[str], None] | None = None,
    cancel: CancelToken | None = None,
) -> int:
    """
    Convert every line; a bad line is reported and skipped.

    Returns the number of lines that failed.
    """
    warn = warn or stderr_warn
    report = on_error or warn
    sink = TextSink(dst)
    failed = 0
    for lineno, line in enumerate(iter_lines(src, cancel), start=1):
        if not line.strip():
            continue
        try:
            out, had_fraction = convert_line(line, decode=decode, verbose=verbose)
        except FactoradicError as e:
            failed += 1
            report(f"line {lineno}: {e}")
            continue
        for ln in out:
            sink.write(ln + "\n")
        if had_fraction and verbose:
            warn(f"line {lineno}: truncated fractional part, using integer portion only")
    sink.flush()
    return failed
