from __future__ import annotations

import io

import pytest

from tcodec.core.diag import WarningLog
from tcodec.core.factoradic import (
    MAX_U64,
    clean_line,
    convert_line,
    decimal_to_factoradic,
    factorial,
    factoradic_to_decimal,
    process_stream,
)
from tcodec.errors import (
    FactoradicError,
    FactoradicOverflow,
    FactorialOverflow,
    InvalidFactoradicDigit,
)

# (decimal, factoradic)
VECTORS: tuple[tuple[int, str], ...] = (
    (0, "0"),
    (1, "1"),
    (2, "10"),
    (5, "21"),
    (6, "100"),
    (463, "34101"),
    (469, "34201"),
    (719, "54321"),
)


@pytest.mark.parametrize("n,fact", VECTORS)
def test_golden_vectors(n: int, fact: str) -> None:
    assert decimal_to_factoradic(n) == fact
    assert factoradic_to_decimal(fact) == n


def test_factorial_limits() -> None:
    assert factorial(0) == 1
    assert factorial(20) == 2432902008176640000
    with pytest.raises(FactorialOverflow):
        factorial(21)


def test_max_u64_roundtrip() -> None:
    s = decimal_to_factoradic(MAX_U64)
    assert factoradic_to_decimal(s) == MAX_U64


def test_decimal_overflow() -> None:
    with pytest.raises(FactoradicOverflow):
        decimal_to_factoradic(MAX_U64 + 1)


def test_digit_above_position_rejected() -> None:
    with pytest.raises(InvalidFactoradicDigit, match="position 1"):
        factoradic_to_decimal("5")
    with pytest.raises(InvalidFactoradicDigit):
        factoradic_to_decimal("30")


def test_letter_digits() -> None:
    # 10 * 10! at position 10
    s = "A" + "0" * 9
    assert factoradic_to_decimal(s) == 10 * factorial(10)
    assert factoradic_to_decimal(s.lower()) == 10 * factorial(10)
    assert decimal_to_factoradic(10 * factorial(10)) == s


def test_leading_zeros_beyond_twenty_positions() -> None:
    assert factoradic_to_decimal("0" * 25 + "1") == 1
    with pytest.raises(FactoradicOverflow):
        factoradic_to_decimal("1" + "0" * 21)


def test_clean_line() -> None:
    assert clean_line("  1,234\n", decode=False) == ("1", True)
    assert clean_line("12 34\n", decode=False) == ("1234", False)
    assert clean_line("3a4\n", decode=False) == ("34", False)
    assert clean_line("3a4\n", decode=True) == ("3a4", False)


def test_convert_line_no_digits() -> None:
    with pytest.raises(FactoradicError, match="no valid digits"):
        convert_line("abc\n", decode=False)


def test_convert_line_verbose() -> None:
    out, _ = convert_line("463", decode=False, verbose=True)
    assert out[0] == "Converting 463 to factoradic:"
    assert out[1] == "463 ÷ 5! (120) = 3 remainder 103"
    assert out[-1] == "Result: 34101 (factoradic)"

    out, _ = convert_line("34101", decode=True, verbose=True)
    assert out[1] == "3 × 5! (120) = 360"
    assert out[-1] == "Result: 463 (decimal)"


def test_process_stream_continues_after_bad_line() -> None:
    src = io.StringIO("463\n\nxyz\n5\n")
    dst = io.StringIO()
    errors = WarningLog()
    failed = process_stream(src, dst, on_error=errors)
    assert failed == 1
    assert dst.getvalue() == "34101\n21\n"
    assert errors.messages == ["line 3: no valid digits found in input: 'xyz'"]


def test_process_stream_oversized_decimal_line_is_skipped() -> None:
    src = io.StringIO("9" * 5000 + "\n5\n")
    dst = io.StringIO()
    errors = WarningLog()
    failed = process_stream(src, dst, on_error=errors)
    assert failed == 1
    assert dst.getvalue() == "21\n"
    assert errors.messages[0].startswith("line 1: ")
    assert "does not fit in 64 bits" in errors.messages[0]


def test_convert_line_leading_zeros_do_not_count_as_digits() -> None:
    out, _ = convert_line("0" * 5000 + "463", decode=False)
    assert out == ["34101"]
    with pytest.raises(FactoradicOverflow):
        convert_line(str(MAX_U64) + "0", decode=False)


def test_process_stream_decode() -> None:
    dst = io.StringIO()
    failed = process_stream(io.StringIO("34101\n5\n"), dst, decode=True, on_error=WarningLog())
    assert failed == 1
    assert dst.getvalue() == "463\n"


def test_process_stream_fraction_noted_in_verbose_mode() -> None:
    warn = WarningLog()
    dst = io.StringIO()
    process_stream(io.StringIO("5.75\n"), dst, verbose=True, warn=warn)
    assert dst.getvalue().splitlines()[-1] == "Result: 21 (factoradic)"
    assert "truncated fractional part" in warn.joined()
