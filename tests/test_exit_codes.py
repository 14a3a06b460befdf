from __future__ import annotations

from pathlib import Path

import pytest

from tcodec.errors import (
    EXIT_BAD_INPUT,
    EXIT_CODES,
    EXIT_GENERIC,
    EXIT_INTERRUPTED,
    EXIT_OPEN_FAILED,
    EXIT_STREAM_IO,
    EXIT_USAGE,
    Base85Overflow,
    FactorialOverflow,
    InputOpenError,
    Interrupted,
    InvalidSymbol,
    StreamWriteError,
    TCodecError,
    UsageError,
    exit_code_by_name,
    exit_code_info,
    render_exit_codes_markdown,
)


def test_exit_codes_are_unique() -> None:
    codes = [e.code for e in EXIT_CODES]
    names = [e.name for e in EXIT_CODES]
    assert len(set(codes)) == len(codes)
    assert len(set(names)) == len(names)


def test_lookup_helpers() -> None:
    assert exit_code_by_name(" bad_input ") == EXIT_BAD_INPUT
    assert exit_code_by_name("nope") is None
    info = exit_code_info(EXIT_INTERRUPTED)
    assert info is not None and info.name == "INTERRUPTED"


@pytest.mark.parametrize(
    "exc,code",
    [
        (TCodecError, EXIT_GENERIC),
        (UsageError, EXIT_USAGE),
        (InputOpenError, EXIT_OPEN_FAILED),
        (StreamWriteError, EXIT_STREAM_IO),
        (InvalidSymbol, EXIT_BAD_INPUT),
        (Base85Overflow, EXIT_BAD_INPUT),
        (FactorialOverflow, EXIT_BAD_INPUT),
        (Interrupted, EXIT_INTERRUPTED),
    ],
)
def test_exception_exit_codes(exc: type[TCodecError], code: int) -> None:
    assert exc("x").exit_code == code


def test_docs_exit_codes_md_is_up_to_date() -> None:
    doc = Path(__file__).resolve().parents[1] / "docs" / "exit_codes.md"
    assert doc.read_text(encoding="utf-8") == render_exit_codes_markdown()
