from __future__ import annotations

import pytest

from tcodec.core.diag import WarningLog
from tcodec.layers.braille import cell_to_text, decode_text, encode_text, text_to_cell

CELL_A = "⠁"
CELL_B = "⠃"
CAPITAL = "⠠"
NUMBER = "⠼"
LETTER = "⠰"


def test_lowercase_letters() -> None:
    assert encode_text("ab") == CELL_A + CELL_B + "\n"
    assert decode_text(CELL_A + CELL_B) == "ab\n"


def test_capital_sign() -> None:
    assert encode_text("Ab") == CAPITAL + CELL_A + CELL_B + "\n"
    assert decode_text(CAPITAL + CELL_A + CELL_B) == "Ab\n"


def test_number_sign() -> None:
    assert encode_text("12") == NUMBER + CELL_A + CELL_B + "\n"
    assert decode_text(NUMBER + CELL_A + CELL_B) == "12\n"


def test_letter_after_digits_gets_letter_sign() -> None:
    assert encode_text("1a") == NUMBER + CELL_A + LETTER + CELL_A + "\n"
    assert decode_text(encode_text("1a")) == "1a\n"


def test_text_form() -> None:
    assert cell_to_text(0x01) == "o....."
    assert text_to_cell("o.o...") == 0x03
    assert encode_text("ab", text_mode=True) == "o.....o.o...\n"
    assert decode_text("o.....o.o...\n", text_mode=True) == "ab\n"


@pytest.mark.parametrize(
    "text",
    [
        "Hello World\n",
        "Room 101a, floor 2.\n",
        "Call 555 1234 now!\n",
        "a-b; c: 'e' \"f\" g/h?\n",
        "line one\nLine Two\n",
    ],
)
def test_roundtrip(text: str) -> None:
    assert decode_text(encode_text(text)) == text
    assert decode_text(encode_text(text, text_mode=True), text_mode=True) == text


def test_parentheses_share_a_cell() -> None:
    assert decode_text(encode_text("(x)")) == "(x(\n"


def test_unsupported_character_skipped_with_warning() -> None:
    log = WarningLog()
    assert encode_text("a#b", warn=log) == CELL_A + CELL_B + "\n"
    assert "'#'" in log.joined()


def test_unknown_cell_decodes_to_question_mark() -> None:
    log = WarningLog()
    # 0x3F: all six dots, not in the table
    assert decode_text("⠿", warn=log) == "?\n"
    assert "unknown cell" in log.joined()


def test_partial_text_cell_dropped() -> None:
    log = WarningLog()
    assert decode_text("o.....o.", text_mode=True, warn=log) == "a\n"
    assert "incomplete cell" in log.joined()


def test_newline_resets_number_mode() -> None:
    assert decode_text(NUMBER + CELL_A + "\n" + CELL_A) == "1\na\n"
