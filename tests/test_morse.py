from __future__ import annotations

import pytest

from tcodec.core.diag import WarningLog
from tcodec.errors import UsageError
from tcodec.layers.morse import MORSE_TABLE, decode_text, encode_text, validate_separators

HELLO_WORLD = ".... . .-.. .-.. --- / .-- --- .-. .-.. -..\n"


def test_table_shape() -> None:
    assert len(MORSE_TABLE) == 26 + 10 + 18
    assert len(set(MORSE_TABLE.values())) == len(MORSE_TABLE)


def test_encode_golden() -> None:
    assert encode_text("SOS") == "... --- ...\n"
    assert encode_text("hello world") == HELLO_WORLD


def test_decode_golden() -> None:
    assert decode_text(HELLO_WORLD) == "HELLO WORLD\n"


def test_runs_of_blanks_collapse() -> None:
    assert encode_text("a  \t b") == ".- / -...\n"
    assert encode_text("  a") == ".-\n"


def test_newlines_preserved_single_trailing_newline() -> None:
    assert encode_text("a\nb\n") == ".-\n-...\n"
    assert encode_text("") == "\n"
    assert decode_text(".-\n-...") == "A\nB\n"


def test_unsupported_character_skipped_with_warning() -> None:
    log = WarningLog()
    assert encode_text("a#b", warn=log) == ".- -...\n"
    assert "'#'" in log.joined()


def test_unknown_symbol_decodes_to_question_mark() -> None:
    log = WarningLog()
    assert decode_text("...... .-", warn=log) == "?A\n"
    assert "'......'" in log.joined()


def test_custom_separators_roundtrip() -> None:
    enc = encode_text("AB C", char_sep="|", word_sep=" // ")
    assert enc == ".-|-... // -.-.\n"
    assert decode_text(enc, char_sep="|", word_sep=" // ") == "AB C\n"


@pytest.mark.parametrize("sep", ["", ".", "x-", "\n"])
def test_invalid_separator(sep: str) -> None:
    with pytest.raises(UsageError):
        validate_separators(sep, " / ")
    with pytest.raises(UsageError):
        encode_text("a", word_sep=sep)


def test_blank_word_separator_rejected() -> None:
    # the word gap would be indistinguishable from a letter gap
    with pytest.raises(UsageError, match="visible mark"):
        validate_separators(" ", "   ")
    with pytest.raises(UsageError):
        encode_text("a b", word_sep="\t")


@pytest.mark.parametrize("char_sep,word_sep", [("/", " / "), ("|", "||"), (" x", " x ")])
def test_separator_sharing_word_mark_rejected(char_sep: str, word_sep: str) -> None:
    with pytest.raises(UsageError, match="shares characters"):
        validate_separators(char_sep, word_sep)
    with pytest.raises(UsageError):
        decode_text(".-/-...", char_sep=char_sep, word_sep=word_sep)
