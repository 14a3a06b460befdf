from __future__ import annotations

import pytest

from tcodec.core.bitstream import (
    BitAlphabet,
    NucleotideCounter,
    binary_alphabet,
    decode_bytes,
    dna_alphabet,
    encode_bytes,
    mapping_lines,
    sequence_stats,
    validate_dna_mapping,
)
from tcodec.core.diag import WarningLog
from tcodec.errors import UsageError

# 'A' = 0x41 = 01 00 00 01
BIN_A = b"01000001"
DNA_A_ATGC = b"TAAT"
DNA_A_ATGC_COMPLEMENT = b"ATTA"
DNA_A_AGCT = b"GAAG"


def test_binary_golden() -> None:
    alpha = binary_alphabet()
    assert encode_bytes(b"A", alpha, wrap_cols=64) == BIN_A + b"\n"
    assert decode_bytes(BIN_A, alpha) == b"A"


def test_binary_wrap() -> None:
    alpha = binary_alphabet()
    out = encode_bytes(b"\x00" * 16, alpha, wrap_cols=64)
    assert out == b"0" * 64 + b"\n" + b"0" * 64 + b"\n"


def test_binary_roundtrip_all_bytes() -> None:
    alpha = binary_alphabet()
    data = bytes(range(256))
    assert decode_bytes(encode_bytes(data, alpha, wrap_cols=64), alpha) == data


def test_dna_golden_default_mapping() -> None:
    alpha = dna_alphabet()
    assert encode_bytes(b"A", alpha) == DNA_A_ATGC + b"\n"
    assert decode_bytes(DNA_A_ATGC, alpha) == b"A"
    # decoding is case-insensitive
    assert decode_bytes(b"taat", alpha) == b"A"


def test_dna_complement() -> None:
    alpha = dna_alphabet(complement=True)
    assert encode_bytes(b"A", alpha) == DNA_A_ATGC_COMPLEMENT + b"\n"
    assert decode_bytes(DNA_A_ATGC_COMPLEMENT, alpha) == b"A"


def test_dna_alternative_mapping() -> None:
    alpha = dna_alphabet("agct")
    assert encode_bytes(b"A", alpha) == DNA_A_AGCT + b"\n"
    assert decode_bytes(DNA_A_AGCT, alpha) == b"A"


@pytest.mark.parametrize("bad", ["", "ATG", "AATG", "ATGX", "ATGCA"])
def test_dna_invalid_mapping(bad: str) -> None:
    with pytest.raises(UsageError, match="invalid mapping"):
        validate_dna_mapping(bad)


def test_decode_invalid_symbol_warns_and_skips() -> None:
    log = WarningLog()
    assert decode_bytes(b"TA-AT", dna_alphabet(), warn=log) == b"A"
    assert len(log) == 1
    assert "'-'" in log.messages[0]


def test_decode_partial_byte_is_padded() -> None:
    log = WarningLog()
    # "TA" = 0100 -> 0100 0000
    assert decode_bytes(b"TA\n", dna_alphabet(), warn=log) == b"\x40"
    assert "incomplete final byte" in log.joined()


def test_sequence_stats() -> None:
    assert sequence_stats("ATGC") == (4, 50.0)
    assert sequence_stats("gcgc\n") == (4, 100.0)
    assert sequence_stats("") == (0, 0.0)


def test_nucleotide_counter_accepts_chunks() -> None:
    c = NucleotideCounter()
    c.feed(b"AAG")
    c.feed(b"C\n")
    assert (c.total, c.gc_percent) == (4, 50.0)


def test_mapping_lines() -> None:
    assert mapping_lines(dna_alphabet()) == [
        "  00 -> A",
        "  01 -> T",
        "  10 -> G",
        "  11 -> C",
    ]


def test_alphabet_size_must_be_power_of_two() -> None:
    with pytest.raises(ValueError):
        BitAlphabet("012")
