from __future__ import annotations

import io
import json

import pytest

from tcodec.cli import build_parser, build_tool_parser, resolve_config, run_tool
from tcodec.config import default_config
from tcodec.core.diag import WarningLog
from tcodec.core.stream import CancelToken
from tcodec.errors import EXIT_BAD_INPUT, EXIT_OK, Interrupted


def test_run_tool_bytes() -> None:
    out = io.BytesIO()
    code = run_tool("ascii85", default_config("ascii85"), io.BytesIO(b"Man "), out)
    assert code == EXIT_OK
    assert out.getvalue() == b"9jqo^\n"


def test_run_tool_text() -> None:
    out = io.StringIO()
    run_tool("morse", default_config("morse"), io.StringIO("sos"), out)
    assert out.getvalue() == "... --- ...\n"


def test_run_tool_dna_stats() -> None:
    info: list[str] = []
    cfg = default_config("dna").merged({"stats": True, "wrap": 0})
    out = io.BytesIO()
    run_tool("dna", cfg, io.BytesIO(b"\xff"), out, info=info.append)
    assert out.getvalue() == b"CCCC\n"
    assert info[0] == "DNA mapping being used:"
    assert info[-1] == "Sequence stats: 4 nucleotides, 100.0% GC content"


def test_run_tool_factoradic_failed_lines() -> None:
    errors = WarningLog()
    out = io.StringIO()
    code = run_tool(
        "factoradic",
        default_config("factoradic"),
        io.StringIO("1\nzz\n"),
        out,
        on_error=errors,
    )
    assert code == EXIT_BAD_INPUT
    assert out.getvalue() == "1\n"
    assert len(errors) == 1


def test_run_tool_cancelled() -> None:
    token = CancelToken()
    token.cancel()
    with pytest.raises(Interrupted):
        run_tool("binary", default_config("binary"), io.BytesIO(b"x"), io.BytesIO(), cancel=token)


def test_parser_flags_resolve_over_config() -> None:
    cfg_json = json.dumps({"spec": "tcodec.config.v1", "level": 2, "ignore_case": True})
    ns = build_parser().parse_args(["leetspeak", "--config", cfg_json, "-l", "3"])
    cfg = resolve_config(ns)
    assert cfg.get("level") == 3
    assert cfg.get("ignore_case") is True


def test_tool_parser_defaults() -> None:
    ns = build_tool_parser("ascii85").parse_args([])
    assert ns.tool == "ascii85"
    assert ns.file == "-"
    assert ns.decode is False
    cfg = resolve_config(ns)
    assert cfg.get("wrap") == 76
    assert cfg.get("zero_compress") is False


def test_factoradic_parser_verbose_flag() -> None:
    ns = build_tool_parser("factoradic").parse_args(["-v", "-d", "numbers.txt"])
    assert ns.verbose is True
    assert ns.decode is True
    assert ns.file == "numbers.txt"


def test_leetspeak_help_lists_level_names() -> None:
    text = build_tool_parser("leetspeak").format_help()
    assert "1=basic" in text
    assert "3=extreme" in text
