"""tcodec CLI.

Entrypoints:
  - ``tcodec <tool> [OPTIONS] [FILE]`` (console-script: ``tcodec``)
  - one console-script per tool: ``tcodec-ascii85``, ``tcodec-morse``, ...
  - ``python -m tcodec``

UX policy:
  - encode by default, ``-d`` decodes
  - FILE absent or '-' reads stdin; output always goes to stdout
  - options resolve as: CLI flag > --config JSON > built-in default
  - errors are printed as ``[tcodec] <message>`` and mapped to stable exit
    codes (tcodec.errors); ``--debug`` re-raises them instead
"""

from __future__ import annotations

import argparse
import signal
import sys
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from types import FrameType
from typing import IO, Any

from tcodec.config import (
    DEFAULTS,
    TOOLS,
    ToolConfig,
    ToolConfigError,
    load_tool_config,
    parse_level,
    parse_wrap,
)
from tcodec.core import base85, bitstream, factoradic
from tcodec.core.diag import PREFIX, Warn, stderr_warn
from tcodec.core.stream import CancelToken
from tcodec.errors import (
    EXIT_BAD_INPUT,
    EXIT_GENERIC,
    EXIT_INTERRUPTED,
    EXIT_OK,
    EXIT_USAGE,
    InputOpenError,
    Interrupted,
    StreamWriteError,
    TCodecError,
    UsageError,
)
from tcodec.layers import braille, dancing_men, leet, morse

# byte-oriented tools read and write raw bytes; the others work on UTF-8 text
BYTE_TOOLS = frozenset({"ascii85", "base85", "binary", "dna"})

TOOL_HELP: dict[str, str] = {
    "ascii85": "ASCII85 (Adobe/btoa) encode/decode",
    "base85": "Z85 (ZeroMQ base85) encode/decode",
    "binary": "Bytes <-> '0'/'1' text",
    "dna": "Bytes <-> nucleotide text (A,T,G,C)",
    "braille": "Text <-> grade-1 six-dot Braille",
    "morse": "Text <-> International Morse code",
    "leetspeak": "Text <-> leetspeak (3 levels)",
    "dancing-men": "Text <-> dancing men figures",
    "factoradic": "Decimal <-> factorial number system, one number per line",
}


def _pkg_version() -> str:
    try:
        from importlib.metadata import PackageNotFoundError, version

        try:
            return version("tcodec")
        except PackageNotFoundError:
            # script invoked from source, or metadata missing
            return "0+unknown"
    except Exception:
        return "0+unknown"


def _stderr_error(msg: str) -> None:
    print(f"{PREFIX} {msg}", file=sys.stderr)


def _stderr_info(msg: str) -> None:
    print(msg, file=sys.stderr)


def _wrap_arg(s: str) -> int:
    try:
        return parse_wrap(s)
    except UsageError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def _level_arg(s: str) -> int:
    try:
        return parse_level(s)
    except UsageError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


# -------------------------
# Parser
# -------------------------


def _add_common_args(p: argparse.ArgumentParser, tool: str) -> None:
    p.add_argument("-d", "--decode", action="store_true", help="Decode instead of encode")
    version = f"%(prog)s {_pkg_version()}"
    if tool == "factoradic":
        p.add_argument("-V", "--version", action="version", version=version)
        p.add_argument(
            "-v",
            "--verbose",
            action="store_true",
            default=None,
            help="Show the step-by-step conversion",
        )
    else:
        p.add_argument("-v", "--version", action="version", version=version)
    p.add_argument(
        "--config",
        default=None,
        help="Tool config (JSON). Use '@file.json' to load from file, or pass JSON inline.",
    )
    p.add_argument("--debug", action="store_true", help="Show stack traces on errors")
    p.add_argument("file", nargs="?", default="-", help="Input file ('-' or absent: stdin)")


def _add_wrap_arg(p: argparse.ArgumentParser, tool: str) -> None:
    p.add_argument(
        "-w",
        "--wrap",
        type=_wrap_arg,
        default=None,
        metavar="COLS",
        help=f"Wrap encoded lines after COLS characters (default {DEFAULTS[tool]['wrap']}, 0 = no wrap)",
    )


def _add_tool_args(p: argparse.ArgumentParser, tool: str) -> None:
    if tool in ("ascii85", "base85"):
        _add_wrap_arg(p, tool)
        if tool == "ascii85":
            p.add_argument(
                "-z",
                "--zero-compress",
                dest="zero_compress",
                action="store_true",
                default=None,
                help="Encode 4 zero bytes as 'z'",
            )
            p.add_argument(
                "-y",
                "--space-compress",
                dest="space_compress",
                action="store_true",
                default=None,
                help="Encode 4 spaces as 'y'",
            )
        p.add_argument(
            "-i",
            "--ignore-garbage",
            dest="ignore_garbage",
            action="store_true",
            default=None,
            help="When decoding, skip unknown characters with a warning",
        )
    elif tool == "binary":
        _add_wrap_arg(p, tool)
    elif tool == "dna":
        _add_wrap_arg(p, tool)
        p.add_argument(
            "-m",
            "--mapping",
            default=None,
            metavar="MAP",
            help="Nucleotides for 00,01,10,11 (default ATGC; e.g. AGCT, CGAT)",
        )
        p.add_argument(
            "-c",
            "--complement",
            action="store_true",
            default=None,
            help="Use the complementary strand (A<->T, G<->C)",
        )
        p.add_argument(
            "-s",
            "--stats",
            action="store_true",
            default=None,
            help="When encoding, print the mapping and GC content to stderr",
        )
    elif tool == "braille":
        p.add_argument(
            "-t",
            "--text-braille",
            dest="text_braille",
            action="store_true",
            default=None,
            help="Use 6-character 'o'/'.' cells instead of Unicode Braille",
        )
    elif tool == "morse":
        p.add_argument(
            "-s",
            "--separator",
            default=None,
            metavar="SEP",
            help="Separator between letters (default ' ')",
        )
        p.add_argument(
            "-w",
            "--word-sep",
            dest="word_sep",
            default=None,
            metavar="SEP",
            help="Separator between words (default ' / ')",
        )
    elif tool == "leetspeak":
        p.add_argument(
            "-l",
            "--level",
            type=_level_arg,
            default=None,
            help="Leet level: "
            + ", ".join(f"{n}={name}" for n, name in leet.LEVEL_NAMES.items())
            + " (default 1)",
        )
        p.add_argument(
            "-i",
            "--ignore-case",
            dest="ignore_case",
            action="store_true",
            default=None,
            help="Fold case (encode lowercases first, decode lowercases the result)",
        )
    elif tool == "dancing-men":
        p.add_argument(
            "-c",
            "--compact",
            action="store_true",
            default=None,
            help="One-line tokens instead of three-line figures",
        )
    elif tool == "factoradic":
        pass
    else:
        raise AssertionError(f"unknown tool: {tool}")


def build_tool_parser(tool: str, *, prog: str | None = None) -> argparse.ArgumentParser:
    """Parser for a single tool (used by the per-tool console scripts)."""
    p = argparse.ArgumentParser(prog=prog or f"tcodec-{tool}", description=TOOL_HELP[tool])
    _add_common_args(p, tool)
    _add_tool_args(p, tool)
    p.set_defaults(tool=tool)
    return p


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="tcodec", description="Text codec utilities")
    p.add_argument("--version", action="version", version=f"%(prog)s {_pkg_version()}")
    sub = p.add_subparsers(dest="tool", required=True, metavar="TOOL")
    for tool in TOOLS:
        sp = sub.add_parser(tool, help=TOOL_HELP[tool], description=TOOL_HELP[tool])
        _add_common_args(sp, tool)
        _add_tool_args(sp, tool)
    return p


# -------------------------
# Running a tool
# -------------------------


def resolve_config(ns: argparse.Namespace) -> ToolConfig:
    """Defaults < --config < CLI flags."""
    tool = ns.tool
    cfg = load_tool_config(tool, ns.config)
    return cfg.merged({k: getattr(ns, k, None) for k in DEFAULTS[tool]})


def run_tool(
    tool: str,
    cfg: ToolConfig,
    src: IO[Any],
    dst: IO[Any],
    *,
    decode: bool = False,
    warn: Warn | None = None,
    on_error: Callable[[str], None] | None = None,
    info: Callable[[str], None] | None = None,
    cancel: CancelToken | None = None,
) -> int:
    """Run one encode/decode over already-open streams. Returns an exit code."""
    warn = warn or stderr_warn
    opts = cfg.options

    if tool in ("ascii85", "base85"):
        variant = base85.VARIANTS[tool]
        if decode:
            base85.decode_stream(
                src,
                dst,
                variant,
                ignore_garbage=opts["ignore_garbage"],
                warn=warn,
                cancel=cancel,
            )
        else:
            base85.encode_stream(
                src,
                dst,
                variant,
                wrap_cols=opts["wrap"],
                zero_compress=opts.get("zero_compress", False),
                space_compress=opts.get("space_compress", False),
                cancel=cancel,
            )
        return EXIT_OK

    if tool in ("binary", "dna"):
        if tool == "binary":
            alphabet = bitstream.binary_alphabet()
        else:
            alphabet = bitstream.dna_alphabet(opts["mapping"], complement=opts["complement"])
        if decode:
            bitstream.decode_stream(src, dst, alphabet, warn=warn, cancel=cancel)
            return EXIT_OK
        show_stats = tool == "dna" and opts["stats"]
        counter = bitstream.NucleotideCounter()
        out: IO[Any] = _CountingWriter(dst, counter) if show_stats else dst
        bitstream.encode_stream(src, out, alphabet, wrap_cols=opts["wrap"], cancel=cancel)
        if show_stats:
            say = info or _stderr_info
            say("DNA mapping being used:")
            for line in bitstream.mapping_lines(alphabet):
                say(line)
            say(
                f"Sequence stats: {counter.total} nucleotides, "
                f"{counter.gc_percent:.1f}% GC content"
            )
        return EXIT_OK

    if tool == "braille":
        fn = braille.decode_stream if decode else braille.encode_stream
        fn(src, dst, text_mode=opts["text_braille"], warn=warn, cancel=cancel)
        return EXIT_OK

    if tool == "morse":
        fn = morse.decode_stream if decode else morse.encode_stream
        fn(
            src,
            dst,
            char_sep=opts["separator"],
            word_sep=opts["word_sep"],
            warn=warn,
            cancel=cancel,
        )
        return EXIT_OK

    if tool == "leetspeak":
        fn = leet.decode_stream if decode else leet.encode_stream
        fn(src, dst, level=opts["level"], ignore_case=opts["ignore_case"], cancel=cancel)
        return EXIT_OK

    if tool == "dancing-men":
        fn = dancing_men.decode_stream if decode else dancing_men.encode_stream
        fn(src, dst, compact=opts["compact"], warn=warn, cancel=cancel)
        return EXIT_OK

    if tool == "factoradic":
        failed = factoradic.process_stream(
            src,
            dst,
            decode=decode,
            verbose=opts["verbose"],
            warn=warn,
            on_error=on_error,
            cancel=cancel,
        )
        return EXIT_BAD_INPUT if failed else EXIT_OK

    raise AssertionError(f"unknown tool: {tool}")


class _CountingWriter:
    """Binary writer that feeds everything it writes to a NucleotideCounter."""

    def __init__(self, dst: IO[bytes], counter: bitstream.NucleotideCounter) -> None:
        self.dst = dst
        self.counter = counter

    def write(self, data: bytes) -> int:
        n = self.dst.write(data)
        self.counter.feed(data)
        return n

    def flush(self) -> None:
        self.dst.flush()


@contextmanager
def _open_input(path: str, *, text: bool) -> Iterator[IO[Any]]:
    if path == "-":
        if text:
            sys.stdin.reconfigure(encoding="utf-8", errors="replace")  # type: ignore[union-attr]
            yield sys.stdin
        else:
            yield sys.stdin.buffer
        return
    try:
        f: IO[Any] = (
            open(path, encoding="utf-8", errors="replace") if text else open(path, "rb")
        )
    except OSError as e:
        raise InputOpenError(f"cannot open {path}: {e.strerror or e}") from e
    with f:
        yield f


def _output_stream(*, text: bool) -> IO[Any]:
    if text:
        sys.stdout.reconfigure(encoding="utf-8")  # type: ignore[union-attr]
        return sys.stdout
    return sys.stdout.buffer


@contextmanager
def _sigint_cancels(cancel: CancelToken) -> Iterator[None]:
    """SIGINT sets the token; a second SIGINT falls back to KeyboardInterrupt."""

    def handler(signum: int, frame: FrameType | None) -> None:
        if cancel.cancelled:
            raise KeyboardInterrupt
        cancel.cancel()

    try:
        previous = signal.signal(signal.SIGINT, handler)
    except ValueError:
        # not in the main thread: leave the default behaviour alone
        yield
        return
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


def _execute(ns: argparse.Namespace) -> int:
    tool = ns.tool
    cfg = resolve_config(ns)
    if tool == "morse":
        morse.validate_separators(cfg.get("separator"), cfg.get("word_sep"))
    if tool == "dna":
        bitstream.validate_dna_mapping(cfg.get("mapping"))

    text = tool not in BYTE_TOOLS
    cancel = CancelToken()
    with _sigint_cancels(cancel), _open_input(ns.file, text=text) as src:
        dst = _output_stream(text=text)
        try:
            return run_tool(
                tool,
                cfg,
                src,
                dst,
                decode=bool(ns.decode),
                on_error=_stderr_error,
                cancel=cancel,
            )
        finally:
            try:
                dst.flush()
            except OSError as e:
                raise StreamWriteError(f"write error: {e}") from e


def _run(ns: argparse.Namespace) -> int:
    try:
        return _execute(ns)
    except SystemExit:
        raise
    except ToolConfigError as e:
        # Treat as usage/config error.
        if getattr(ns, "debug", False):
            raise
        _stderr_error(str(e))
        return EXIT_USAGE
    except Interrupted as e:
        if getattr(ns, "debug", False):
            raise
        stderr_warn(str(e))
        return EXIT_INTERRUPTED
    except KeyboardInterrupt:
        if getattr(ns, "debug", False):
            raise
        stderr_warn("interrupted: output is incomplete")
        return EXIT_INTERRUPTED
    except TCodecError as e:
        if getattr(ns, "debug", False):
            raise
        _stderr_error(str(e))
        return int(getattr(e, "exit_code", EXIT_GENERIC) or EXIT_GENERIC)
    except Exception as e:
        if getattr(ns, "debug", False):
            raise
        _stderr_error(f"error: {e}")
        return EXIT_GENERIC


def main(argv: Sequence[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    ns = build_parser().parse_args(argv)
    return _run(ns)


def tool_main(tool: str, argv: Sequence[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    ns = build_tool_parser(tool).parse_args(argv)
    return _run(ns)


def ascii85_main(argv: Sequence[str] | None = None) -> int:
    return tool_main("ascii85", argv)


def base85_main(argv: Sequence[str] | None = None) -> int:
    return tool_main("base85", argv)


def binary_main(argv: Sequence[str] | None = None) -> int:
    return tool_main("binary", argv)


def dna_main(argv: Sequence[str] | None = None) -> int:
    return tool_main("dna", argv)


def braille_main(argv: Sequence[str] | None = None) -> int:
    return tool_main("braille", argv)


def morse_main(argv: Sequence[str] | None = None) -> int:
    return tool_main("morse", argv)


def leetspeak_main(argv: Sequence[str] | None = None) -> int:
    return tool_main("leetspeak", argv)


def dancing_men_main(argv: Sequence[str] | None = None) -> int:
    return tool_main("dancing-men", argv)


def factoradic_main(argv: Sequence[str] | None = None) -> int:
    return tool_main("factoradic", argv)


if __name__ == "__main__":
    raise SystemExit(main())
