"""Typed errors for tcodec.

Single source of truth for exit codes lives here.

Policy:
- Errors are small and boring.
- The CLI maps errors to stable exit codes (see EXIT_* constants).
- docs/exit_codes.md is generated from this module (scripts/gen_exit_codes_md.py).
"""

from __future__ import annotations

from dataclasses import dataclass

# -------------------------
# Exit codes (single source)
# -------------------------

EXIT_OK = 0
EXIT_USAGE = 2
EXIT_GENERIC = 10
EXIT_OPEN_FAILED = 11
EXIT_STREAM_IO = 12
EXIT_BAD_INPUT = 13
EXIT_INTERRUPTED = 14


@dataclass(frozen=True, slots=True)
class ExitCodeInfo:
    code: int
    name: str
    description: str


EXIT_CODES: tuple[ExitCodeInfo, ...] = (
    ExitCodeInfo(EXIT_OK, "OK", "Success"),
    ExitCodeInfo(EXIT_USAGE, "USAGE", "Usage/config error (invalid flags, wrap value, mapping, separator, config)"),
    ExitCodeInfo(EXIT_GENERIC, "GENERIC", "Generic failure (unexpected error)"),
    ExitCodeInfo(EXIT_OPEN_FAILED, "OPEN_FAILED", "Input file missing or unreadable"),
    ExitCodeInfo(EXIT_STREAM_IO, "STREAM_IO", "Read/write failure while streaming (partial output is kept)"),
    ExitCodeInfo(EXIT_BAD_INPUT, "BAD_INPUT", "Malformed input (invalid symbol, truncated group, overflow, bad digit)"),
    ExitCodeInfo(EXIT_INTERRUPTED, "INTERRUPTED", "Interrupted by the user, output is incomplete"),
)

# For convenience (fast lookup)
_EXIT_CODE_BY_NAME: dict[str, int] = {e.name: e.code for e in EXIT_CODES}
_EXIT_CODE_BY_CODE: dict[int, ExitCodeInfo] = {e.code: e for e in EXIT_CODES}


def exit_code_info(code: int) -> ExitCodeInfo | None:
    return _EXIT_CODE_BY_CODE.get(int(code))


def exit_code_by_name(name: str) -> int | None:
    return _EXIT_CODE_BY_NAME.get(name.strip().upper())


def render_exit_codes_markdown() -> str:
    """Render docs/exit_codes.md content."""
    lines: list[str] = []
    lines.append("# Exit codes\n")
    lines.append("> GENERATED FILE, do not edit manually.\n")
    lines.append("> Source of truth: `src/tcodec/errors.py` (EXIT_CODES).\n")
    lines.append("> Regenerate: `python scripts/gen_exit_codes_md.py`.\n\n")
    lines.append("These are the CLI exit codes you can rely on, for every tool.\n\n")
    lines.append("| Code | Name | Meaning |\n")
    lines.append("|---:|---|---|\n")
    for e in sorted(EXIT_CODES, key=lambda x: x.code):
        lines.append(f"| {e.code} | `{e.name}` | {e.description} |\n")
    lines.append("\n## Notes\n")
    lines.append("- Most internal errors extend `TCodecError` and carry an `exit_code`.\n")
    lines.append("- `--debug` re-raises errors to show full stack traces.\n")
    lines.append(
        "- `factoradic` keeps going after a bad line and returns `BAD_INPUT` at the end.\n"
    )
    return "".join(lines)


# ---------------
# Typed exceptions
# ---------------


class TCodecError(Exception):
    """Base error for tcodec."""

    exit_code: int = EXIT_GENERIC


class UsageError(TCodecError):
    exit_code = EXIT_USAGE


class InputOpenError(TCodecError):
    exit_code = EXIT_OPEN_FAILED


class StreamIOError(TCodecError):
    exit_code = EXIT_STREAM_IO


class StreamReadError(StreamIOError):
    pass


class StreamWriteError(StreamIOError):
    pass


class DecodeError(TCodecError):
    exit_code = EXIT_BAD_INPUT


class InvalidSymbol(DecodeError):
    pass


class MisplacedMarker(DecodeError):
    pass


class TruncatedGroup(DecodeError):
    pass


class Base85Overflow(DecodeError):
    pass


class FactoradicError(DecodeError):
    pass


class InvalidFactoradicDigit(FactoradicError):
    pass


class FactorialOverflow(FactoradicError):
    pass


class FactoradicOverflow(FactoradicError):
    pass


class Interrupted(TCodecError):
    exit_code = EXIT_INTERRUPTED
