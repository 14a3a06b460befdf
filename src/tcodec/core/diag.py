"""Warning sinks.

Codecs never print: they get a ``warn`` callable. The CLI passes the stderr
sink, tests pass a ``WarningLog`` and look at what was reported.
"""

from __future__ import annotations

import sys
from collections.abc import Callable
from dataclasses import dataclass, field

PREFIX = "[tcodec]"

Warn = Callable[[str], None]


def stderr_warn(msg: str) -> None:
    print(f"{PREFIX} warning: {msg}", file=sys.stderr)


@dataclass
class WarningLog:
    """Collects warnings instead of printing them."""

    messages: list[str] = field(default_factory=list)

    def __call__(self, msg: str) -> None:
        self.messages.append(msg)

    def __len__(self) -> int:
        return len(self.messages)

    def joined(self) -> str:
        return "\n".join(self.messages)


def describe_char(c: str | int) -> str:
    """'x' (0x78) style description, for byte values and characters alike."""
    code = c if isinstance(c, int) else ord(c)
    ch = chr(code)
    shown = ch if ch.isprintable() and not ch.isspace() else "?"
    if code > 0xFF:
        return f"'{shown}' (U+{code:04X})"
    return f"'{shown}' (0x{code:02X})"
