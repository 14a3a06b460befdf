from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import TypeVar

K = TypeVar("K")
V = TypeVar("V")


@dataclass(frozen=True)
class LongestMatchTable:
    """
    Reverse lookup for variable-length symbols.

    At each position the longest candidate is tried first, down to length 1,
    so that a symbol which is a prefix of another (e.g. '|_' and '|_|') never
    shadows the longer one.
    """

    reverse: Mapping[str, str]
    max_len: int

    @classmethod
    def build(cls, reverse: Mapping[str, str]) -> LongestMatchTable:
        if any(not k for k in reverse):
            raise ValueError("simbolo vuoto nella tabella")
        return cls(dict(reverse), max((len(k) for k in reverse), default=0))

    def match(self, text: str, i: int) -> tuple[str, int] | None:
        """(decoded, consumed) for the longest symbol starting at text[i], or None."""
        for ln in range(min(self.max_len, len(text) - i), 0, -1):
            hit = self.reverse.get(text[i : i + ln])
            if hit is not None:
                return hit, ln
        return None

    def decode(self, text: str) -> str:
        """Decode ``text``, passing through characters that match nothing."""
        out: list[str] = []
        i = 0
        n = len(text)
        while i < n:
            m = self.match(text, i)
            if m is None:
                out.append(text[i])
                i += 1
            else:
                out.append(m[0])
                i += m[1]
        return "".join(out)


def first_wins(pairs: Iterable[tuple[K, V]]) -> dict[V, K]:
    """symbol -> source, keeping the first source seen for a shared symbol."""
    rev: dict[V, K] = {}
    for src, sym in pairs:
        rev.setdefault(sym, src)
    return rev
