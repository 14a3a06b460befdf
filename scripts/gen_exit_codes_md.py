#!/usr/bin/env python3
"""Generate docs/exit_codes.md from src/tcodec/errors.py (single source of truth).

With --check, only compare: exit 1 when the committed file is stale.
"""

from __future__ import annotations

import sys
from pathlib import Path


def main(argv: list[str] | None = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    repo = Path(__file__).resolve().parents[1]
    sys.path.insert(0, str(repo / "src"))

    from tcodec import errors  # noqa: E402

    out = repo / "docs" / "exit_codes.md"
    rendered = errors.render_exit_codes_markdown()

    if "--check" in args:
        current = out.read_text(encoding="utf-8") if out.is_file() else ""
        if current != rendered:
            print(f"[tcodec] {out} is stale, run scripts/gen_exit_codes_md.py", file=sys.stderr)
            return 1
        print(f"[tcodec] {out} is up to date")
        return 0

    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(rendered, encoding="utf-8")
    print(f"[tcodec] wrote {out}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
